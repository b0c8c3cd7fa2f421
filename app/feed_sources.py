"""Discovery sources feeding the latest-trailers feed."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any

from .models import MediaKind


@dataclass(frozen=True)
class FeedSourceDefinition:
    """Describes one upstream list queried while building the feed.

    ``window`` is an optional ``(start, end)`` offset in days from today; when
    set, the date bounds are sent using the kind's release-date filter keys.
    """

    key: str
    title: str
    kind: MediaKind
    path: str
    params: tuple[tuple[str, Any], ...] = ()
    window: tuple[int, int] | None = None

    def build_params(self, today: date) -> dict[str, Any]:
        """Return query parameters for the request issued on ``today``."""

        params: dict[str, Any] = dict(self.params)
        if self.window is not None:
            start, end = self.window
            lower_key, upper_key = _WINDOW_KEYS[self.kind]
            params[lower_key] = (today + timedelta(days=start)).isoformat()
            params[upper_key] = (today + timedelta(days=end)).isoformat()
        return params


_WINDOW_KEYS: dict[str, tuple[str, str]] = {
    "movie": ("primary_release_date.gte", "primary_release_date.lte"),
    "series": ("first_air_date.gte", "first_air_date.lte"),
}


# Order matters: earlier sources win when the same title shows up twice.
FEED_SOURCES: tuple[FeedSourceDefinition, ...] = (
    FeedSourceDefinition(
        key="upcoming-movies",
        title="Upcoming Movies",
        kind="movie",
        path="/movie/upcoming",
    ),
    FeedSourceDefinition(
        key="upcoming-movies-later",
        title="Coming Later This Season",
        kind="movie",
        path="/discover/movie",
        params=(("sort_by", "popularity.desc"), ("include_adult", "false")),
        window=(31, 120),
    ),
    FeedSourceDefinition(
        key="now-playing-movies",
        title="Now Playing",
        kind="movie",
        path="/movie/now_playing",
    ),
    FeedSourceDefinition(
        key="on-the-air-series",
        title="On The Air",
        kind="series",
        path="/tv/on_the_air",
    ),
    FeedSourceDefinition(
        key="upcoming-series",
        title="Upcoming Series",
        kind="series",
        path="/discover/tv",
        params=(("sort_by", "popularity.desc"),),
        window=(0, 90),
    ),
)
