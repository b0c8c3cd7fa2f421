"""Typed queries against The Movie Database (TMDB) catalog API."""

from __future__ import annotations

import logging
from typing import Any, Literal, Mapping

from ..config import Settings
from ..models import (
    CatalogEntity,
    CatalogPage,
    MediaKind,
    PromotionalVideo,
    decode_videos,
)
from ..utils import upstream_segment
from .executor import RequestExecutor

logger = logging.getLogger(__name__)

TimeWindow = Literal["day", "week"]


class TMDBClient:
    """Maps catalog operations onto TMDB endpoints via the request executor."""

    def __init__(self, settings: Settings, executor: RequestExecutor):
        if not settings.tmdb_api_key:
            raise ValueError("TMDB API key is required when initialising TMDBClient")
        self._settings = settings
        self._executor = executor

    async def list_entities(
        self,
        kind: MediaKind,
        path: str,
        params: Mapping[str, Any] | None = None,
        *,
        fresh: bool = False,
    ) -> CatalogPage:
        """Fetch one page of any list endpoint and decode it as ``kind``."""

        query = {"language": self._settings.tmdb_language, **(params or {})}
        payload = await self._executor.execute(path, query, fresh=fresh)
        return CatalogPage.from_payload(payload, kind=kind)

    async def search(
        self,
        query: str,
        *,
        kind: MediaKind = "movie",
        page: int = 1,
        year: int | None = None,
    ) -> CatalogPage:
        params: dict[str, Any] = {
            "query": query,
            "include_adult": "false",
            "page": page,
        }
        if year:
            if kind == "movie":
                params["year"] = year
            else:
                params["first_air_date_year"] = year
        return await self.list_entities(
            kind, f"/search/{upstream_segment(kind)}", params
        )

    async def trending(self, kind: MediaKind, window: TimeWindow = "week") -> CatalogPage:
        if window not in ("day", "week"):
            raise ValueError(f"Unsupported trending window: {window}")
        return await self.list_entities(
            kind, f"/trending/{upstream_segment(kind)}/{window}"
        )

    async def popular(self, kind: MediaKind, page: int = 1) -> CatalogPage:
        return await self.list_entities(
            kind, f"/{upstream_segment(kind)}/popular", {"page": page}
        )

    async def top_rated(self, kind: MediaKind, page: int = 1) -> CatalogPage:
        return await self.list_entities(
            kind, f"/{upstream_segment(kind)}/top_rated", {"page": page}
        )

    async def upcoming_movies(self, page: int = 1, *, fresh: bool = False) -> CatalogPage:
        return await self.list_entities(
            "movie", "/movie/upcoming", {"page": page}, fresh=fresh
        )

    async def now_playing_movies(
        self, page: int = 1, *, fresh: bool = False
    ) -> CatalogPage:
        return await self.list_entities(
            "movie", "/movie/now_playing", {"page": page}, fresh=fresh
        )

    async def on_the_air_series(
        self, page: int = 1, *, fresh: bool = False
    ) -> CatalogPage:
        return await self.list_entities(
            "series", "/tv/on_the_air", {"page": page}, fresh=fresh
        )

    async def airing_today_series(
        self, page: int = 1, *, fresh: bool = False
    ) -> CatalogPage:
        return await self.list_entities(
            "series", "/tv/airing_today", {"page": page}, fresh=fresh
        )

    async def discover(
        self,
        kind: MediaKind,
        *,
        genre: int | None = None,
        year: int | None = None,
        min_rating: float | None = None,
        page: int = 1,
        filters: Mapping[str, Any] | None = None,
    ) -> CatalogPage:
        """Discover titles using the common filters plus any raw ``filters``."""

        params: dict[str, Any] = {"page": page}
        if genre:
            params["with_genres"] = genre
        if year:
            params["primary_release_year" if kind == "movie" else "first_air_date_year"] = year
        if min_rating:
            params["vote_average.gte"] = min_rating
        if filters:
            params.update(filters)
        return await self.list_entities(
            kind, f"/discover/{upstream_segment(kind)}", params
        )

    async def details(self, kind: MediaKind, entity_id: int) -> CatalogEntity:
        """Return the full record for one title."""

        payload = await self._executor.execute(
            f"/{upstream_segment(kind)}/{entity_id}",
            {
                "language": self._settings.tmdb_language,
                "append_to_response": "credits,videos",
            },
        )
        if not isinstance(payload, dict):
            raise ValueError(f"Unexpected TMDB details payload for {kind} {entity_id}")
        return CatalogEntity.model_validate({**payload, "kind": kind})

    async def videos(
        self, kind: MediaKind, entity_id: int, *, fresh: bool = False
    ) -> list[PromotionalVideo]:
        """Return the promotional videos attached to one title."""

        payload = await self._executor.execute(
            f"/{upstream_segment(kind)}/{entity_id}/videos",
            fresh=fresh,
        )
        if not isinstance(payload, dict):
            logger.debug("Unexpected TMDB video payload for %s %s", kind, entity_id)
            return []
        return decode_videos(payload.get("results"))

    async def genres(self, kind: MediaKind) -> dict[int, str]:
        payload = await self._executor.execute(
            f"/genre/{upstream_segment(kind)}/list",
            {"language": self._settings.tmdb_language},
        )
        genres = payload.get("genres", []) if isinstance(payload, dict) else []
        return {
            int(entry["id"]): str(entry["name"])
            for entry in genres
            if isinstance(entry, dict) and "id" in entry and entry.get("name")
        }
