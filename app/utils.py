"""Utility helpers for the trailer feed service."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any


def parse_date(value: Any) -> date | None:
    """Return a ``date`` for ``YYYY-MM-DD`` strings, ``None`` when unusable."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if len(text) < 10:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def parse_timestamp(value: Any) -> datetime | None:
    """Return a timezone-aware ``datetime`` or ``None`` for missing/bad input.

    Naive values are assumed to be UTC so every parsed timestamp is comparable.
    """

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = f"{text[:-1]}+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def build_image_url(path: str | None, base_url: str, size: str) -> str | None:
    """Join an upstream image path with the image CDN base and size."""

    if not path:
        return None
    if path.startswith("http"):
        return path
    return f"{base_url.rstrip('/')}/{size}{path}"


def upstream_segment(kind: str) -> str:
    """Return the upstream path segment used for a media kind."""

    if kind == "movie":
        return "movie"
    if kind == "series":
        return "tv"
    raise ValueError(f"Unsupported media kind: {kind}")
