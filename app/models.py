"""Pydantic models describing upstream catalog payloads."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Iterable, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from .utils import build_image_url, parse_date, parse_timestamp

logger = logging.getLogger(__name__)

MediaKind = Literal["movie", "series"]
VideoType = Literal[
    "Trailer",
    "Teaser",
    "Clip",
    "Featurette",
    "Behind the Scenes",
    "Bloopers",
    "Opening Credits",
]

DEFAULT_IMAGE_BASE_URL = "https://image.tmdb.org/t/p"


class CatalogEntity(BaseModel):
    """A single film or series returned by the upstream catalog."""

    model_config = ConfigDict(populate_by_name=True)

    kind: MediaKind
    id: int
    title: str = Field(validation_alias=AliasChoices("title", "name"))
    original_title: str | None = Field(
        default=None,
        validation_alias=AliasChoices("original_title", "original_name"),
    )
    overview: str | None = None
    poster_path: str | None = None
    backdrop_path: str | None = None
    popularity: float | None = None
    vote_average: float | None = None
    vote_count: int | None = None
    release_date: date | None = Field(
        default=None,
        validation_alias=AliasChoices("release_date", "first_air_date"),
    )
    genre_ids: list[int] = Field(default_factory=list)
    genres: list[str] = Field(default_factory=list)
    runtime: int | None = None

    @field_validator("release_date", mode="before")
    @classmethod
    def _parse_release_date(cls, value: Any) -> date | None:
        return parse_date(value)

    @field_validator("genres", mode="before")
    @classmethod
    def _parse_genres(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        names: list[str] = []
        for entry in value:
            if isinstance(entry, dict):
                entry = entry.get("name")
            if isinstance(entry, str) and entry.strip():
                names.append(entry.strip())
        return names

    @property
    def identity(self) -> tuple[str, int]:
        """Return the ``(kind, id)`` pair identifying this work."""

        return (self.kind, self.id)

    @property
    def year(self) -> int | None:
        return self.release_date.year if self.release_date else None

    def poster_url(
        self, size: str = "w500", *, base_url: str = DEFAULT_IMAGE_BASE_URL
    ) -> str | None:
        return build_image_url(self.poster_path, base_url, size)

    def backdrop_url(
        self, size: str = "w1280", *, base_url: str = DEFAULT_IMAGE_BASE_URL
    ) -> str | None:
        return build_image_url(self.backdrop_path, base_url, size)

    def to_card(self, *, base_url: str = DEFAULT_IMAGE_BASE_URL) -> dict[str, object]:
        """Return the compact representation used by listing cards."""

        return {
            "id": self.id,
            "kind": self.kind,
            "title": self.title,
            "poster": self.poster_url(base_url=base_url),
            "backdrop": self.backdrop_url(base_url=base_url),
            "year": str(self.year) if self.year else "TBA",
            "rating": f"{self.vote_average or 0:.1f}",
            "genre": self.genres[0] if self.genres else "Unknown",
        }


class PromotionalVideo(BaseModel):
    """A promotional video attached to one catalog entity."""

    id: str | None = None
    key: str
    name: str | None = None
    site: str
    type: VideoType
    official: bool | None = None
    published_at: datetime | None = None
    iso_639_1: str | None = None
    size: int | None = None

    @field_validator("published_at", mode="before")
    @classmethod
    def _parse_published_at(cls, value: Any) -> datetime | None:
        return parse_timestamp(value)

    @property
    def watch_url(self) -> str | None:
        if self.site == "YouTube":
            return f"https://www.youtube.com/watch?v={self.key}"
        if self.site == "Vimeo":
            return f"https://vimeo.com/{self.key}"
        return None


class RankedFeedItem(BaseModel):
    """An entity paired with the video that determines its freshness."""

    entity: CatalogEntity
    video: PromotionalVideo
    published_at: datetime

    def to_payload(self, *, base_url: str = DEFAULT_IMAGE_BASE_URL) -> dict[str, object]:
        return {
            **self.entity.to_card(base_url=base_url),
            "video": {
                "key": self.video.key,
                "name": self.video.name,
                "site": self.video.site,
                "type": self.video.type,
                "official": self.video.official,
                "url": self.video.watch_url,
            },
            "publishedAt": self.published_at.isoformat(),
        }


class CatalogPage(BaseModel):
    """One page of a paginated upstream list."""

    page: int = 1
    results: list[CatalogEntity] = Field(default_factory=list)
    total_pages: int = 0
    total_results: int = 0

    @classmethod
    def from_payload(cls, payload: Any, *, kind: MediaKind) -> "CatalogPage":
        if not isinstance(payload, dict):
            return cls()
        return cls(
            page=_coerce_int(payload.get("page"), default=1),
            results=decode_entities(payload.get("results"), kind=kind),
            total_pages=_coerce_int(payload.get("total_pages"), default=0),
            total_results=_coerce_int(payload.get("total_results"), default=0),
        )


def decode_entities(items: Any, *, kind: MediaKind) -> list[CatalogEntity]:
    """Decode a ``results`` array, skipping entries that fail validation."""

    entities: list[CatalogEntity] = []
    for entry in _iter_dicts(items):
        try:
            entities.append(CatalogEntity.model_validate({**entry, "kind": kind}))
        except ValidationError as exc:
            logger.debug("Skipping undecodable %s entry %s: %s", kind, entry.get("id"), exc)
    return entities


def decode_videos(items: Any) -> list[PromotionalVideo]:
    """Decode a video ``results`` array, skipping entries that fail validation."""

    videos: list[PromotionalVideo] = []
    for entry in _iter_dicts(items):
        try:
            videos.append(PromotionalVideo.model_validate(entry))
        except ValidationError as exc:
            logger.debug("Skipping undecodable video %s: %s", entry.get("key"), exc)
    return videos


def _iter_dicts(items: Any) -> Iterable[dict[str, Any]]:
    if not isinstance(items, list):
        return []
    return [entry for entry in items if isinstance(entry, dict)]


def _coerce_int(value: Any, *, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default
