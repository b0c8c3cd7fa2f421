"""Freshness ranking of catalog entities by their promotional videos."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from functools import cmp_to_key
from typing import Sequence

from ..exceptions import NoEligibleVideo
from ..models import CatalogEntity, PromotionalVideo, RankedFeedItem
from .tmdb import TMDBClient

logger = logging.getLogger(__name__)

# Teasers are only considered when no trailer is hosted on the eligible site.
ELIGIBLE_VIDEO_TYPES: tuple[str, ...] = ("Trailer", "Teaser")


def compare_published(a: datetime | None, b: datetime | None) -> int | None:
    """Three-valued timestamp comparison.

    Returns ``1``/``-1``/``0`` as ``a`` is later, earlier or equal to ``b``. A
    present timestamp always beats an absent one, and two absent timestamps are
    unordered (``None``).
    """

    if a is None and b is None:
        return None
    if b is None:
        return 1
    if a is None:
        return -1
    if a > b:
        return 1
    if a < b:
        return -1
    return 0


def _newest_first(a: RankedFeedItem, b: RankedFeedItem) -> int:
    return -(compare_published(a.published_at, b.published_at) or 0)


def select_candidate(
    videos: Sequence[PromotionalVideo], *, site: str
) -> PromotionalVideo:
    """Pick the video representing an entity's freshness.

    Raises :class:`NoEligibleVideo` when no trailer or teaser hosted on ``site``
    carries a publish timestamp.
    """

    candidates: list[PromotionalVideo] = []
    for video_type in ELIGIBLE_VIDEO_TYPES:
        candidates = [
            video for video in videos if video.site == site and video.type == video_type
        ]
        if candidates:
            break
    if not candidates:
        raise NoEligibleVideo(f"No trailer or teaser hosted on {site}")

    official = [video for video in candidates if video.official is True]
    if official:
        candidates = official

    best: PromotionalVideo | None = None
    for video in candidates:
        if best is None:
            if video.published_at is not None:
                best = video
            continue
        if compare_published(video.published_at, best.published_at) == 1:
            best = video
    if best is None:
        raise NoEligibleVideo("No eligible video has a publish timestamp")
    return best


class FreshnessRanker:
    """Orders entities by the publish time of their best promotional video."""

    def __init__(
        self,
        client: TMDBClient,
        *,
        site: str = "YouTube",
        max_results: int = 24,
        concurrency: int = 8,
    ):
        self._client = client
        self._site = site
        self._max_results = max_results
        self._concurrency = max(1, concurrency)

    async def rank(
        self,
        entities: Sequence[CatalogEntity],
        max_results: int | None = None,
    ) -> list[RankedFeedItem]:
        """Return at most ``max_results`` entities, most recently promoted first."""

        limit = self._max_results if max_results is None else max_results
        if limit <= 0 or not entities:
            return []

        semaphore = asyncio.Semaphore(self._concurrency)

        async def _fetch(entity: CatalogEntity) -> list[PromotionalVideo]:
            async with semaphore:
                return await self._client.videos(entity.kind, entity.id, fresh=True)

        tasks = [asyncio.create_task(_fetch(entity)) for entity in entities]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        items: list[RankedFeedItem] = []
        for entity, result in zip(entities, results):
            if isinstance(result, Exception):
                logger.warning(
                    "Video lookup failed for %s %s: %s", entity.kind, entity.id, result
                )
                continue
            if isinstance(result, BaseException):
                raise result
            try:
                video = select_candidate(result, site=self._site)
            except NoEligibleVideo as exc:
                logger.debug("Excluding %s %s: %s", entity.kind, entity.id, exc)
                continue
            items.append(
                RankedFeedItem(entity=entity, video=video, published_at=video.published_at)
            )

        # sorted() is stable, so equal timestamps keep their input order.
        ordered = sorted(items, key=cmp_to_key(_newest_first))
        return ordered[:limit]
