"""Concurrent multi-source list aggregation with identity de-duplication."""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timezone
from typing import Iterable, Sequence

from ..exceptions import AggregationFailed
from ..feed_sources import FeedSourceDefinition
from ..models import CatalogEntity, MediaKind
from .tmdb import TMDBClient

logger = logging.getLogger(__name__)


class ListAggregator:
    """Fetches several discovery lists at once and merges them in priority order.

    The per-kind limits cap how many entities each source contributes before
    merging; they are fixed configuration rather than derived from the feed size.
    """

    def __init__(
        self,
        client: TMDBClient,
        *,
        movie_limit: int = 30,
        series_limit: int = 15,
    ):
        self._client = client
        self._limits: dict[str, int] = {"movie": movie_limit, "series": series_limit}

    def limit_for(self, kind: MediaKind) -> int:
        return self._limits[kind]

    async def aggregate(
        self,
        sources: Sequence[FeedSourceDefinition],
        *,
        today: date | None = None,
    ) -> list[CatalogEntity]:
        """Return the merged, de-duplicated entities of every reachable source."""

        if not sources:
            return []
        resolved_today = today or datetime.now(timezone.utc).date()

        tasks = [
            asyncio.create_task(self._fetch_source(source, resolved_today))
            for source in sources
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        successful: list[list[CatalogEntity]] = []
        failures: dict[str, BaseException] = {}
        for source, result in zip(sources, results):
            if isinstance(result, Exception):
                logger.warning("Feed source %s failed: %s", source.key, result)
                failures[source.key] = result
                continue
            if isinstance(result, BaseException):
                raise result
            successful.append(result)

        if not successful:
            raise AggregationFailed(failures)

        merged = merge_unique(successful)
        logger.info(
            "Aggregated %s entities from %s/%s feed sources",
            len(merged),
            len(successful),
            len(sources),
        )
        return merged

    async def _fetch_source(
        self, source: FeedSourceDefinition, today: date
    ) -> list[CatalogEntity]:
        page = await self._client.list_entities(
            source.kind,
            source.path,
            source.build_params(today),
            fresh=True,
        )
        return page.results[: self.limit_for(source.kind)]


def merge_unique(groups: Iterable[Iterable[CatalogEntity]]) -> list[CatalogEntity]:
    """Concatenate ``groups`` keeping only the first entity seen per identity."""

    seen: set[tuple[str, int]] = set()
    merged: list[CatalogEntity] = []
    for group in groups:
        for entity in group:
            if entity.identity in seen:
                continue
            seen.add(entity.identity)
            merged.append(entity)
    return merged
