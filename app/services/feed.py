"""Caller-facing feed operations built from the catalog pipeline stages."""

from __future__ import annotations

import logging
from datetime import date
from typing import Sequence

import httpx

from ..config import Settings
from ..feed_sources import FeedSourceDefinition
from ..models import CatalogEntity, MediaKind, RankedFeedItem
from .aggregator import ListAggregator
from .executor import RequestExecutor
from .ranking import FreshnessRanker
from .tmdb import TMDBClient

logger = logging.getLogger(__name__)


class FeedService:
    """Runs the staged aggregate-then-rank pipeline for the trailer feed.

    The service holds no state between calls: each invocation fetches fresh
    source lists and fresh video metadata.
    """

    def __init__(
        self,
        settings: Settings,
        client: TMDBClient,
        aggregator: ListAggregator,
        ranker: FreshnessRanker,
    ):
        self._settings = settings
        self._client = client
        self._aggregator = aggregator
        self._ranker = ranker

    @property
    def client(self) -> TMDBClient:
        return self._client

    @property
    def settings(self) -> Settings:
        return self._settings

    async def aggregate(
        self,
        sources: Sequence[FeedSourceDefinition] | None = None,
        *,
        today: date | None = None,
    ) -> list[CatalogEntity]:
        resolved = self._settings.feed_sources if sources is None else sources
        return await self._aggregator.aggregate(resolved, today=today)

    async def rank_by_freshness(
        self,
        entities: Sequence[CatalogEntity],
        max_results: int | None = None,
    ) -> list[RankedFeedItem]:
        return await self._ranker.rank(entities, max_results)

    async def latest_trailers(
        self,
        max_results: int | None = None,
        *,
        today: date | None = None,
    ) -> list[RankedFeedItem]:
        """Return the most recently promoted titles across all feed sources."""

        entities = await self.aggregate(today=today)
        ranked = await self.rank_by_freshness(entities, max_results)
        logger.info(
            "Ranked %s of %s aggregated entities by trailer freshness",
            len(ranked),
            len(entities),
        )
        return ranked

    async def fetch_details(self, kind: MediaKind, entity_id: int) -> CatalogEntity:
        return await self._client.details(kind, entity_id)


def create_feed_service(settings: Settings, http_client: httpx.AsyncClient) -> FeedService:
    """Wire the executor, query layer and pipeline stages around ``http_client``."""

    executor = RequestExecutor(settings, http_client)
    client = TMDBClient(settings, executor)
    aggregator = ListAggregator(
        client,
        movie_limit=settings.movie_source_limit,
        series_limit=settings.series_source_limit,
    )
    ranker = FreshnessRanker(
        client,
        site=settings.video_site,
        max_results=settings.feed_max_results,
        concurrency=settings.video_fetch_concurrency,
    )
    return FeedService(settings, client, aggregator, ranker)
