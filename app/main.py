"""Entry point for the FastAPI-powered trailer feed service."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any, NoReturn

import httpx
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .exceptions import (
    AggregationFailed,
    CatalogClientError,
    NetworkUnreachable,
    UpstreamError,
)
from .models import CatalogPage, MediaKind
from .services.feed import FeedService, create_feed_service
from .services.tmdb import TimeWindow

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app: FastAPI

_KIND_ALIASES: dict[str, MediaKind] = {
    "movie": "movie",
    "movies": "movie",
    "series": "series",
    "tv": "series",
}


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    exit_stack = AsyncExitStack()
    http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(
            base_url=str(settings.tmdb_api_url),
            timeout=httpx.Timeout(settings.request_timeout_seconds, connect=5.0),
            headers={"User-Agent": f"{settings.app_name} (trailerfeed)"},
        )
    )
    if settings.tmdb_api_key:
        fastapi_app.state.feed_service = create_feed_service(settings, http_client)
    else:
        logger.warning("TMDB_API_KEY is not configured; catalog endpoints are disabled")

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Latest-trailer feed and catalog lookups backed by TMDB",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def get_feed_service(fastapi_app: FastAPI) -> FeedService:
    service = getattr(fastapi_app.state, "feed_service", None)
    if not isinstance(service, FeedService):
        raise HTTPException(status_code=503, detail="Catalog service not configured")
    return service


def register_routes(fastapi_app: FastAPI) -> None:
    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get("/api/feed/latest-trailers")
    async def latest_trailers(
        limit: int | None = Query(default=None, ge=1, le=200),
    ) -> JSONResponse:
        service = get_feed_service(fastapi_app)
        try:
            items = await service.latest_trailers(limit)
        except CatalogClientError as exc:
            _raise_http_error(exc)
        image_base = service.settings.tmdb_image_url
        return JSONResponse(
            {"items": [item.to_payload(base_url=image_base) for item in items]}
        )

    @fastapi_app.get("/api/search")
    async def search(
        query: str = Query(min_length=1),
        kind: str = "movie",
        page: int = Query(default=1, ge=1, le=500),
    ) -> JSONResponse:
        service = get_feed_service(fastapi_app)
        resolved_kind = _resolve_kind(kind)
        try:
            result = await service.client.search(query, kind=resolved_kind, page=page)
        except CatalogClientError as exc:
            _raise_http_error(exc)
        return JSONResponse(_page_payload(service, result))

    @fastapi_app.get("/api/trending/{kind}")
    async def trending(kind: str, window: str = "week") -> JSONResponse:
        service = get_feed_service(fastapi_app)
        resolved_kind = _resolve_kind(kind)
        if window not in ("day", "week"):
            raise HTTPException(status_code=400, detail="Unsupported trending window")
        time_window: TimeWindow = "day" if window == "day" else "week"
        try:
            result = await service.client.trending(resolved_kind, time_window)
        except CatalogClientError as exc:
            _raise_http_error(exc)
        return JSONResponse(_page_payload(service, result))

    @fastapi_app.get("/api/{kind}/{entity_id:int}")
    async def details(kind: str, entity_id: int) -> JSONResponse:
        service = get_feed_service(fastapi_app)
        resolved_kind = _resolve_kind(kind)
        try:
            entity = await service.fetch_details(resolved_kind, entity_id)
        except CatalogClientError as exc:
            _raise_http_error(exc)
        except ValueError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        payload = entity.model_dump(mode="json")
        payload["card"] = entity.to_card(base_url=service.settings.tmdb_image_url)
        return JSONResponse(payload)

    @fastapi_app.get("/api/{kind}/{entity_id:int}/videos")
    async def videos(kind: str, entity_id: int) -> JSONResponse:
        service = get_feed_service(fastapi_app)
        resolved_kind = _resolve_kind(kind)
        try:
            results = await service.client.videos(resolved_kind, entity_id)
        except CatalogClientError as exc:
            _raise_http_error(exc)
        return JSONResponse(
            {"results": [video.model_dump(mode="json") for video in results]}
        )

    @fastapi_app.get("/api/{kind}/{listing}")
    async def catalog_listing(
        kind: str,
        listing: str,
        page: int = Query(default=1, ge=1, le=500),
    ) -> JSONResponse:
        service = get_feed_service(fastapi_app)
        resolved_kind = _resolve_kind(kind)
        client = service.client
        try:
            if listing == "popular":
                result = await client.popular(resolved_kind, page)
            elif listing == "top-rated":
                result = await client.top_rated(resolved_kind, page)
            elif listing == "now-playing" and resolved_kind == "movie":
                result = await client.now_playing_movies(page)
            elif listing == "airing-today" and resolved_kind == "series":
                result = await client.airing_today_series(page)
            else:
                raise HTTPException(status_code=404, detail="Unknown listing")
        except CatalogClientError as exc:
            _raise_http_error(exc)
        return JSONResponse(_page_payload(service, result))


def _resolve_kind(value: str) -> MediaKind:
    kind = _KIND_ALIASES.get(value.strip().lower())
    if kind is None:
        raise HTTPException(status_code=400, detail="Unsupported content type")
    return kind


def _page_payload(service: FeedService, page: CatalogPage) -> dict[str, Any]:
    image_base = service.settings.tmdb_image_url
    return {
        "page": page.page,
        "totalPages": page.total_pages,
        "totalResults": page.total_results,
        "results": [entity.to_card(base_url=image_base) for entity in page.results],
    }


def _raise_http_error(exc: CatalogClientError) -> NoReturn:
    if isinstance(exc, AggregationFailed):
        detail = exc.to_dict()
        detail["retry"] = True
        raise HTTPException(status_code=503, detail=detail) from exc
    if isinstance(exc, NetworkUnreachable):
        raise HTTPException(status_code=503, detail=exc.to_dict()) from exc
    if isinstance(exc, UpstreamError):
        status = 404 if exc.status_code == 404 else 502
        raise HTTPException(status_code=status, detail=exc.to_dict()) from exc
    raise HTTPException(status_code=502, detail=exc.to_dict()) from exc


app = create_app()


if __name__ == "__main__":  # pragma: no cover - manual execution
    from trailerfeed.__main__ import main

    main()
