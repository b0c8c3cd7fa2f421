"""Trailer feed: TMDB catalog client, freshness ranking and HTTP service.

Exports resolve lazily so importing the library does not build the FastAPI app.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

_EXPORTS: dict[str, str] = {
    "app": "app.main",
    "create_app": "app.main",
    "FeedService": "app.services.feed",
    "create_feed_service": "app.services.feed",
    "RequestExecutor": "app.services.executor",
    "RetryPolicy": "app.services.executor",
    "TMDBClient": "app.services.tmdb",
}

__all__ = sorted(_EXPORTS)


def __getattr__(name: str) -> Any:
    module_name = _EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module 'app' has no attribute {name}")
    return getattr(import_module(module_name), name)
