"""Resilient request execution against the upstream catalog API."""

from __future__ import annotations

import asyncio
import itertools
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Literal, Mapping

import httpx

from ..config import Settings
from ..exceptions import NetworkUnreachable, UpstreamError

logger = logging.getLogger(__name__)

CACHE_BUST_PARAM = "_t"

_cache_bust_counter = itertools.count()

Sleep = Callable[[float], Awaitable[None]]
RequestState = Literal["attempting", "succeeded", "exhausted"]


def default_retry_on(error: BaseException) -> bool:
    """Retry every transport failure and every non-success status.

    Client errors (4xx) are retried as well; narrowing this to 5xx is left to
    callers who inject their own predicate.
    """

    return isinstance(error, (httpx.TransportError, httpx.HTTPStatusError))


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff policy."""

    max_attempts: int = 3
    backoff_base: float = 1.0
    retry_on: Callable[[BaseException], bool] = default_retry_on

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def delay_for(self, attempt: int) -> float:
        """Return the wait after the 1-based ``attempt`` failed: 1, 2, 4, ... units."""

        return self.backoff_base * 2 ** (attempt - 1)

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        return cls(
            max_attempts=settings.request_max_attempts,
            backoff_base=settings.backoff_base_seconds,
        )


@dataclass(slots=True)
class RetryableRequest:
    """Attempt bookkeeping for one logical request."""

    path: str
    params: dict[str, Any] = field(default_factory=dict)
    max_attempts: int = 3
    attempt: int = 0
    last_error: BaseException | None = None
    state: RequestState = "attempting"

    @property
    def has_attempts_left(self) -> bool:
        return self.attempt < self.max_attempts


def cache_bust_token() -> str:
    """Return a token that differs from every previously issued one."""

    return f"{time.time_ns()}-{next(_cache_bust_counter)}"


class RequestExecutor:
    """Performs upstream GET requests with retries, backoff and cache-busting."""

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient,
        *,
        policy: RetryPolicy | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self._settings = settings
        self._client = http_client
        self._policy = policy or RetryPolicy.from_settings(settings)
        self._sleep = sleep
        self._timeout = httpx.Timeout(settings.request_timeout_seconds)

    async def execute(
        self,
        path: str,
        params: Mapping[str, Any] | None = None,
        *,
        fresh: bool = False,
        max_attempts: int | None = None,
    ) -> Any:
        """Return the decoded JSON body for ``path`` or raise a classified error."""

        attempts = self._policy.max_attempts if max_attempts is None else max_attempts
        if attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        request = RetryableRequest(
            path=path,
            params=dict(params or {}),
            max_attempts=attempts,
        )
        if self._settings.tmdb_api_key:
            request.params["api_key"] = self._settings.tmdb_api_key

        while request.has_attempts_left:
            request.attempt += 1
            query = dict(request.params)
            if fresh:
                query[CACHE_BUST_PARAM] = cache_bust_token()
            try:
                response = await self._client.get(
                    path, params=query, timeout=self._timeout
                )
                response.raise_for_status()
            except httpx.HTTPError as exc:
                request.last_error = exc
                if not self._policy.retry_on(exc) or not request.has_attempts_left:
                    break
                delay = self._policy.delay_for(request.attempt)
                logger.info(
                    "Upstream request %s failed on attempt %s/%s (%s). Retrying in %.1fs",
                    path,
                    request.attempt,
                    request.max_attempts,
                    _describe(exc),
                    delay,
                )
                await self._sleep(delay)
                continue

            try:
                payload = response.json()
            except ValueError as exc:
                request.state = "exhausted"
                logger.warning("Upstream returned a non-JSON body for %s", path)
                raise UpstreamError(
                    f"Upstream returned an undecodable body for {path}",
                    path=path,
                    attempts=request.attempt,
                    status_code=response.status_code,
                    body=response.text,
                    last_error=exc,
                ) from exc
            request.state = "succeeded"
            return payload

        request.state = "exhausted"
        raise self._classify(request) from request.last_error

    @staticmethod
    def _classify(request: RetryableRequest) -> NetworkUnreachable | UpstreamError:
        error = request.last_error
        if isinstance(error, httpx.HTTPStatusError):
            status = error.response.status_code
            logger.warning(
                "Upstream request %s failed after %s attempt(s) with status %s",
                request.path,
                request.attempt,
                status,
            )
            return UpstreamError(
                f"Upstream returned {status} for {request.path}",
                path=request.path,
                attempts=request.attempt,
                status_code=status,
                body=error.response.text,
                last_error=error,
            )
        logger.warning(
            "Upstream request %s unreachable after %s attempt(s): %s",
            request.path,
            request.attempt,
            _describe(error),
        )
        return NetworkUnreachable(
            f"Unable to reach upstream for {request.path}",
            path=request.path,
            attempts=request.attempt,
            last_error=error,
        )


def _describe(error: BaseException | None) -> str:
    if isinstance(error, httpx.HTTPStatusError):
        return f"status {error.response.status_code}"
    if error is None:
        return "unknown error"
    return error.__class__.__name__
