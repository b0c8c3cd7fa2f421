"""Error hierarchy raised by the catalog client and feed pipeline."""

from __future__ import annotations

from typing import Any, Mapping


class CatalogClientError(Exception):
    """Base exception for all catalog client errors."""

    error_code = "CATALOG_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to an API error payload."""

        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }


class UpstreamUnavailable(CatalogClientError):
    """A request could not be completed after exhausting its attempts."""

    error_code = "UPSTREAM_UNAVAILABLE"

    def __init__(
        self,
        message: str,
        *,
        path: str,
        attempts: int,
        last_error: BaseException | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.path = path
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            message,
            details={"path": path, "attempts": attempts, **(details or {})},
        )


class NetworkUnreachable(UpstreamUnavailable):
    """The transport failed (DNS, connection, timeout) on every attempt."""

    error_code = "NETWORK_UNREACHABLE"


class UpstreamError(UpstreamUnavailable):
    """The upstream answered, but never with a usable response."""

    error_code = "UPSTREAM_ERROR"

    def __init__(
        self,
        message: str,
        *,
        path: str,
        attempts: int,
        status_code: int,
        body: str,
        last_error: BaseException | None = None,
    ) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(
            message,
            path=path,
            attempts=attempts,
            last_error=last_error,
            details={"status_code": status_code},
        )


class AggregationFailed(CatalogClientError):
    """Every configured feed source failed."""

    error_code = "AGGREGATION_FAILED"

    def __init__(self, errors: Mapping[str, BaseException]) -> None:
        self.errors = dict(errors)
        super().__init__(
            "All feed sources failed",
            details={key: str(error) for key, error in self.errors.items()},
        )


class NoEligibleVideo(CatalogClientError):
    """An entity has no video that can represent its freshness."""

    error_code = "NO_ELIGIBLE_VIDEO"
