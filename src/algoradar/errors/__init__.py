"""Custom error types used in algoradar."""

from __future__ import annotations


class AlgoradarError(Exception):
    """Base class for algoradar failures."""


class ConfigurationError(AlgoradarError):
    """Required configuration is missing; never retried."""


class TransportError(AlgoradarError):
    """Network failure before an HTTP status was received."""


class UpstreamTimeoutError(AlgoradarError, TimeoutError):
    """A bounded HTTP wait was exceeded."""


class UpstreamError(AlgoradarError):
    """Upstream answered with a non-success status or an unusable body."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamRateLimitedError(UpstreamError):
    """Upstream rate limit (HTTP 429)."""

    def __init__(self, message: str = "CLIST rate limit exceeded") -> None:
        super().__init__(message, status_code=429)


class BackendError(AlgoradarError):
    """The algoradar backend answered with a non-success status or bad body."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ParseError(AlgoradarError, ValueError):
    """A single contest record could not be mapped."""


class StorageError(AlgoradarError):
    """Local persistence failed."""


class ServiceUnavailableError(AlgoradarError):
    """No fresh data could be fetched and no usable cache exists."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


__all__ = [
    "AlgoradarError",
    "BackendError",
    "ConfigurationError",
    "ParseError",
    "ServiceUnavailableError",
    "StorageError",
    "TransportError",
    "UpstreamError",
    "UpstreamRateLimitedError",
    "UpstreamTimeoutError",
]
