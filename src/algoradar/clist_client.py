from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

import requests

from algoradar.config import Settings
from algoradar.contest_mapper import map_contests
from algoradar.contest_record import ContestRecord
from algoradar.errors import (
    ConfigurationError,
    TransportError,
    UpstreamError,
    UpstreamRateLimitedError,
    UpstreamTimeoutError,
)
from algoradar.time_normalizer import resolve_timezone
from algoradar.utils.logger import get_logger
from algoradar.utils.now import Now

HTTP_STATUS_TOO_MANY_REQUESTS = 429

__all__ = [
    "ClistClient",
    "ClistClientContext",
    "HTTP_STATUS_TOO_MANY_REQUESTS",
]


@dataclass(slots=True)
class ClistClientContext:
    """Context for CLIST API interactions.

    Attributes:
        settings: Application settings used for API calls.
        logger: Logger for client-specific messages.
        http_get: Optional replacement for ``requests.get``.
    """

    settings: Settings
    logger: logging.Logger
    http_get: Callable[..., requests.Response] | None = None


class ClistClient:
    """Client for the CLIST contest listing API."""

    def __init__(self, context: ClistClientContext) -> None:
        self._context = context

    @property
    def settings(self) -> Settings:
        return self._context.settings

    @property
    def logger(self) -> logging.Logger:
        return self._context.logger

    def fetch_contests(self, now: datetime | None = None) -> list[ContestRecord]:
        """Fetch upcoming contests and map them into records.

        Args:
            now: Mapping instant; defaults to the current time.

        Returns:
            Upcoming contests sorted by start.
        """

        raw_contests = self.fetch_raw_contests()
        contests = map_contests(
            raw_contests,
            now=now or Now.as_datetime(),
            upstream_tz=resolve_timezone(self.settings.upstream_tz),
            display_tz=resolve_timezone(self.settings.display_tz),
        )
        self.logger.info(
            "Mapped %s upcoming contests from %s raw rows", len(contests), len(raw_contests)
        )
        return contests

    def fetch_raw_contests(self) -> list[object]:
        """Issue one bounded GET against CLIST.

        Returns:
            The raw ``objects`` list, empty when the field is absent.

        Raises:
            ConfigurationError: When the API key or username is missing.
            UpstreamRateLimitedError: On HTTP 429.
            UpstreamError: On any other non-2xx status or an undecodable body.
            UpstreamTimeoutError: When the request exceeds the timeout.
            TransportError: On other network failures.
        """

        params = self._build_params()
        self.logger.info("Fetching from CLIST API...")
        response = self._get(params)
        if response.status_code == HTTP_STATUS_TOO_MANY_REQUESTS:
            raise UpstreamRateLimitedError()
        if not 200 <= response.status_code < 300:
            raise UpstreamError(
                f"CLIST API error: {response.status_code}", status_code=response.status_code
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamError(
                "CLIST API returned invalid JSON", status_code=response.status_code
            ) from exc
        objects = payload.get("objects") if isinstance(payload, dict) else None
        if not isinstance(objects, list):
            return []
        return objects

    def _build_params(self) -> dict[str, str | int]:
        clist = self.settings.clist
        if not clist.api_key or not clist.username:
            raise ConfigurationError("API credentials not configured")
        return {
            "username": clist.username,
            "api_key": clist.api_key,
            "upcoming": "true",
            "limit": clist.limit,
            "order_by": "start",
        }

    def _get(self, params: dict[str, str | int]) -> requests.Response:
        clist = self.settings.clist
        http_get = self._context.http_get or requests.get
        try:
            return http_get(
                clist.api_url,
                params=params,
                headers={"Accept": "application/json", "User-Agent": clist.user_agent},
                timeout=clist.timeout_s,
            )
        except requests.Timeout as exc:
            raise UpstreamTimeoutError("Request timeout") from exc
        except requests.RequestException as exc:
            raise TransportError(f"CLIST request failed: {exc}") from exc


def build_clist_client(settings: Settings) -> ClistClient:
    """Build a CLIST client bound to the package logger."""
    return ClistClient(ClistClientContext(settings=settings, logger=get_logger(__name__)))
