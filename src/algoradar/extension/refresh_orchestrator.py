"""Refresh state machine of the extension background process.

``IDLE -> FETCHING -> SUCCESS``, or ``FETCHING -> RETRYING -> FETCHING`` until
the retry budget is spent, then ``EXHAUSTED`` and the local snapshot is
returned. The retry counter lives for the whole process: it is reset by a
successful cycle or a user-forced refresh, not by exhaustion.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from enum import StrEnum

from tenacity import RetryCallState, Retrying, retry_if_exception_type, wait_fixed

from algoradar.config import ClientSettings, Settings
from algoradar.contest_mapper import map_contests
from algoradar.contest_record import ContestRecord
from algoradar.extension.backend_client import BackendPayload, fetch_backend_contests
from algoradar.extension.cache_store import ClientCacheStore
from algoradar.time_normalizer import resolve_timezone
from algoradar.utils.logger import get_logger
from algoradar.utils.now import Now


class RefreshState(StrEnum):
    IDLE = "idle"
    FETCHING = "fetching"
    RETRYING = "retrying"
    SUCCESS = "success"
    EXHAUSTED = "exhausted"


class RefreshOrchestrator:
    """Drive scheduled and on-demand refresh cycles."""

    def __init__(
        self,
        settings: Settings,
        store: ClientCacheStore,
        *,
        fetch_backend: Callable[[ClientSettings], BackendPayload] = fetch_backend_contests,
        sleep: Callable[[float], None] = time.sleep,
        clock_ms: Callable[[], int] = Now.as_milliseconds,
        logger: logging.Logger | None = None,
    ) -> None:
        self._settings = settings
        self._store = store
        self._fetch_backend = fetch_backend
        self._sleep = sleep
        self._clock_ms = clock_ms
        self._logger = logger or get_logger(__name__)
        self._upstream_tz = resolve_timezone(settings.upstream_tz)
        self._display_tz = resolve_timezone(settings.display_tz)
        self._retry_count = 0
        self._state = RefreshState.IDLE

    @property
    def retry_count(self) -> int:
        return self._retry_count

    @property
    def state(self) -> RefreshState:
        return self._state

    def reset_retries(self) -> None:
        self._retry_count = 0

    def refresh(self, force_refresh: bool = False) -> list[ContestRecord]:
        """Run one refresh cycle.

        Args:
            force_refresh: Skip the local freshness short-circuit. A forced
                refresh also resets the retry counter.

        Returns:
            The fetched contests, the fresh local snapshot, or after
            exhausting retries whatever the local snapshot holds.
        """

        client = self._settings.client
        if force_refresh:
            self.reset_retries()
        else:
            cached = self._store.read()
            if cached.contests and cached.age_ms(self._clock_ms()) < client.cache_s * 1000:
                return list(cached.contests)
        retrying = Retrying(
            retry=retry_if_exception_type(Exception),
            stop=self._retry_budget_spent,
            wait=wait_fixed(client.retry_delay_s),
            sleep=self._sleep,
            before_sleep=self._before_retry,
            reraise=True,
        )
        try:
            return retrying(self._fetch_and_persist)
        except Exception as exc:  # degrade to the last persisted snapshot
            self._state = RefreshState.EXHAUSTED
            self._logger.error("Fetch error: %s; serving local cache", exc)
            return list(self._store.read().contests)

    def cached_contests(self) -> tuple[list[ContestRecord], str | None]:
        """Return persisted contests that have not started yet, and ``lastUpdated``."""
        cached = self._store.read()
        now_ms = self._clock_ms()
        active = [contest for contest in cached.contests if contest.start_timestamp > now_ms]
        return active, cached.last_updated

    def _fetch_and_persist(self) -> list[ContestRecord]:
        self._state = RefreshState.FETCHING
        self._logger.info("Fetching from backend...")
        payload = self._fetch_backend(self._settings.client)
        now_ms = self._clock_ms()
        contests = map_contests(
            payload.contests,
            now=Now.from_seconds(now_ms / 1000),
            upstream_tz=self._upstream_tz,
            display_tz=self._display_tz,
        )
        self._store.write(contests, now_ms, payload.last_updated)
        self._logger.info(
            "Cached %s contests (source: %s)", len(contests), payload.source or "api"
        )
        self._retry_count = 0
        self._state = RefreshState.SUCCESS
        return contests

    def _retry_budget_spent(self, _: RetryCallState) -> bool:
        return self._retry_count >= self._settings.client.max_retries

    def _before_retry(self, retry_state: RetryCallState) -> None:
        self._retry_count += 1
        self._state = RefreshState.RETRYING
        outcome = retry_state.outcome
        error = outcome.exception() if outcome is not None else None
        self._logger.warning(
            "Fetch error: %s. Retrying in %ss (attempt %s/%s).",
            error,
            self._settings.client.retry_delay_s,
            self._retry_count,
            self._settings.client.max_retries,
        )
