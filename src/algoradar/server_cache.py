"""In-memory contest cache with stale fallback and single-flight refresh.

One ``ContestCache`` instance is owned by the API app. Reads of the current
entry and the in-flight handle happen under a short lock; the upstream fetch
itself always runs outside it. Concurrent callers that miss the fresh window
share one ``concurrent.futures.Future`` so only one fetch runs at a time and
every waiter sees the same outcome.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import Future
from dataclasses import dataclass
from threading import Lock

from algoradar.contest_record import ContestRecord
from algoradar.errors import ServiceUnavailableError
from algoradar.utils.logger import get_logger
from algoradar.utils.now import Now

DEFAULT_FRESH_S = 20 * 60
DEFAULT_STALE_S = 24 * 60 * 60
DEFAULT_GRACE_S = 5.0


@dataclass(frozen=True, slots=True)
class CacheEntry:
    payload: tuple[ContestRecord, ...]
    captured_at: float

    def age(self, now: float) -> float:
        return now - self.captured_at


@dataclass(frozen=True, slots=True)
class CacheResult:
    """Outcome of ``ContestCache.get_contests``."""

    contests: tuple[ContestRecord, ...]
    fresh: bool
    cached: bool
    stale: bool = False
    cache_age_s: float = 0.0
    captured_at: float | None = None
    error: str | None = None


class ContestCache:
    """Owns the current entry and the in-flight refresh handle."""

    def __init__(
        self,
        refresh: Callable[[], Sequence[ContestRecord]],
        *,
        fresh_s: float = DEFAULT_FRESH_S,
        stale_s: float = DEFAULT_STALE_S,
        grace_s: float = DEFAULT_GRACE_S,
        clock: Callable[[], float] = Now.as_seconds,
        logger: logging.Logger | None = None,
    ) -> None:
        self._refresh = refresh
        self._fresh_s = fresh_s
        self._stale_s = stale_s
        self._grace_s = grace_s
        self._clock = clock
        self._logger = logger or get_logger(__name__)
        self._lock = Lock()
        self._current: CacheEntry | None = None
        self._in_flight: Future[CacheEntry] | None = None
        self._settled_at: float | None = None

    def snapshot(self) -> CacheEntry | None:
        with self._lock:
            return self._current

    def clear(self) -> None:
        with self._lock:
            self._current = None
            self._in_flight = None
            self._settled_at = None

    def get_contests(self) -> CacheResult:
        """Return fresh, refreshed or stale contests.

        Returns:
            A tagged ``CacheResult``.

        Raises:
            ServiceUnavailableError: When the refresh failed and no entry
                younger than the stale window exists.
        """

        now = self._clock()
        current = self.snapshot()
        if current is not None and current.age(now) < self._fresh_s:
            self._logger.info("Cache hit (%ss old)", int(current.age(now)))
            return CacheResult(
                contests=current.payload,
                fresh=True,
                cached=True,
                cache_age_s=current.age(now),
                captured_at=current.captured_at,
            )
        try:
            entry = self._refresh_single_flight(now)
        except Exception as exc:  # converted into a stale answer or a 503
            return self._fallback(exc)
        return CacheResult(
            contests=entry.payload,
            fresh=True,
            cached=False,
            captured_at=entry.captured_at,
        )

    def _fallback(self, exc: Exception) -> CacheResult:
        now = self._clock()
        current = self.snapshot()
        if current is not None and current.age(now) < self._stale_s:
            self._logger.warning(
                "Serving stale cache (%ss old) after refresh failure: %s",
                int(current.age(now)),
                exc,
            )
            return CacheResult(
                contests=current.payload,
                fresh=False,
                cached=True,
                stale=True,
                cache_age_s=current.age(now),
                captured_at=current.captured_at,
                error="Failed to fetch fresh data",
            )
        self._logger.error("Refresh failed with no usable cache: %s", exc)
        raise ServiceUnavailableError("Service unavailable", cause=exc) from exc

    def _refresh_single_flight(self, now: float) -> CacheEntry:
        with self._lock:
            future = self._joinable_refresh(now)
            leader = future is None
            if future is None:
                future = Future()
                self._in_flight = future
                self._settled_at = None
        if leader:
            self._run_refresh(future)
        else:
            self._logger.info("Request queued behind in-flight refresh")
        return future.result()

    def _joinable_refresh(self, now: float) -> Future[CacheEntry] | None:
        future = self._in_flight
        if future is None:
            return None
        if not future.done():
            return future
        if self._settled_at is not None and now - self._settled_at < self._grace_s:
            return future
        self._in_flight = None
        self._settled_at = None
        return None

    def _run_refresh(self, future: Future[CacheEntry]) -> None:
        entry: CacheEntry | None = None
        error: BaseException | None = None
        self._logger.info("Refreshing contest cache")
        try:
            entry = CacheEntry(tuple(self._refresh()), self._clock())
        except Exception as exc:
            error = exc
        finally:
            with self._lock:
                self._settled_at = self._clock()
                if entry is not None:
                    self._current = entry
            if entry is not None:
                self._logger.info("Cached %s contests", len(entry.payload))
                future.set_result(entry)
            else:
                future.set_exception(error or RuntimeError("Contest refresh aborted"))
