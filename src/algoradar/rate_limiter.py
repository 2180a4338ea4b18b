"""Per-client sliding window rate limiting.

Best-effort and process local: it bounds abuse from a single address, it is
not an access control.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from threading import Event, Lock, Thread

from algoradar.utils.logger import get_logger
from algoradar.utils.now import Now

DEFAULT_WINDOW_S = 60.0
DEFAULT_MAX_REQUESTS = 20
DEFAULT_RETRY_AFTER_S = 60


@dataclass(frozen=True, slots=True)
class RateDecision:
    allowed: bool
    retry_after: int | None = None


@dataclass(slots=True)
class RateWindow:
    """Request instants of one identity inside the trailing window."""

    hits: deque[float] = field(default_factory=deque)
    lock: Lock = field(default_factory=Lock)
    retired: bool = False

    def prune(self, now: float, window_s: float) -> None:
        while self.hits and now - self.hits[0] >= window_s:
            self.hits.popleft()


class SlidingWindowRateLimiter:
    """Admit at most ``max_requests`` per identity within ``window_s``.

    Each identity has its own lock, so requests from different clients only
    share the registry lock for the dictionary lookup.
    """

    def __init__(
        self,
        *,
        window_s: float = DEFAULT_WINDOW_S,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        retry_after_s: int = DEFAULT_RETRY_AFTER_S,
        clock: Callable[[], float] = Now.as_seconds,
        logger: logging.Logger | None = None,
    ) -> None:
        self._window_s = window_s
        self._max_requests = max_requests
        self._retry_after_s = retry_after_s
        self._clock = clock
        self._logger = logger or get_logger(__name__)
        self._registry_lock = Lock()
        self._windows: dict[str, RateWindow] = {}

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._windows)

    def _window_for(self, identity: str) -> RateWindow:
        with self._registry_lock:
            window = self._windows.get(identity)
            if window is None:
                window = RateWindow()
                self._windows[identity] = window
            return window

    def check(self, identity: str) -> RateDecision:
        """Record a request for ``identity`` unless it is over the limit."""
        while True:
            window = self._window_for(identity)
            with window.lock:
                if window.retired:
                    continue
                now = self._clock()
                window.prune(now, self._window_s)
                if len(window.hits) >= self._max_requests:
                    self._logger.info("Rate limit: %s", identity)
                    return RateDecision(allowed=False, retry_after=self._retry_after_s)
                window.hits.append(now)
                return RateDecision(allowed=True)

    def sweep(self) -> int:
        """Drop identities whose windows are fully expired.

        Returns:
            Number of identities removed.
        """

        now = self._clock()
        removed = 0
        with self._registry_lock:
            for identity, window in list(self._windows.items()):
                with window.lock:
                    window.prune(now, self._window_s)
                    if window.hits:
                        continue
                    window.retired = True
                del self._windows[identity]
                removed += 1
        if removed:
            self._logger.debug("Pruned %s idle rate windows", removed)
        return removed


class RateLimitSweeper:
    """Run ``SlidingWindowRateLimiter.sweep`` periodically on a daemon thread."""

    def __init__(
        self,
        limiter: SlidingWindowRateLimiter,
        interval_s: float = DEFAULT_WINDOW_S,
    ) -> None:
        self._limiter = limiter
        self._interval_s = interval_s
        self._stop = Event()
        self._thread: Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = Thread(target=self._run, name="rate-limit-sweeper", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = 1.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
        self._thread = None

    def _run(self) -> None:
        while not self._stop.wait(self._interval_s):
            self._limiter.sweep()
