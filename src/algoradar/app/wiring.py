"""Default dependency wiring for the API server."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from algoradar.clist_client import build_clist_client
from algoradar.config import Settings, get_settings
from algoradar.contest_record import ContestRecord
from algoradar.rate_limiter import RateLimitSweeper, SlidingWindowRateLimiter
from algoradar.server_cache import ContestCache
from algoradar.utils.now import Now


@dataclass(slots=True)
class ServerComponents:
    """Process-wide objects shared by every request."""

    settings: Settings
    cache: ContestCache
    limiter: SlidingWindowRateLimiter
    sweeper: RateLimitSweeper


def build_server_components(
    settings: Settings | None = None,
    *,
    refresh: Callable[[], Sequence[ContestRecord]] | None = None,
    clock: Callable[[], float] = Now.as_seconds,
) -> ServerComponents:
    """Build the cache, the rate limiter and its sweeper from settings.

    Args:
        settings: Settings to use; read from the environment when omitted.
        refresh: Contest refresh function; the CLIST client by default.
        clock: Epoch-seconds clock shared by the cache and the limiter.
    """

    active = settings or get_settings()
    refresh_fn = refresh or build_clist_client(active).fetch_contests
    cache = ContestCache(
        refresh_fn,
        fresh_s=active.cache.fresh_s,
        stale_s=active.cache.stale_s,
        grace_s=active.cache.grace_s,
        clock=clock,
    )
    limiter = SlidingWindowRateLimiter(
        window_s=active.rate_limit.window_s,
        max_requests=active.rate_limit.max_requests,
        retry_after_s=active.rate_limit.retry_after_s,
        clock=clock,
    )
    sweeper = RateLimitSweeper(limiter, interval_s=active.rate_limit.sweep_interval_s)
    return ServerComponents(settings=active, cache=cache, limiter=limiter, sweeper=sweeper)
