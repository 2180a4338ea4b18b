"""Build JSON payloads for the contests endpoint."""

from __future__ import annotations

from algoradar.server_cache import CacheResult
from algoradar.utils.now import Now

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def _last_updated(result: CacheResult) -> str | None:
    if result.captured_at is None:
        return None
    return Now.from_seconds(result.captured_at).isoformat()


def _build_contests_payload(result: CacheResult, response_time_ms: int) -> dict[str, object]:
    """Shape a cache result into the fresh, cached or stale response body."""
    payload: dict[str, object] = {
        "contests": [contest.to_wire() for contest in result.contests],
        "cached": result.cached,
    }
    if result.stale:
        payload.update(
            {
                "stale": True,
                "error": result.error,
                "cacheAge": int(result.cache_age_s),
            }
        )
    elif result.cached:
        payload.update(
            {
                "fresh": True,
                "cacheAge": int(result.cache_age_s),
                "responseTime": response_time_ms,
            }
        )
    else:
        payload.update(
            {
                "fresh": True,
                "count": len(result.contests),
                "responseTime": response_time_ms,
            }
        )
    payload["lastUpdated"] = _last_updated(result)
    return payload


def _service_unavailable_payload() -> dict[str, object]:
    return {
        "error": "Service unavailable",
        "message": "Please try again later",
        "contests": [],
    }


def _rate_limited_payload(retry_after: int) -> dict[str, object]:
    return {"error": "Too many requests", "retryAfter": retry_after}
