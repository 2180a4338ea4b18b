from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import requests

from algoradar.config import ClientSettings
from algoradar.errors import BackendError, TransportError, UpstreamTimeoutError


@dataclass(frozen=True, slots=True)
class BackendPayload:
    contests: list[object]
    last_updated: str | None = None
    source: str | None = None


def fetch_backend_contests(
    settings: ClientSettings,
    http_get: Callable[..., requests.Response] | None = None,
) -> BackendPayload:
    """Call the algoradar backend once with a bounded timeout.

    Args:
        settings: Client settings with the backend URL and timeout.
        http_get: Optional replacement for ``requests.get``.

    Returns:
        Raw contest rows plus the reported ``lastUpdated``.

    Raises:
        UpstreamTimeoutError: When the request exceeds the timeout.
        TransportError: On other network failures.
        BackendError: On a non-2xx status or an undecodable body.
    """

    getter = http_get or requests.get
    try:
        response = getter(
            settings.backend_url,
            headers={"Accept": "application/json"},
            timeout=settings.timeout_s,
        )
    except requests.Timeout as exc:
        raise UpstreamTimeoutError("Backend request timeout") from exc
    except requests.RequestException as exc:
        raise TransportError(f"Backend request failed: {exc}") from exc
    if not 200 <= response.status_code < 300:
        raise BackendError(f"Backend error: {response.status_code}", status_code=response.status_code)
    try:
        data = response.json()
    except ValueError as exc:
        raise BackendError("Backend returned invalid JSON", status_code=response.status_code) from exc
    if not isinstance(data, dict):
        raise BackendError("Backend returned an unexpected payload", status_code=response.status_code)
    contests = data.get("contests")
    return BackendPayload(
        contests=contests if isinstance(contests, list) else [],
        last_updated=data.get("lastUpdated"),
        source=data.get("source"),
    )
