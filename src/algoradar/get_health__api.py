"""API health check handler."""

from algoradar import __version__
from algoradar.utils.now import Now

_HEALTH_SERVICE = "algoradar"


def health() -> dict[str, str]:
    """Return health check payload."""
    return {
        "status": "ok",
        "service": _HEALTH_SERVICE,
        "version": __version__,
        "timestamp": Now.as_datetime().isoformat(),
    }
