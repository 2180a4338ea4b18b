from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DEFAULT_CLIST_API_URL = "https://clist.by/api/v2/contest/"
DEFAULT_BACKEND_URL = "https://algoradar-extension.vercel.app/api/contests"
DEFAULT_USER_AGENT = "AlgoRadar-Extension/1.0"
DEFAULT_CLIENT_CACHE_FILE = "contests_cache.json"


def _env_str(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def _env_optional(name: str) -> str | None:
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    return int(value)


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    return float(value)


@dataclass(slots=True)
class ClistSettings:
    """CLIST upstream configuration."""

    api_key: str | None = field(default_factory=lambda: _env_optional("CLIST_API_KEY"))
    username: str | None = field(default_factory=lambda: _env_optional("CLIST_USERNAME"))
    api_url: str = field(
        default_factory=lambda: _env_str("CLIST_API_URL", DEFAULT_CLIST_API_URL)
    )
    limit: int = field(default_factory=lambda: _env_int("CLIST_LIMIT", 500))
    timeout_s: float = field(default_factory=lambda: _env_float("CLIST_TIMEOUT_S", 10.0))
    user_agent: str = DEFAULT_USER_AGENT


@dataclass(slots=True)
class CacheSettings:
    """Server cache windows, in seconds."""

    fresh_s: float = field(default_factory=lambda: _env_float("ALGORADAR_CACHE_FRESH_S", 20 * 60))
    stale_s: float = field(
        default_factory=lambda: _env_float("ALGORADAR_CACHE_STALE_S", 24 * 60 * 60)
    )
    grace_s: float = field(default_factory=lambda: _env_float("ALGORADAR_CACHE_GRACE_S", 5.0))


@dataclass(slots=True)
class RateLimitSettings:
    """Per-client sliding window admission control."""

    window_s: float = field(default_factory=lambda: _env_float("ALGORADAR_RATE_WINDOW_S", 60.0))
    max_requests: int = field(default_factory=lambda: _env_int("ALGORADAR_RATE_MAX_REQUESTS", 20))
    retry_after_s: int = field(default_factory=lambda: _env_int("ALGORADAR_RATE_RETRY_AFTER_S", 60))
    sweep_interval_s: float = field(
        default_factory=lambda: _env_float("ALGORADAR_RATE_SWEEP_S", 60.0)
    )


@dataclass(slots=True)
class ClientSettings:
    """Configuration of the extension-side background process."""

    backend_url: str = field(
        default_factory=lambda: _env_str("ALGORADAR_BACKEND_URL", DEFAULT_BACKEND_URL)
    )
    timeout_s: float = field(
        default_factory=lambda: _env_float("ALGORADAR_CLIENT_TIMEOUT_S", 15.0)
    )
    cache_s: float = field(default_factory=lambda: _env_float("ALGORADAR_CLIENT_CACHE_S", 20 * 60))
    max_retries: int = field(default_factory=lambda: _env_int("ALGORADAR_CLIENT_MAX_RETRIES", 3))
    retry_delay_s: float = field(
        default_factory=lambda: _env_float("ALGORADAR_CLIENT_RETRY_DELAY_S", 5.0)
    )
    alarm_period_s: float = field(
        default_factory=lambda: _env_float("ALGORADAR_ALARM_PERIOD_S", 20 * 60)
    )
    data_dir: Path = field(
        default_factory=lambda: Path(_env_str("ALGORADAR_CLIENT_DATA_DIR", "data"))
    )

    @property
    def cache_path(self) -> Path:
        return self.data_dir / DEFAULT_CLIENT_CACHE_FILE


@dataclass(slots=True)
class Settings:
    """Central configuration for the backend and the extension process.

    ``upstream_tz`` is the zone assumed for CLIST timestamps that carry no
    offset. ``display_tz`` is the zone used for rendered dates and times; an
    empty value means the host's local zone.
    """

    clist: ClistSettings = field(default_factory=ClistSettings)
    cache: CacheSettings = field(default_factory=CacheSettings)
    rate_limit: RateLimitSettings = field(default_factory=RateLimitSettings)
    client: ClientSettings = field(default_factory=ClientSettings)
    upstream_tz: str = field(default_factory=lambda: _env_str("ALGORADAR_UPSTREAM_TZ", "UTC"))
    display_tz: str = field(default_factory=lambda: _env_str("ALGORADAR_DISPLAY_TZ"))
    log_level: str = field(default_factory=lambda: _env_str("ALGORADAR_LOG_LEVEL", "INFO"))
    host: str = field(default_factory=lambda: _env_str("ALGORADAR_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: _env_int("ALGORADAR_PORT", 8000))

    def ensure_dirs(self) -> None:
        self.client.data_dir.mkdir(parents=True, exist_ok=True)


def get_settings() -> Settings:
    """Return a Settings instance built from the current environment."""
    load_dotenv()
    return Settings()
