"""Normalize CLIST timestamps and render display strings.

CLIST returns ISO-8601 strings that usually omit an offset. Strings without an
offset are interpreted in the configured upstream zone (UTC unless
``ALGORADAR_UPSTREAM_TZ`` says otherwise); strings with ``Z`` or an explicit
offset are parsed as given.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from algoradar.errors import ConfigurationError

_EXPLICIT_OFFSET = re.compile(r"[+-]\d{2}:?\d{2}$")
_BASIC_OFFSET = re.compile(r"([+-]\d{2})(\d{2})$")
_OFFSET_NAME = re.compile(r"^(?:UTC|GMT)?([+-])(\d{2}):?(\d{2})$", re.IGNORECASE)
_UTC_NAMES = {"utc", "z", "gmt", "etc/utc"}

DISPLAY_DATE_FORMAT = "%d-%m-%Y"
DISPLAY_TIME_FORMAT = "%H:%M"


def resolve_timezone(name: str | None) -> tzinfo | None:
    """Turn a configuration value into a tzinfo.

    Accepts ``UTC``, fixed offsets such as ``+05:30`` or ``UTC+0530``, and IANA
    zone names. Empty values return ``None``.
    """

    if name is None or not name.strip():
        return None
    value = name.strip()
    if value.lower() in _UTC_NAMES:
        return UTC
    match = _OFFSET_NAME.match(value)
    if match:
        sign, hours, minutes = match.groups()
        delta = timedelta(hours=int(hours), minutes=int(minutes))
        return timezone(-delta if sign == "-" else delta)
    try:
        return ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"Unknown timezone: {value}") from exc


def has_explicit_offset(raw: str) -> bool:
    return raw.endswith(("Z", "z")) or bool(_EXPLICIT_OFFSET.search(raw))


def _to_isoformat_input(raw: str) -> str:
    if not has_explicit_offset(raw):
        return raw
    if raw.endswith(("Z", "z")):
        return raw[:-1] + "+00:00"
    return _BASIC_OFFSET.sub(r"\1:\2", raw)


def parse_timestamp(raw: object, assumed_tz: tzinfo | None = None) -> datetime | None:
    """Parse an upstream timestamp into an aware UTC datetime.

    Args:
        raw: Raw timestamp, normally a string.
        assumed_tz: Zone applied when the string has no offset; UTC when None.

    Returns:
        Aware UTC datetime, or None when the value is empty or unparseable.
    """

    if isinstance(raw, datetime):
        parsed = raw
    elif isinstance(raw, str) and raw.strip():
        text = raw.strip()
        try:
            parsed = datetime.fromisoformat(_to_isoformat_input(text))
        except ValueError:
            return None
    else:
        return None
    try:
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=assumed_tz or UTC)
        return parsed.astimezone(UTC)
    except (OverflowError, ValueError):
        return None


def _localize(value: datetime, display_tz: tzinfo | None) -> datetime:
    if display_tz is None:
        return value.astimezone()
    return value.astimezone(display_tz)


def format_display_date(value: datetime, display_tz: tzinfo | None = None) -> str:
    """Render ``DD-MM-YYYY`` in the display zone (host local when None)."""
    return _localize(value, display_tz).strftime(DISPLAY_DATE_FORMAT)


def format_display_time(value: datetime, display_tz: tzinfo | None = None) -> str:
    """Render ``HH:MM`` in the display zone (host local when None)."""
    return _localize(value, display_tz).strftime(DISPLAY_TIME_FORMAT)
