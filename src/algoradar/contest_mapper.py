"""Map raw contest rows into sorted, upcoming ``ContestRecord`` lists."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime, tzinfo

from pydantic import ValidationError

from algoradar.contest_record import ContestRecord
from algoradar.errors import ParseError
from algoradar.time_normalizer import format_display_date, format_display_time, parse_timestamp
from algoradar.utils.logger import get_logger
from algoradar.utils.now import Now

logger = get_logger(__name__)


def _first_text(raw: Mapping[str, object], *keys: str) -> str:
    for key in keys:
        value = raw.get(key)
        if value is not None and value != "":
            return str(value)
    return ""


def _map_contest(
    raw: object,
    upstream_tz: tzinfo | None,
    display_tz: tzinfo | None,
) -> ContestRecord:
    """Map a single raw row.

    Accepts CLIST rows (``event``/``resource``/``href``) as well as rows that
    were already mapped (``name``/``platform``/``url``).

    Raises:
        ParseError: When the row is not a mapping or its start is unusable.
    """

    if not isinstance(raw, Mapping):
        raise ParseError(f"Contest row is not an object: {type(raw).__name__}")
    start = parse_timestamp(raw.get("start"), upstream_tz)
    if start is None:
        raise ParseError(f"Invalid start time: {raw.get('start')!r}")
    end = parse_timestamp(raw.get("end"), upstream_tz) if raw.get("end") else None
    try:
        return ContestRecord(
            id=raw.get("id"),
            name=_first_text(raw, "event", "name"),
            platform=_first_text(raw, "resource", "platform"),
            url=_first_text(raw, "href", "url"),
            start=start,
            end=end,
            start_date=format_display_date(start, display_tz),
            start_time=format_display_time(start, display_tz),
            end_time=format_display_time(end, display_tz) if end else "",
            start_timestamp=int(start.timestamp() * 1000),
        )
    except (ValidationError, TypeError, OverflowError) as exc:
        raise ParseError(str(exc)) from exc


def map_contests(
    raw_records: Iterable[object],
    *,
    now: datetime | None = None,
    upstream_tz: tzinfo | None = None,
    display_tz: tzinfo | None = None,
) -> list[ContestRecord]:
    """Map raw rows, drop past or malformed ones and sort by start.

    Args:
        raw_records: Rows from CLIST or from the algoradar backend.
        now: Mapping instant; contests must start strictly after it.
        upstream_tz: Zone assumed for timestamps without an offset.
        display_tz: Zone used for display strings; host local when None.

    Returns:
        Upcoming contests in ascending start order.
    """

    cutoff = Now.to_utc(now) or Now.as_datetime()
    contests: list[ContestRecord] = []
    for raw in raw_records:
        try:
            contest = _map_contest(raw, upstream_tz, display_tz)
        except ParseError as exc:
            label = (raw.get("event") or raw.get("name")) if isinstance(raw, Mapping) else raw
            logger.warning("Skipping contest %r: %s", label, exc)
            continue
        if contest.start > cutoff:
            contests.append(contest)
    contests.sort(key=lambda contest: contest.start)
    return contests
