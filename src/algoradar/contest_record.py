"""Stable internal representation of an upcoming contest."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ContestRecord(BaseModel):
    """Represents a normalized contest listing.

    Attributes:
        id: Opaque upstream identifier.
        name: Contest title.
        platform: Upstream host identifier (e.g. ``codeforces.com``).
        url: Contest page.
        start: Start instant as an aware UTC datetime.
        end: End instant, when known.
        start_date: ``DD-MM-YYYY`` in the display zone.
        start_time: ``HH:MM`` in the display zone.
        end_time: ``HH:MM`` in the display zone, empty when the end is unknown.
        start_timestamp: ``start`` in epoch milliseconds.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: int | str | None = None
    name: str = ""
    platform: str = ""
    url: str = ""
    start: datetime
    end: datetime | None = None
    start_date: str = Field(alias="startDate")
    start_time: str = Field(alias="startTime")
    end_time: str = Field(default="", alias="endTime")
    start_timestamp: int = Field(alias="startTimestamp")

    def to_wire(self) -> dict[str, object]:
        """Return the camelCase JSON-ready dict sent over HTTP and persisted."""
        return self.model_dump(mode="json", by_alias=True)
