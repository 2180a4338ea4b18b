"""Local device storage for the extension's contest snapshot."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Sequence
from contextlib import suppress
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from algoradar.contest_record import ContestRecord
from algoradar.errors import StorageError
from algoradar.utils.logger import get_logger


@dataclass(frozen=True, slots=True)
class ClientCacheRecord:
    """Persisted snapshot; ``timestamp`` is epoch milliseconds, 0 when never written."""

    contests: tuple[ContestRecord, ...] = ()
    timestamp: int = 0
    last_updated: str | None = None

    def age_ms(self, now_ms: int) -> int:
        return now_ms - self.timestamp


class ClientCacheStore:
    """JSON file holding ``{contests, timestamp, lastUpdated}``."""

    def __init__(self, path: Path, logger: logging.Logger | None = None) -> None:
        self._path = Path(path)
        self._logger = logger or get_logger(__name__)

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> ClientCacheRecord:
        """Return the last snapshot, or empty defaults. Never raises."""
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ClientCacheRecord()
        except OSError as exc:
            self._logger.error("Storage error: %s", exc)
            return ClientCacheRecord()
        try:
            data = json.loads(text)
        except ValueError as exc:
            self._logger.error("Storage error: corrupt cache file %s: %s", self._path, exc)
            return ClientCacheRecord()
        if not isinstance(data, dict):
            self._logger.error("Storage error: unexpected cache layout in %s", self._path)
            return ClientCacheRecord()
        return ClientCacheRecord(
            contests=self._load_contests(data.get("contests")),
            timestamp=_coerce_timestamp(data.get("timestamp")),
            last_updated=data.get("lastUpdated") or None,
        )

    def write(
        self,
        contests: Sequence[ContestRecord],
        timestamp: int,
        last_updated: str | None = None,
    ) -> None:
        """Replace the whole snapshot.

        Raises:
            StorageError: When the file cannot be written.
        """

        payload = {
            "contests": [contest.to_wire() for contest in contests],
            "timestamp": timestamp,
            "lastUpdated": last_updated,
        }
        tmp_path = self._path.with_name(f"{self._path.name}.tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(payload), encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as exc:
            with suppress(OSError):
                tmp_path.unlink(missing_ok=True)
            raise StorageError(f"Failed to write contest cache {self._path}: {exc}") from exc

    def _load_contests(self, rows: object) -> tuple[ContestRecord, ...]:
        if not isinstance(rows, list):
            return ()
        contests: list[ContestRecord] = []
        for row in rows:
            try:
                contests.append(ContestRecord.model_validate(row))
            except ValidationError as exc:
                self._logger.warning("Dropping unreadable cached contest: %s", exc)
        return tuple(contests)


def _coerce_timestamp(value: object) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int | float):
        return int(value)
    return 0
