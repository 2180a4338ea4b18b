"""Extension background process: periodic alarm plus popup message handling.

All refresh work runs on one worker thread, so an alarm tick and a popup
message never refresh concurrently.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from algoradar.config import Settings, get_settings
from algoradar.contest_record import ContestRecord
from algoradar.extension.cache_store import ClientCacheStore
from algoradar.extension.refresh_orchestrator import RefreshOrchestrator
from algoradar.utils.logger import get_logger

ALARM_NAME = "refreshContests"
ACTION_GET_CONTESTS = "getContests"
ACTION_REFRESH_CONTESTS = "refreshContests"


class PeriodicAlarm:
    """Invoke ``callback`` every ``period_s`` seconds on a daemon thread."""

    def __init__(self, name: str, period_s: float, callback: Callable[[], None]) -> None:
        self.name = name
        self.period_s = period_s
        self._callback = callback
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name=f"alarm-{self.name}", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 1.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
        self._thread = None

    def _run(self) -> None:
        while not self._stop_event.wait(self.period_s):
            self._callback()


class Background:
    """Own the refresh orchestrator and answer popup messages."""

    def __init__(
        self,
        orchestrator: RefreshOrchestrator,
        *,
        alarm_period_s: float,
        logger: logging.Logger | None = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._logger = logger or get_logger(__name__)
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="algoradar-refresh")
        self._alarm = PeriodicAlarm(ALARM_NAME, alarm_period_s, self._on_alarm)

    @property
    def orchestrator(self) -> RefreshOrchestrator:
        return self._orchestrator

    @property
    def alarm(self) -> PeriodicAlarm:
        return self._alarm

    def install(self) -> Future[list[ContestRecord]]:
        """Arm the periodic alarm and queue the initial refresh."""
        self._logger.info("AlgoRadar installed")
        self._alarm.start()
        return self._executor.submit(self._orchestrator.refresh)

    def shutdown(self) -> None:
        self._alarm.stop()
        self._executor.shutdown(wait=True)

    def send_message(self, message: dict[str, Any]) -> Future[dict[str, Any]]:
        """Queue a popup message; the returned future always resolves."""
        try:
            return self._executor.submit(self._handle_message, message)
        except RuntimeError as exc:
            reply: Future[dict[str, Any]] = Future()
            reply.set_result({"contests": [], "error": str(exc)})
            return reply

    def _on_alarm(self) -> None:
        try:
            self._executor.submit(self._orchestrator.refresh)
        except RuntimeError:
            self._logger.warning("Alarm %s fired after shutdown", ALARM_NAME)

    def _handle_message(self, message: dict[str, Any]) -> dict[str, Any]:
        action = message.get("action") if isinstance(message, dict) else None
        try:
            if action == ACTION_GET_CONTESTS:
                contests, last_updated = self._orchestrator.cached_contests()
                return {
                    "contests": [contest.to_wire() for contest in contests],
                    "lastUpdated": last_updated,
                }
            if action == ACTION_REFRESH_CONTESTS:
                contests = self._orchestrator.refresh(force_refresh=True)
                return {"contests": [contest.to_wire() for contest in contests]}
        except Exception as exc:  # reply to the popup instead of dropping the message
            self._logger.error("Message handling failed for %s: %s", action, exc)
            return {"contests": [], "error": str(exc)}
        return {"error": f"Unknown action: {action}"}


def build_background(settings: Settings | None = None) -> Background:
    """Wire store, orchestrator and background process from settings."""
    settings = settings or get_settings()
    settings.ensure_dirs()
    store = ClientCacheStore(settings.client.cache_path)
    orchestrator = RefreshOrchestrator(settings, store)
    return Background(orchestrator, alarm_period_s=settings.client.alarm_period_s)
