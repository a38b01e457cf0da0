"""Cancellable delayed callbacks."""
from __future__ import annotations

import logging
import threading
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class ScheduledCall(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def schedule(self, delay_seconds: float, callback: Callable[[], None]) -> ScheduledCall: ...


class _TimerCall:
    def __init__(self, timer: threading.Timer) -> None:
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()


class ThreadTimerScheduler:
    """Runs each callback on a daemon ``threading.Timer``."""

    def schedule(self, delay_seconds: float, callback: Callable[[], None]) -> ScheduledCall:
        def _run() -> None:
            try:
                callback()
            except Exception:
                logger.exception("scheduled callback failed")

        timer = threading.Timer(delay_seconds, _run)
        timer.daemon = True
        timer.start()
        return _TimerCall(timer)
