"""Confirmation notices that dismiss themselves after a fixed delay."""
from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Optional

from .greetings import GreetingRotator
from .scheduler import ScheduledCall, Scheduler
from .schemas import Notice, utc_now

logger = logging.getLogger(__name__)

DEFAULT_AUTO_DISMISS_SECONDS = 7.0


class NoticeBoard:
    """Holds at most one visible notice."""

    def __init__(
        self,
        *,
        scheduler: Scheduler,
        auto_dismiss_seconds: float = DEFAULT_AUTO_DISMISS_SECONDS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._scheduler = scheduler
        self._auto_dismiss_seconds = auto_dismiss_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._notice: Optional[Notice] = None
        self._timer: Optional[ScheduledCall] = None
        self._token: Optional[object] = None

    @property
    def current(self) -> Optional[Notice]:
        return self._notice

    def show(self, title: str, message: str) -> Notice:
        with self._lock:
            self._cancel_timer()
            notice = Notice(
                title=title,
                message=message,
                shown_at=self._clock(),
                auto_dismiss_seconds=self._auto_dismiss_seconds,
            )
            self._notice = notice
            token = object()
            self._token = token
            self._timer = self._scheduler.schedule(
                self._auto_dismiss_seconds, lambda: self._expire(token)
            )
            return notice

    def dismiss(self) -> bool:
        with self._lock:
            self._cancel_timer()
            if self._notice is None:
                return False
            self._notice = None
            return True

    def teardown(self) -> None:
        with self._lock:
            self._cancel_timer()

    def _expire(self, token: object) -> None:
        with self._lock:
            if self._token is not token:
                return
            self._token = None
            self._timer = None
            self._notice = None
            logger.debug("notice auto-dismissed")

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None
        self._token = None


def show_login_notice(board: NoticeBoard, rotator: GreetingRotator, user_name: Optional[str] = None) -> Notice:
    name = (user_name or "").strip()
    title = f"Welcome back, {name}!" if name else "Welcome back!"
    return board.show(title, rotator.next())
