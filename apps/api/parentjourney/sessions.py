"""Per-profile runtime wiring for the HTTP layer."""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional
from uuid import UUID

from fastapi import Depends, Header, HTTPException

from .auth import RequestAuthStatus, get_auth_status
from .config import CONFIG
from .dispatcher import TriggerDispatcher
from .greetings import GreetingRotator
from .notices import NoticeBoard
from .onboarding import OnboardingStateMachine, derive_phase
from .scheduler import Scheduler, ThreadTimerScheduler
from .schemas import AuthStatus, OnboardingSnapshot, TourSignal
from .signup import prompt_signal
from .store import KeyValueBackend, OnboardingStore, SqliteProfileBackend

logger = logging.getLogger(__name__)


@dataclass
class ProfileSession:
    profile_id: str
    auth: RequestAuthStatus
    store: OnboardingStore
    machine: OnboardingStateMachine
    dispatcher: TriggerDispatcher
    notices: NoticeBoard

    def observe(self, status: AuthStatus) -> "ProfileSession":
        self.auth.update(status)
        return self

    def snapshot(self) -> OnboardingSnapshot:
        machine = self.machine
        record = self.store.load()
        tour = machine.tour
        if tour is not None:
            tour_signal = TourSignal(
                active=tour.is_active,
                current_step_index=tour.current_step_index,
                total_steps=len(machine.steps),
                step=machine.step_metadata(tour.current_step_index),
                completed_step_ids=sorted(tour.completed_step_ids),
            )
        else:
            tour_signal = TourSignal(
                active=False,
                pending_start=machine.tour_pending,
                total_steps=len(machine.steps),
            )
        return OnboardingSnapshot(
            profile_id=self.profile_id,
            phase=derive_phase(record, machine.auth_status(), tour),
            record=record,
            prompt=prompt_signal(machine.prompt_trigger),
            tour=tour_signal,
        )

    def teardown(self) -> None:
        self.machine.teardown()
        self.notices.teardown()


class SessionRegistry:
    """Process-wide map of browser profile id to its live onboarding session.

    Also owns the greeting rotator; its counter starts at zero when the
    registry is created.
    """

    def __init__(
        self,
        *,
        scheduler: Optional[Scheduler] = None,
        backend_factory: Callable[[str], KeyValueBackend] = SqliteProfileBackend,
        storage_key: str = CONFIG.onboarding_storage_key,
        tour_start_delay_seconds: float = CONFIG.tour_start_delay_seconds,
        notice_auto_dismiss_seconds: float = CONFIG.notice_auto_dismiss_seconds,
        idle_ttl_seconds: float = CONFIG.session_idle_seconds,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.scheduler: Scheduler = scheduler or ThreadTimerScheduler()
        self.backend_factory = backend_factory
        self.storage_key = storage_key
        self.tour_start_delay_seconds = tour_start_delay_seconds
        self.notice_auto_dismiss_seconds = notice_auto_dismiss_seconds
        self.idle_ttl_seconds = idle_ttl_seconds
        self._clock = clock
        self.greetings = GreetingRotator()
        self._sessions: Dict[str, ProfileSession] = {}
        self._last_seen: Dict[str, float] = {}
        self._lock = threading.Lock()

    def _build(self, profile_id: str) -> ProfileSession:
        auth = RequestAuthStatus()
        store = OnboardingStore(self.backend_factory(profile_id), storage_key=self.storage_key)
        machine = OnboardingStateMachine(
            store,
            auth,
            scheduler=self.scheduler,
            tour_start_delay_seconds=self.tour_start_delay_seconds,
            profile_id=profile_id,
        )
        return ProfileSession(
            profile_id=profile_id,
            auth=auth,
            store=store,
            machine=machine,
            dispatcher=TriggerDispatcher(machine),
            notices=NoticeBoard(
                scheduler=self.scheduler,
                auto_dismiss_seconds=self.notice_auto_dismiss_seconds,
            ),
        )

    def __len__(self) -> int:
        return len(self._sessions)

    def _pop_idle(self, now: float) -> List[ProfileSession]:
        cutoff = now - self.idle_ttl_seconds
        idle = [pid for pid, seen in self._last_seen.items() if seen <= cutoff]
        evicted = []
        for pid in idle:
            self._last_seen.pop(pid, None)
            evicted.append(self._sessions.pop(pid))
        return evicted

    def get(self, profile_id: str) -> ProfileSession:
        now = self._clock()
        with self._lock:
            evicted = self._pop_idle(now)
            session = self._sessions.get(profile_id)
            if session is None:
                session = self._build(profile_id)
                self._sessions[profile_id] = session
                logger.info("onboarding session opened", extra={"profile_id": profile_id})
            self._last_seen[profile_id] = now
        for stale in evicted:
            stale.teardown()
            logger.info("idle onboarding session evicted", extra={"profile_id": stale.profile_id})
        return session

    def discard(self, profile_id: str) -> bool:
        with self._lock:
            session = self._sessions.pop(profile_id, None)
            self._last_seen.pop(profile_id, None)
        if session is None:
            return False
        session.teardown()
        logger.info("onboarding session closed", extra={"profile_id": profile_id})
        return True

    def clear(self) -> None:
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
            self._last_seen.clear()
        for session in sessions:
            session.teardown()


REGISTRY = SessionRegistry()


def _parse_profile_id(value: Optional[str]) -> str:
    if not value:
        raise HTTPException(status_code=400, detail="Missing X-Browser-Profile-Id.")
    try:
        return str(UUID(value))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Invalid X-Browser-Profile-Id.") from exc


async def get_profile_id(
    profile_id: Optional[str] = Header(None, alias="X-Browser-Profile-Id"),
) -> str:
    return _parse_profile_id(profile_id)


async def get_profile_session(
    profile_id: str = Depends(get_profile_id),
    auth: AuthStatus = Depends(get_auth_status),
) -> ProfileSession:
    return REGISTRY.get(profile_id).observe(auth)
