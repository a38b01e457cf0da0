from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Tuple

from parentjourney.onboarding import OnboardingStateMachine
from parentjourney.schemas import AuthStatus, AuthUser
from parentjourney.store import MemoryBackend, OnboardingStore

SIGNED_OUT = AuthStatus(is_authenticated=False)
LOADING = AuthStatus(is_loading=True)
SIGNED_IN = AuthStatus(
    is_authenticated=True,
    user=AuthUser(id="user-1", email="parent@example.com", name="Sam"),
)


class ManualCall:
    def __init__(self, scheduler: "ManualScheduler", due: float, callback: Callable[[], None]) -> None:
        self.scheduler = scheduler
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler whose clock only moves when a test calls advance()."""

    def __init__(self) -> None:
        self.now = 0.0
        self.calls: List[ManualCall] = []

    def schedule(self, delay_seconds: float, callback: Callable[[], None]) -> ManualCall:
        call = ManualCall(self, self.now + delay_seconds, callback)
        self.calls.append(call)
        return call

    @property
    def pending(self) -> List[ManualCall]:
        return [call for call in self.calls if not call.cancelled]

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = [call for call in self.pending if call.due <= self.now]
        for call in due:
            self.calls.remove(call)
            call.callback()


class StaticAuth:
    def __init__(self, status: AuthStatus = SIGNED_OUT) -> None:
        self.status = status

    def current(self) -> AuthStatus:
        return self.status


class FakeClock:
    def __init__(self, start: Optional[datetime] = None) -> None:
        self.value = start or datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.value

    def tick(self, minutes: int = 1) -> datetime:
        self.value += timedelta(minutes=minutes)
        return self.value


def build_machine(
    *,
    auth: AuthStatus = SIGNED_OUT,
    backend: Optional[MemoryBackend] = None,
    clock: Optional[FakeClock] = None,
) -> Tuple[OnboardingStateMachine, OnboardingStore, StaticAuth, ManualScheduler]:
    store = OnboardingStore(backend or MemoryBackend(), clock=clock or FakeClock())
    provider = StaticAuth(auth)
    scheduler = ManualScheduler()
    machine = OnboardingStateMachine(store, provider, scheduler=scheduler, tour_start_delay_seconds=0.5)
    return machine, store, provider, scheduler
