from __future__ import annotations

from uuid import uuid4

from parentjourney.schemas import SignUpTrigger
from parentjourney.sessions import SessionRegistry
from parentjourney.store import MemoryBackend

from .onboarding_helpers import SIGNED_OUT, ManualScheduler


class TickingClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _registry(scheduler: ManualScheduler, clock: TickingClock) -> SessionRegistry:
    return SessionRegistry(
        scheduler=scheduler,
        backend_factory=lambda profile_id: MemoryBackend(),
        idle_ttl_seconds=60,
        clock=clock,
    )


def test_active_sessions_are_reused() -> None:
    clock = TickingClock()
    registry = _registry(ManualScheduler(), clock)
    profile_id = str(uuid4())
    first = registry.get(profile_id)
    clock.now = 59
    assert registry.get(profile_id) is first
    clock.now = 100
    assert registry.get(profile_id) is first
    assert len(registry) == 1


def test_idle_sessions_are_evicted_and_torn_down() -> None:
    scheduler = ManualScheduler()
    clock = TickingClock()
    registry = _registry(scheduler, clock)

    idle_id = str(uuid4())
    idle = registry.get(idle_id).observe(SIGNED_OUT)
    idle.machine.initialize()
    idle.machine.request_gate(SignUpTrigger.SAVE)
    idle.machine.complete_sign_up()
    idle.notices.show("Welcome back!", "Hello")
    assert len(scheduler.pending) == 2

    clock.now = 61
    registry.get(str(uuid4()))
    assert len(registry) == 1
    assert scheduler.pending == []
    assert not idle.machine.tour_pending

    # Coming back after eviction starts a fresh in-memory session.
    assert registry.get(idle_id) is not idle


def test_discard_and_clear_tear_down_sessions() -> None:
    scheduler = ManualScheduler()
    registry = _registry(scheduler, TickingClock())
    kept = registry.get(str(uuid4()))
    dropped_id = str(uuid4())
    registry.get(dropped_id).notices.show("Welcome back!", "Hi")
    kept.notices.show("Welcome back!", "Hi")

    assert registry.discard(dropped_id)
    assert not registry.discard(dropped_id)
    assert len(scheduler.pending) == 1

    registry.clear()
    assert len(registry) == 0
    assert scheduler.pending == []
