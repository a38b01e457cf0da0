from __future__ import annotations

from parentjourney.dispatcher import TriggerDispatcher
from parentjourney.schemas import SignUpTrigger

from .onboarding_helpers import SIGNED_IN, build_machine


def test_guard_runs_action_when_not_gated() -> None:
    machine, store, _, _ = build_machine(auth=SIGNED_IN)
    store.save({"hasVisited": True, "hasSignedUp": True, "hasCompletedTour": True})
    calls = []
    assert TriggerDispatcher(machine).guard(SignUpTrigger.EXPORT, lambda: calls.append("export"))
    assert calls == ["export"]


def test_guard_drops_gated_action() -> None:
    machine, _, _, _ = build_machine()
    machine.initialize()
    calls = []
    ran = TriggerDispatcher(machine).guard(SignUpTrigger.SAVE, lambda: calls.append("save"))
    assert not ran
    assert calls == []
    assert machine.prompt_trigger is SignUpTrigger.SAVE


def test_gated_action_is_not_replayed_after_sign_up() -> None:
    machine, _, _, scheduler = build_machine()
    machine.initialize()
    dispatcher = TriggerDispatcher(machine)
    calls = []

    dispatcher.guard(SignUpTrigger.EXPORT, lambda: calls.append("export"))
    machine.complete_sign_up()
    scheduler.advance(1)
    assert calls == []

    # Repeating the action after sign-up goes straight through.
    assert dispatcher.guard(SignUpTrigger.EXPORT, lambda: calls.append("export"))
    assert calls == ["export"]


def test_gated_action_is_not_replayed_after_dismiss() -> None:
    machine, _, _, _ = build_machine()
    machine.initialize()
    dispatcher = TriggerDispatcher(machine)
    calls = []
    dispatcher.guard(SignUpTrigger.BOOKMARK, lambda: calls.append("bookmark"))
    machine.dismiss_sign_up_prompt()
    assert calls == []


def test_guard_accepts_trigger_strings() -> None:
    machine, _, _, _ = build_machine()
    machine.initialize()
    TriggerDispatcher(machine).guard("settings", lambda: None)
    assert machine.prompt_trigger is SignUpTrigger.SETTINGS
