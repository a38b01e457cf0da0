"""Call-site guard for actions that require an account."""
from __future__ import annotations

import logging
from typing import Callable

from .onboarding import OnboardingStateMachine
from .schemas import SignUpTrigger

logger = logging.getLogger(__name__)


class TriggerDispatcher:
    def __init__(self, machine: OnboardingStateMachine) -> None:
        self._machine = machine

    def guard(self, trigger: SignUpTrigger, proceed_action: Callable[[], None]) -> bool:
        """Run ``proceed_action`` unless the sign-up prompt intercepts it.

        An intercepted action is dropped. Completing sign-up afterwards does
        not replay it; the user repeats the action once signed up.
        Returns whether the action ran.
        """
        if self._machine.request_gate(trigger):
            logger.debug("action gated by sign-up prompt", extra={"trigger": SignUpTrigger(trigger).value})
            return False
        proceed_action()
        return True
