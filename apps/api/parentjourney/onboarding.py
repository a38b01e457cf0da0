"""Onboarding state machine: sign-up gating and guided tour sequencing.

The machine derives its phase from the persisted :class:`OnboardingRecord`,
the live authentication status and the in-memory :class:`TourSession`. The
record is never cached here; every decision re-reads it through the store so
other writers of the same profile are always observed.

Authentication status is ground truth. A record that says the visitor never
signed up while the auth provider reports a signed-in user is corrected
(reconciled) instead of showing the sign-up prompt.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Set

from .scheduler import ScheduledCall, Scheduler
from .schemas import AuthStatus, OnboardingPatch, OnboardingPhase, OnboardingRecord, SignUpTrigger, TourStep
from .store import OnboardingStore
from .tour import TOUR_STEPS, step_at

logger = logging.getLogger(__name__)

DEFAULT_TOUR_START_DELAY_SECONDS = 0.5


class AuthStatusProvider(Protocol):
    def current(self) -> AuthStatus: ...


@dataclass
class TourSession:
    current_step_index: int = 0
    is_active: bool = True
    completed_step_ids: Set[str] = field(default_factory=set)


def is_authenticated(status: AuthStatus) -> bool:
    return status.is_authenticated and status.user is not None and not status.is_loading


def derive_phase(
    record: OnboardingRecord,
    auth: AuthStatus,
    tour: Optional[TourSession] = None,
) -> OnboardingPhase:
    if tour is not None and tour.is_active:
        return OnboardingPhase.TOUR_ACTIVE
    if not record.has_visited:
        return OnboardingPhase.FRESH
    if not record.has_signed_up:
        if is_authenticated(auth):
            return OnboardingPhase.RECONCILING
        return OnboardingPhase.AWAITING_SIGNUP
    if record.tour_due:
        return OnboardingPhase.SIGNED_UP_AWAITING_TOUR
    return OnboardingPhase.SETTLED


class OnboardingStateMachine:
    def __init__(
        self,
        store: OnboardingStore,
        auth_provider: AuthStatusProvider,
        *,
        scheduler: Scheduler,
        tour_start_delay_seconds: float = DEFAULT_TOUR_START_DELAY_SECONDS,
        steps: Optional[List[TourStep]] = None,
        profile_id: Optional[str] = None,
    ) -> None:
        self._store = store
        self._auth_provider = auth_provider
        self._scheduler = scheduler
        self._tour_start_delay = tour_start_delay_seconds
        self._steps = list(TOUR_STEPS if steps is None else steps)
        if not self._steps:
            raise ValueError("tour needs at least one step")
        self._profile_id = profile_id
        self._lock = threading.RLock()
        self._initialized = False
        self._prompt_trigger: Optional[SignUpTrigger] = None
        self._tour: Optional[TourSession] = None
        self._pending_tour_call: Optional[ScheduledCall] = None
        self._pending_tour_token: Optional[object] = None

    # -- queries ---------------------------------------------------------

    @property
    def steps(self) -> List[TourStep]:
        return list(self._steps)

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def prompt_visible(self) -> bool:
        return self._prompt_trigger is not None

    @property
    def prompt_trigger(self) -> Optional[SignUpTrigger]:
        return self._prompt_trigger

    @property
    def tour_pending(self) -> bool:
        return self._pending_tour_token is not None

    @property
    def tour(self) -> Optional[TourSession]:
        """Copy of the active tour session, if any."""
        with self._lock:
            if self._tour is None:
                return None
            return TourSession(
                current_step_index=self._tour.current_step_index,
                is_active=self._tour.is_active,
                completed_step_ids=set(self._tour.completed_step_ids),
            )

    def record(self) -> OnboardingRecord:
        return self._store.load()

    def auth_status(self) -> AuthStatus:
        try:
            return self._auth_provider.current()
        except Exception as exc:
            logger.warning(
                "auth status unavailable, treating as signed out",
                extra={"profile_id": self._profile_id, "error": str(exc)},
            )
            return AuthStatus(is_authenticated=False, is_loading=False, error=str(exc))

    def phase(self) -> OnboardingPhase:
        with self._lock:
            return derive_phase(self._store.load(), self.auth_status(), self._tour)

    def step_metadata(self, index: int) -> Optional[TourStep]:
        return step_at(index, self._steps)

    # -- transitions -----------------------------------------------------

    def _log(self, message: str, **extra) -> None:
        logger.info(message, extra={"profile_id": self._profile_id, **extra})

    def _reconcile(self, record: OnboardingRecord, auth: AuthStatus) -> OnboardingRecord:
        if not record.has_signed_up and is_authenticated(auth):
            self._log("reconciling sign-up flag with authenticated session")
            self._prompt_trigger = None
            return self._store.save(OnboardingPatch(has_signed_up=True))
        return record

    def _activate_tour(self) -> None:
        self._tour = TourSession()

    def initialize(self) -> bool:
        """Run the once-per-session start-up rules.

        Returns ``True`` once the decisions have been made. While the auth
        provider is still loading only the first visit is recorded and the
        call returns ``False`` so it can be repeated when auth settles.
        """
        with self._lock:
            if self._initialized:
                return True
            record = self._store.load()
            if not record.has_visited:
                self._log("first visit observed")
                record = self._store.save(OnboardingPatch(has_visited=True))
            auth = self.auth_status()
            if auth.is_loading:
                logger.debug("auth still loading, deferring onboarding decisions")
                return False
            record = self._reconcile(record, auth)
            if derive_phase(record, auth, self._tour) is OnboardingPhase.SIGNED_UP_AWAITING_TOUR:
                self._log("auto-starting guided tour")
                self._activate_tour()
            self._initialized = True
            return True

    def request_gate(self, trigger: SignUpTrigger) -> bool:
        """Return ``True`` when the caller must not proceed with its action."""
        trigger = SignUpTrigger(trigger)
        with self._lock:
            record = self._store.load()
            auth = self.auth_status()
            phase = derive_phase(record, auth, self._tour)
            if phase is OnboardingPhase.RECONCILING:
                self._reconcile(record, auth)
                return False
            if phase is not OnboardingPhase.AWAITING_SIGNUP:
                return False
            if auth.is_loading:
                # Reconciliation clears this prompt once auth settles as signed in.
                logger.debug("auth still loading, prompting for %s action", trigger.value)
            if self._prompt_trigger is not None and self._prompt_trigger is not trigger:
                logger.debug("replacing visible prompt trigger %s", self._prompt_trigger.value)
            self._prompt_trigger = trigger
            self._log("sign-up prompt shown", trigger=trigger.value)
            return True

    def complete_sign_up(self) -> bool:
        with self._lock:
            if self._prompt_trigger is None:
                logger.debug("complete_sign_up ignored, no prompt visible")
                return False
            trigger = self._prompt_trigger
            record = self._store.save(OnboardingPatch(has_signed_up=True))
            self._prompt_trigger = None
            self._log("sign-up completed", trigger=trigger.value)
            if record.tour_due:
                self._schedule_tour_start()
            return True

    def dismiss_sign_up_prompt(self) -> bool:
        with self._lock:
            if self._prompt_trigger is None:
                return False
            self._log("sign-up prompt dismissed", trigger=self._prompt_trigger.value)
            self._prompt_trigger = None
            return True

    def advance_tour_step(self) -> bool:
        with self._lock:
            tour = self._tour
            if tour is None or not tour.is_active:
                logger.debug("advance_tour_step ignored, no active tour")
                return False
            if tour.current_step_index >= len(self._steps) - 1:
                self._store.save(OnboardingPatch(has_completed_tour=True))
                self._tour = None
                self._log("guided tour completed")
                return True
            tour.completed_step_ids.add(self._steps[tour.current_step_index].id)
            tour.current_step_index += 1
            return True

    def skip_tour(self) -> bool:
        with self._lock:
            tour = self._tour
            if tour is None or not tour.is_active:
                logger.debug("skip_tour ignored, no active tour")
                return False
            self._store.save(OnboardingPatch(skip_tour_requested=True, has_completed_tour=True))
            self._tour = None
            self._log("guided tour skipped", step_index=tour.current_step_index)
            return True

    def start_tour_manually(self) -> None:
        with self._lock:
            self._cancel_pending_tour()
            self._activate_tour()
            self._log("guided tour started manually")

    def reset_all(self) -> None:
        """Forget everything; the store error, if any, propagates after in-memory state is cleared."""
        with self._lock:
            self._cancel_pending_tour()
            self._tour = None
            self._prompt_trigger = None
            self._initialized = False
            self._log("onboarding reset")
            self._store.reset()

    def teardown(self) -> None:
        with self._lock:
            self._cancel_pending_tour()

    # -- delayed tour start ---------------------------------------------

    def _schedule_tour_start(self) -> None:
        self._cancel_pending_tour()
        token = object()
        self._pending_tour_token = token
        self._pending_tour_call = self._scheduler.schedule(
            self._tour_start_delay, lambda: self._fire_scheduled_tour(token)
        )

    def _fire_scheduled_tour(self, token: object) -> None:
        with self._lock:
            if self._pending_tour_token is not token:
                return
            self._pending_tour_token = None
            self._pending_tour_call = None
            if self._tour is not None:
                return
            if not self._store.load().tour_due:
                self._log("scheduled tour dropped, tour already completed or skipped")
                return
            self._activate_tour()
            self._log("guided tour started after sign-up")

    def _cancel_pending_tour(self) -> None:
        if self._pending_tour_call is not None:
            self._pending_tour_call.cancel()
        self._pending_tour_call = None
        self._pending_tour_token = None
