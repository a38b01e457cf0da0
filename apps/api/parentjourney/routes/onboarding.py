from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from .. import sessions
from ..schemas import GuardRequest, GuardResponse, OnboardingSnapshot, TourStep
from ..sessions import ProfileSession, get_profile_id, get_profile_session
from ..store import OnboardingStoreError
from ..tour import find_step

router = APIRouter(prefix="/api/v1/onboarding", tags=["onboarding"])


def _store_failure(exc: OnboardingStoreError) -> HTTPException:
    return HTTPException(status_code=503, detail=str(exc))


@router.get("", response_model=OnboardingSnapshot)
async def get_onboarding(session: ProfileSession = Depends(get_profile_session)) -> OnboardingSnapshot:
    return session.snapshot()


@router.post("/initialize", response_model=OnboardingSnapshot)
async def initialize_onboarding(session: ProfileSession = Depends(get_profile_session)) -> OnboardingSnapshot:
    try:
        session.machine.initialize()
    except OnboardingStoreError as exc:
        raise _store_failure(exc) from exc
    return session.snapshot()


@router.post("/guard", response_model=GuardResponse)
async def guard_action(
    payload: GuardRequest,
    session: ProfileSession = Depends(get_profile_session),
) -> GuardResponse:
    # The gated action itself runs in the browser; here it only reports back.
    outcome = {"proceed": False}

    def _proceed() -> None:
        outcome["proceed"] = True

    try:
        session.dispatcher.guard(payload.trigger, _proceed)
    except OnboardingStoreError as exc:
        raise _store_failure(exc) from exc
    return GuardResponse(proceed=outcome["proceed"], snapshot=session.snapshot())


@router.post("/signup/complete", response_model=OnboardingSnapshot)
async def complete_sign_up(session: ProfileSession = Depends(get_profile_session)) -> OnboardingSnapshot:
    try:
        session.machine.complete_sign_up()
    except OnboardingStoreError as exc:
        raise _store_failure(exc) from exc
    return session.snapshot()


@router.post("/signup/dismiss", response_model=OnboardingSnapshot)
async def dismiss_sign_up(session: ProfileSession = Depends(get_profile_session)) -> OnboardingSnapshot:
    session.machine.dismiss_sign_up_prompt()
    return session.snapshot()


@router.post("/tour/advance", response_model=OnboardingSnapshot)
async def advance_tour(session: ProfileSession = Depends(get_profile_session)) -> OnboardingSnapshot:
    try:
        session.machine.advance_tour_step()
    except OnboardingStoreError as exc:
        raise _store_failure(exc) from exc
    return session.snapshot()


@router.post("/tour/skip", response_model=OnboardingSnapshot)
async def skip_tour(session: ProfileSession = Depends(get_profile_session)) -> OnboardingSnapshot:
    try:
        session.machine.skip_tour()
    except OnboardingStoreError as exc:
        raise _store_failure(exc) from exc
    return session.snapshot()


@router.post("/tour/start", response_model=OnboardingSnapshot)
async def start_tour(session: ProfileSession = Depends(get_profile_session)) -> OnboardingSnapshot:
    session.machine.start_tour_manually()
    return session.snapshot()


@router.get("/tour/steps", response_model=List[TourStep])
async def list_tour_steps(session: ProfileSession = Depends(get_profile_session)) -> List[TourStep]:
    return session.machine.steps


@router.get("/tour/steps/{step_id}", response_model=TourStep)
async def get_tour_step(step_id: str, session: ProfileSession = Depends(get_profile_session)) -> TourStep:
    step = find_step(step_id, session.machine.steps)
    if step is None:
        raise HTTPException(status_code=404, detail="Unknown tour step.")
    return step


@router.delete("", response_model=OnboardingSnapshot)
async def reset_onboarding(session: ProfileSession = Depends(get_profile_session)) -> OnboardingSnapshot:
    try:
        session.machine.reset_all()
    except OnboardingStoreError as exc:
        raise _store_failure(exc) from exc
    return session.snapshot()


@router.delete("/session")
async def close_session(profile_id: str = Depends(get_profile_id)) -> dict:
    return {"closed": sessions.REGISTRY.discard(profile_id)}
