"""Pydantic schemas shared across the API."""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SignUpTrigger(str, Enum):
    SAVE = "save"
    BOOKMARK = "bookmark"
    EXPORT = "export"
    SETTINGS = "settings"


class OnboardingPhase(str, Enum):
    FRESH = "fresh"
    AWAITING_SIGNUP = "awaiting_signup"
    RECONCILING = "reconciling"
    SIGNED_UP_AWAITING_TOUR = "signed_up_awaiting_tour"
    TOUR_ACTIVE = "tour_active"
    SETTLED = "settled"


class OnboardingRecord(BaseModel):
    """Persisted onboarding flags for one browser profile.

    Serialized with camelCase keys so the stored JSON matches the layout the
    web client has always written under the onboarding key.
    """

    model_config = ConfigDict(populate_by_name=True)

    has_visited: bool = Field(default=False, alias="hasVisited")
    has_signed_up: bool = Field(default=False, alias="hasSignedUp")
    has_completed_tour: bool = Field(default=False, alias="hasCompletedTour")
    skip_tour_requested: bool = Field(default=False, alias="skipTourRequested")
    last_visit_date: datetime = Field(default_factory=utc_now, alias="lastVisitDate")

    @property
    def tour_due(self) -> bool:
        return self.has_signed_up and not self.has_completed_tour and not self.skip_tour_requested


class OnboardingPatch(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    has_visited: Optional[bool] = Field(default=None, alias="hasVisited")
    has_signed_up: Optional[bool] = Field(default=None, alias="hasSignedUp")
    has_completed_tour: Optional[bool] = Field(default=None, alias="hasCompletedTour")
    skip_tour_requested: Optional[bool] = Field(default=None, alias="skipTourRequested")


class AuthUser(BaseModel):
    id: str
    email: Optional[str] = None
    name: Optional[str] = None


class AuthStatus(BaseModel):
    is_authenticated: bool = False
    user: Optional[AuthUser] = None
    is_loading: bool = False
    error: Optional[str] = None


class TourStep(BaseModel):
    id: str
    title: str
    description: str
    illustration: str
    color: str


class PromptSignal(BaseModel):
    visible: bool
    trigger: Optional[SignUpTrigger] = None
    headline: Optional[str] = None
    icon: Optional[str] = None
    description: Optional[str] = None
    benefits: List[str] = Field(default_factory=list)


class TourSignal(BaseModel):
    active: bool
    pending_start: bool = False
    current_step_index: Optional[int] = None
    total_steps: int
    step: Optional[TourStep] = None
    completed_step_ids: List[str] = Field(default_factory=list)


class OnboardingSnapshot(BaseModel):
    profile_id: str
    phase: OnboardingPhase
    record: OnboardingRecord
    prompt: PromptSignal
    tour: TourSignal


class GuardRequest(BaseModel):
    trigger: SignUpTrigger


class GuardResponse(BaseModel):
    proceed: bool
    snapshot: OnboardingSnapshot


class Notice(BaseModel):
    title: str
    message: str
    shown_at: datetime
    auto_dismiss_seconds: float


class LoginNoticeRequest(BaseModel):
    user_name: Optional[str] = Field(default=None, max_length=120)


class NoticeResponse(BaseModel):
    visible: bool
    notice: Optional[Notice] = None


class GreetingResponse(BaseModel):
    greeting: str
