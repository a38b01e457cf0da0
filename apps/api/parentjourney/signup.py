"""Copy for the sign-up prompt, selected by the trigger that raised it."""
from __future__ import annotations

from typing import Optional

from .schemas import PromptSignal, SignUpTrigger

TRIGGER_MESSAGES = {
    SignUpTrigger.SAVE: "Want to save your progress and keep your journal entries secure?",
    SignUpTrigger.BOOKMARK: "Want to save your favorite entries and access them anytime?",
    SignUpTrigger.EXPORT: "Want to export your entries and unlock premium features?",
    SignUpTrigger.SETTINGS: "Want to personalize your experience and save your preferences?",
}

TRIGGER_ICONS = {
    SignUpTrigger.SAVE: "heart",
    SignUpTrigger.BOOKMARK: "book",
    SignUpTrigger.EXPORT: "sparkles",
    SignUpTrigger.SETTINGS: "settings",
}

PROMPT_DESCRIPTION = "Create a free account to unlock your full parenting journey experience."

PROMPT_BENEFITS = [
    "Save and sync all your journal entries",
    "Get personalized AI insights and feedback",
    "Access analytics and mood tracking",
    "Export entries and manage child profiles",
]


def prompt_signal(trigger: Optional[SignUpTrigger]) -> PromptSignal:
    if trigger is None:
        return PromptSignal(visible=False)
    return PromptSignal(
        visible=True,
        trigger=trigger,
        headline=TRIGGER_MESSAGES[trigger],
        icon=TRIGGER_ICONS[trigger],
        description=PROMPT_DESCRIPTION,
        benefits=list(PROMPT_BENEFITS),
    )
