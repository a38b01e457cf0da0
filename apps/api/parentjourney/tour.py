"""Guided tour catalog."""
from __future__ import annotations

from typing import List, Optional

from .schemas import TourStep

TOUR_STEPS: List[TourStep] = [
    TourStep(
        id="journal",
        title="This is your Journal",
        description="Write anything you're feeling or reflecting on. We'll help you process it.",
        illustration="📝",
        color="blue",
    ),
    TourStep(
        id="feelings",
        title="Tag how you're feeling",
        description="Choose up to 3 emotions. This helps us give better insights.",
        illustration="🎭",
        color="pink",
    ),
    TourStep(
        id="ai-reflection",
        title="Get a personalized AI reflection",
        description=(
            "After you submit a journal entry, we'll offer a gentle insight or affirmation "
            "based on your experience."
        ),
        illustration="🤖",
        color="purple",
    ),
    TourStep(
        id="assistant-chat",
        title="Chat with your AI Assistant",
        description=(
            "Need immediate support? Click the chat bubble in the bottom-right corner for "
            "real-time parenting guidance and advice."
        ),
        illustration="💬",
        color="indigo",
    ),
    TourStep(
        id="history",
        title="See your full history here",
        description="Browse, favorite, and reflect on past entries. You'll see growth over time.",
        illustration="📚",
        color="green",
    ),
    TourStep(
        id="calm-reset",
        title="Need a moment to reset?",
        description="Try the Calm Reset if things feel heavy. You'll find it after tough entries.",
        illustration="🌿",
        color="teal",
    ),
]


def step_at(index: int, steps: Optional[List[TourStep]] = None) -> Optional[TourStep]:
    steps = TOUR_STEPS if steps is None else steps
    if 0 <= index < len(steps):
        return steps[index]
    return None


def find_step(step_id: str, steps: Optional[List[TourStep]] = None) -> Optional[TourStep]:
    steps = TOUR_STEPS if steps is None else steps
    return next((step for step in steps if step.id == step_id), None)
