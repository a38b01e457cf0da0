"""Encouraging greetings shown on the journal page and after login."""
from __future__ import annotations

import threading
from datetime import date
from typing import List, Optional

GREETINGS: List[str] = [
    "You're doing better than you think 💛",
    "Every day counts, even the hard ones 🌿",
    "Your reflections matter. You matter.",
    "Thanks for showing up today. Let's reflect together.",
    "Parenting isn't perfect, but your effort is powerful.",
    "You're doing an amazing job. What's on your heart today?",
    "Every parent needs a safe space to reflect. How are you feeling?",
    "Your thoughts and experiences matter. What would you like to share?",
    "Parenting is a journey of growth. What's happening in yours today?",
    "You're not alone in this adventure. What's been on your mind?",
    "Take a moment for yourself. What's worth remembering from today?",
    "Your parenting story is unique and valuable. What chapter are you living?",
    "This is your space to be honest and real. What's in your heart?",
    "Every day brings new lessons in parenting. What did today teach you?",
    "Your feelings and experiences are valid. What would you like to process?",
    "Parenting moments, big and small, all matter. What's yours today?",
    "This is a judgment-free space for your thoughts. What's happening?",
    "You deserve recognition for all you do. What's been challenging or wonderful?",
    "Your parenting journey deserves to be honored. What's your story today?",
]


def daily_greeting(day: Optional[date] = None, greetings: Optional[List[str]] = None) -> str:
    """Same greeting for the whole calendar day, keyed on day-of-year."""
    greetings = GREETINGS if greetings is None else greetings
    day = day or date.today()
    return greetings[day.timetuple().tm_yday % len(greetings)]


class GreetingRotator:
    """Hands out greetings in order, wrapping around.

    The counter starts at zero and lives as long as its owner; nothing needs
    tearing down.
    """

    def __init__(self, greetings: Optional[List[str]] = None, start: int = 0) -> None:
        self._greetings = list(GREETINGS if greetings is None else greetings)
        if not self._greetings:
            raise ValueError("greetings cannot be empty")
        self._index = start % len(self._greetings)
        self._lock = threading.Lock()

    @property
    def index(self) -> int:
        return self._index

    def next(self) -> str:
        with self._lock:
            greeting = self._greetings[self._index]
            self._index = (self._index + 1) % len(self._greetings)
            return greeting
