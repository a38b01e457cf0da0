from __future__ import annotations

from datetime import date

import pytest

from parentjourney.greetings import GREETINGS, GreetingRotator, daily_greeting
from parentjourney.notices import NoticeBoard, show_login_notice

from .onboarding_helpers import FakeClock, ManualScheduler


def test_rotator_starts_at_zero_and_wraps() -> None:
    rotator = GreetingRotator(["a", "b", "c"])
    assert rotator.index == 0
    assert [rotator.next() for _ in range(4)] == ["a", "b", "c", "a"]
    assert rotator.index == 1


def test_rotator_rejects_empty_catalog() -> None:
    with pytest.raises(ValueError):
        GreetingRotator([])


def test_daily_greeting_uses_day_of_year() -> None:
    jan_first = date(2025, 1, 1)
    assert daily_greeting(jan_first) == GREETINGS[1 % len(GREETINGS)]
    assert daily_greeting(jan_first, ["x", "y"]) == "y"
    assert daily_greeting(date(2025, 1, 2), ["x", "y"]) == "x"


def test_notice_auto_dismisses_after_delay() -> None:
    scheduler = ManualScheduler()
    board = NoticeBoard(scheduler=scheduler, auto_dismiss_seconds=7, clock=FakeClock())
    board.show("Welcome back!", "hello")
    scheduler.advance(6.9)
    assert board.current is not None
    scheduler.advance(0.1)
    assert board.current is None


def test_manual_dismiss_cancels_timer() -> None:
    scheduler = ManualScheduler()
    board = NoticeBoard(scheduler=scheduler, auto_dismiss_seconds=7)
    board.show("Welcome back!", "hello")
    assert board.dismiss()
    assert not scheduler.pending
    assert not board.dismiss()


def test_new_notice_restarts_timer() -> None:
    scheduler = ManualScheduler()
    board = NoticeBoard(scheduler=scheduler, auto_dismiss_seconds=7)
    board.show("first", "one")
    scheduler.advance(5)
    board.show("second", "two")
    scheduler.advance(5)
    assert board.current.title == "second"
    scheduler.advance(2)
    assert board.current is None


def test_teardown_stops_auto_dismiss() -> None:
    scheduler = ManualScheduler()
    board = NoticeBoard(scheduler=scheduler, auto_dismiss_seconds=7)
    board.show("Welcome back!", "hello")
    board.teardown()
    assert not scheduler.pending


def test_login_notice_uses_name_and_rotating_greeting() -> None:
    board = NoticeBoard(scheduler=ManualScheduler())
    rotator = GreetingRotator(["first", "second"])
    notice = show_login_notice(board, rotator, "Sam")
    assert notice.title == "Welcome back, Sam!"
    assert notice.message == "first"
    assert notice.auto_dismiss_seconds == 7.0
    assert show_login_notice(board, rotator, "  ").title == "Welcome back!"
    assert board.current.message == "second"
