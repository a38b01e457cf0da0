from __future__ import annotations

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from parentjourney import sessions
from parentjourney.greetings import GREETINGS
from parentjourney.main import app
from parentjourney.sessions import SessionRegistry

from .onboarding_helpers import ManualScheduler

client = TestClient(app)


@pytest.fixture
def scheduler(monkeypatch) -> ManualScheduler:
    manual = ManualScheduler()
    monkeypatch.setattr(sessions, "REGISTRY", SessionRegistry(scheduler=manual))
    return manual


def test_login_notice_round_trip(scheduler) -> None:
    headers = {"X-Browser-Profile-Id": str(uuid4())}
    resp = client.post("/api/v1/notices/login", json={"user_name": "Sam"}, headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["visible"] is True
    assert body["notice"]["title"] == "Welcome back, Sam!"
    assert body["notice"]["message"] == GREETINGS[0]

    scheduler.advance(7)
    assert client.get("/api/v1/notices", headers=headers).json() == {"visible": False, "notice": None}


def test_dismissed_notice_stays_dismissed(scheduler) -> None:
    headers = {"X-Browser-Profile-Id": str(uuid4())}
    client.post("/api/v1/notices/login", json={}, headers=headers)
    body = client.post("/api/v1/notices/dismiss", headers=headers).json()
    assert body["visible"] is False
    assert not scheduler.pending


def test_greetings_rotate_across_profiles(scheduler) -> None:
    first = client.post(
        "/api/v1/notices/login", json={}, headers={"X-Browser-Profile-Id": str(uuid4())}
    ).json()
    second = client.post(
        "/api/v1/notices/login", json={}, headers={"X-Browser-Profile-Id": str(uuid4())}
    ).json()
    assert first["notice"]["message"] == GREETINGS[0]
    assert second["notice"]["message"] == GREETINGS[1]


def test_daily_greeting_endpoint() -> None:
    resp = client.get("/api/v1/greetings/daily", params={"day": "2025-01-01"})
    assert resp.status_code == 200
    assert resp.json() == {"greeting": GREETINGS[1]}
