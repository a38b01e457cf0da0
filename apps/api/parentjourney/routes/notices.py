from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from .. import sessions
from ..greetings import daily_greeting
from ..notices import show_login_notice
from ..schemas import GreetingResponse, LoginNoticeRequest, NoticeResponse
from ..sessions import ProfileSession, get_profile_session

router = APIRouter(prefix="/api/v1", tags=["notices"])


def _notice_response(session: ProfileSession) -> NoticeResponse:
    notice = session.notices.current
    return NoticeResponse(visible=notice is not None, notice=notice)


@router.post("/notices/login", response_model=NoticeResponse)
async def create_login_notice(
    payload: LoginNoticeRequest,
    session: ProfileSession = Depends(get_profile_session),
) -> NoticeResponse:
    show_login_notice(session.notices, sessions.REGISTRY.greetings, payload.user_name)
    return _notice_response(session)


@router.get("/notices", response_model=NoticeResponse)
async def get_notice(session: ProfileSession = Depends(get_profile_session)) -> NoticeResponse:
    return _notice_response(session)


@router.post("/notices/dismiss", response_model=NoticeResponse)
async def dismiss_notice(session: ProfileSession = Depends(get_profile_session)) -> NoticeResponse:
    session.notices.dismiss()
    return _notice_response(session)


@router.get("/greetings/daily", response_model=GreetingResponse)
async def get_daily_greeting(
    day: Optional[date] = Query(None, description="Calendar day, defaults to today"),
) -> GreetingResponse:
    return GreetingResponse(greeting=daily_greeting(day))
