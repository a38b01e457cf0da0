"""Authentication status for onboarding decisions.

Onboarding never rejects a request for being signed out; it only needs to know
whether the caller is signed in. Every failure to verify a token therefore
resolves to a signed-out status with ``error`` set.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Optional

import httpx
import jwt
from fastapi import Header

from .config import CONFIG
from .schemas import AuthStatus, AuthUser

logger = logging.getLogger(__name__)


class AuthVerificationError(Exception):
    pass


class RequestAuthStatus:
    """Auth provider fed with the status resolved for the latest request."""

    def __init__(self, status: Optional[AuthStatus] = None) -> None:
        self._status = status or AuthStatus(is_loading=True)
        self._lock = threading.Lock()

    def update(self, status: AuthStatus) -> None:
        with self._lock:
            self._status = status

    def current(self) -> AuthStatus:
        with self._lock:
            return self._status


def _parse_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthVerificationError("Invalid authorization token.")
    return parts[1]


def _user_from_claims(payload: Dict[str, Any]) -> AuthUser:
    user_id = payload.get("sub") or payload.get("id")
    if not user_id:
        raise AuthVerificationError("Token has no subject.")
    metadata = payload.get("user_metadata") or {}
    return AuthUser(
        id=str(user_id),
        email=payload.get("email"),
        name=payload.get("name") or metadata.get("name"),
    )


async def _verify_access_token(token: str) -> Dict[str, Any]:
    audience = CONFIG.auth_jwt_audience
    if CONFIG.auth_jwt_secret:
        try:
            return jwt.decode(
                token,
                CONFIG.auth_jwt_secret,
                algorithms=["HS256"],
                audience=audience if audience else None,
                options={"verify_aud": bool(audience)},
            )
        except jwt.PyJWTError as exc:
            raise AuthVerificationError("Invalid or expired token.") from exc

    if CONFIG.auth_user_url:
        try:
            async with httpx.AsyncClient(timeout=10.0) as client:
                resp = await client.get(
                    CONFIG.auth_user_url,
                    headers={"Authorization": f"Bearer {token}"},
                )
        except httpx.HTTPError as exc:
            raise AuthVerificationError(f"Auth service unreachable: {exc}") from exc
        if resp.status_code >= 400:
            raise AuthVerificationError("Invalid or expired token.")
        try:
            data = resp.json()
        except ValueError as exc:
            raise AuthVerificationError("Auth service returned an unreadable response.") from exc
        if not isinstance(data, dict):
            raise AuthVerificationError("Auth service returned an unexpected response.")
        user = data.get("user") if isinstance(data.get("user"), dict) else data
        return {"sub": user.get("id"), "email": user.get("email"), "name": user.get("name")}

    raise AuthVerificationError("No token verification configured.")


async def resolve_auth_status(authorization: Optional[str], *, loading: bool = False) -> AuthStatus:
    if loading:
        return AuthStatus(is_loading=True)
    try:
        token = _parse_bearer_token(authorization)
        if token is None:
            return AuthStatus()
        user = _user_from_claims(await _verify_access_token(token))
    except AuthVerificationError as exc:
        logger.info("auth verification failed", extra={"error": str(exc)})
        return AuthStatus(error=str(exc))
    return AuthStatus(is_authenticated=True, user=user)


async def get_auth_status(
    authorization: Optional[str] = Header(None),
    auth_loading: Optional[str] = Header(None, alias="X-Auth-Loading"),
) -> AuthStatus:
    loading = (auth_loading or "").strip().lower() in {"1", "true", "yes"}
    return await resolve_auth_status(authorization, loading=loading)
