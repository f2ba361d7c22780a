"""
Admin authentication endpoints — login, logout, current session.

Login flow:
  1. Forward credentials to the platform API
  2. Refuse non-admin accounts
  3. Store the AdminSession in Redis
  4. Return the session id (also set as an HTTP-only cookie)
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from invest_admin.api.deps import get_current_session, get_session_service
from invest_admin.config import settings
from invest_admin.schemas.auth import LoginRequest, SessionResponse
from invest_admin.services.platform_client import PlatformAPIError
from invest_admin.services.session_service import (
    AdminSession,
    NotAdminError,
    SessionExpiredError,
    SessionService,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _session_response(session: AdminSession) -> SessionResponse:
    return SessionResponse(
        session_id=session.session_id,
        expires_at=session.expires_at,
        user=session.user,
    )


@router.post("/login", response_model=SessionResponse)
async def login(
    payload: LoginRequest,
    response: Response,
    service: SessionService = Depends(get_session_service),
):
    """Log in with platform credentials. Only admins get a session."""
    try:
        session = await service.login(payload.email, payload.password, payload.device_id)
    except NotAdminError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    except SessionExpiredError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc))
    except PlatformAPIError as exc:
        if exc.status_code is not None and 400 <= exc.status_code < 500:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.message)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.message)

    ttl = int((session.expires_at - session.created_at).total_seconds())
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=session.session_id,
        max_age=ttl,
        httponly=True,
        samesite="strict",
        secure=settings.APP_ENV == "production",
    )
    return _session_response(session)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    response: Response,
    session: AdminSession = Depends(get_current_session),
    service: SessionService = Depends(get_session_service),
):
    """End the current session and clear its cookie."""
    await service.logout(session.session_id)
    response.delete_cookie(settings.AUTH_COOKIE_NAME)
    response.status_code = status.HTTP_204_NO_CONTENT
    return response


@router.get("/me", response_model=SessionResponse)
async def me(
    session: AdminSession = Depends(get_current_session),
    service: SessionService = Depends(get_session_service),
):
    """Current session, after the platform confirms its token is still valid."""
    if not await service.verify(session):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired or invalid",
        )
    return _session_response(session)
