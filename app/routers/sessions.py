# =============================================================================
# app/routers/sessions.py - Login Session Endpoints
# =============================================================================
# Lets a user see where they are signed in and sign other devices out.
# All endpoints require authentication.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from app.auth import AuthUser, get_current_user
from app.dependencies import DbDep
from core.models.common import OkResponse
from core.models.session import RevokeAllResponse, SessionList
from core.services.session_service import SessionService

router = APIRouter()


# =============================================================================
# Endpoints
# =============================================================================

@router.get("", response_model=SessionList)
async def list_sessions(
    db: DbDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    List active sessions.

    The session behind the current access token is flagged with
    is_current=true. Revoked and expired sessions are not returned.
    """
    sessions = SessionService.get_user_sessions(db, user.id, current_session_id=user.session_id)
    return SessionList(items=sessions, total=len(sessions))


@router.delete("/{session_id}", response_model=OkResponse)
async def revoke_session(
    session_id: Annotated[str, Path(description="Session ID")],
    db: DbDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Sign out one device.

    Errors:
    - 404 NOT_FOUND: no such session for this user
    - 400 ALREADY_REVOKED
    - 400 CANNOT_REVOKE_CURRENT: use logout instead
    """
    SessionService.revoke_session(db, session_id, user.id, current_session_id=user.session_id)
    return OkResponse()


@router.delete("", response_model=RevokeAllResponse)
async def revoke_other_sessions(
    db: DbDep,
    user: AuthUser = Depends(get_current_user),
):
    """Sign out every device except this one."""
    revoked = SessionService.revoke_all_user_sessions(db, user.id, except_session_id=user.session_id)
    return RevokeAllResponse(revoked=revoked)
