# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication.
#
# Access tokens are HS256 JWTs carrying:
#   sub - user id
#   sid - raw session token (validated against user_sessions on every call)
#   exp - expiry
#
# Because each request re-validates the session row, revoking a session
# (logout, "sign out other devices", password reset) takes effect at once.
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError
from sqlalchemy import select

from app.auth.models import AuthUser
from app.dependencies import DbDep
from app.exceptions import UnauthorizedError
from core.models.common import Plan
from core.services.session_service import SessionService
from core.tables import User
from lib.security import decode_access_token

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor (errors are raised by us, in the API envelope)
security = HTTPBearer(auto_error=False)


async def get_current_user(
    db: DbDep,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthUser:
    """
    Resolve the caller from the Bearer access token.

    This dependency:
    1. Extracts the Bearer token from the Authorization header
    2. Verifies the JWT signature and expiry
    3. Checks the backing session is neither revoked nor expired
    4. Loads the (non-deleted) user

    Raises:
        UnauthorizedError: 401 on any failure
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError()

    try:
        payload = decode_access_token(credentials.credentials)
    except ExpiredSignatureError:
        logger.debug("Access token has expired")
        raise UnauthorizedError("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise UnauthorizedError("Invalid token")

    user_id = payload.get("sub")
    session_token = payload.get("sid")
    if not user_id or not session_token:
        logger.warning("JWT token missing 'sub' or 'sid' claim")
        raise UnauthorizedError("Invalid token")

    session = SessionService.validate_session(db, session_token)
    if session is None or session.user_id != user_id:
        raise UnauthorizedError("Session expired or revoked", code="SESSION_INVALID")

    user = db.scalar(select(User).where(User.id == user_id, User.deleted_at.is_(None)))
    if user is None:
        raise UnauthorizedError("Account no longer exists")

    return AuthUser(id=user.id, email=user.email, plan=Plan(user.plan), session_id=session.id)

