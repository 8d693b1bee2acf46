# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Access tokens carry the user id (sub) and login session id (sid). Every
# request re-checks that the session row is still live, so logout and
# "revoke session" take effect immediately.
#
# Usage:
#   from app.auth import AuthUser, get_current_user
#
#   @router.get("/applications")
#   async def list_applications(user: AuthUser = Depends(get_current_user)):
#       ...
# =============================================================================

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser, UserResponse

__all__ = [
    "get_current_user",
    "AuthUser",
    "UserResponse",
]
