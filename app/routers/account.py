# =============================================================================
# app/routers/account.py - Account Endpoints
# =============================================================================
# Profile, password change, linked sign-in providers and account deletion.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from app.auth import AuthUser, UserResponse, get_current_user
from app.auth.models import ChangePasswordRequest
from app.dependencies import ContextDep, DbDep
from core.models.account import ChangePasswordResponse, ConnectionsResponse
from core.models.common import OkResponse
from core.services.account_service import AccountService
from core.services.auth_service import AuthService
from lib.rate_limiter import rate_limit

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_me(
    db: DbDep,
    user: AuthUser = Depends(get_current_user),
):
    """Current user, including plan and whether 2FA and a password are set."""
    return AccountService.me(db, user.id)


@router.post(
    "/change-password",
    response_model=ChangePasswordResponse,
    dependencies=[Depends(rate_limit("account:change-password", 5))],
)
async def change_password(
    body: ChangePasswordRequest,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Change (or, for OAuth-only accounts, set) the password.

    The current password is required when one is set. Every other
    session is signed out; this one stays valid.
    """
    revoked = AuthService.change_password(db, user.id, user.session_id, body, ctx)
    return ChangePasswordResponse(sessions_revoked=revoked)


@router.get("/connections", response_model=ConnectionsResponse)
async def list_connections(
    db: DbDep,
    user: AuthUser = Depends(get_current_user),
):
    return AccountService.connections(db, user.id)


@router.delete("/connections/{provider}", response_model=OkResponse)
async def disconnect_provider(
    provider: Annotated[str, Path(description="google or github")],
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Unlink an OAuth provider.

    Refused with 400 LAST_SIGN_IN_METHOD when it is the only way left to
    sign in.
    """
    AccountService.disconnect(db, user.id, provider, ctx)
    return OkResponse()


@router.delete(
    "",
    response_model=OkResponse,
    dependencies=[Depends(rate_limit("account:delete", 2))],
)
async def delete_account(
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    """Delete the account and sign out everywhere."""
    AccountService.delete_account(db, user.id, ctx)
    return OkResponse()
