# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Password sign-up/sign-in, logout, password reset and two-factor setup.
# OAuth sign-in lives in app/auth/oauth.py.
# =============================================================================

import logging

from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user
from app.auth.models import (
    AuthUser,
    BackupCodesResponse,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    TwoFactorCodeRequest,
    TwoFactorEnableRequest,
    TwoFactorRequiredResponse,
    TwoFactorSetupResponse,
    TwoFactorStatusResponse,
)
from app.dependencies import ContextDep, DbDep
from core.models.common import OkResponse
from core.services.auth_service import AuthService
from core.services.two_factor_service import TwoFactorService
from lib.rate_limiter import rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


# =============================================================================
# Password Authentication
# =============================================================================

@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(body: RegisterRequest, db: DbDep, ctx: ContextDep):
    """
    Create an account with email and password and sign it in.

    Raises:
        409 EMAIL_TAKEN: An account with this email exists
    """
    return AuthService.register(db, body, ctx)


@router.post("/login", response_model=TokenResponse | TwoFactorRequiredResponse)
async def login(body: LoginRequest, db: DbDep, ctx: ContextDep):
    """
    Sign in with email and password.

    When the account has 2FA enabled and no totp_code is sent, responds
    with {"requires_2fa": true}; repeat the call including the code.

    Raises:
        401 INVALID_CREDENTIALS: Wrong email or password
        401 INVALID_2FA_CODE: Wrong authenticator or backup code
        429 ACCOUNT_LOCKED: Too many failures for this email or IP
    """
    return AuthService.login(db, body, ctx)


@router.post("/logout", response_model=OkResponse)
async def logout(
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    """Revoke the session behind the current access token."""
    AuthService.logout(db, user.id, user.session_id, ctx)
    return OkResponse()


@router.post(
    "/forgot-password",
    response_model=OkResponse,
    dependencies=[Depends(rate_limit("auth:forgot-password", 5))],
)
async def forgot_password(body: ForgotPasswordRequest, db: DbDep):
    """
    Email a password reset link.

    Always responds {"ok": true} so the endpoint can't be used to probe
    which emails are registered.
    """
    AuthService.forgot_password(db, body.email)
    return OkResponse()


@router.post(
    "/reset-password",
    response_model=OkResponse,
    dependencies=[Depends(rate_limit("auth:reset-password", 5))],
)
async def reset_password(body: ResetPasswordRequest, db: DbDep, ctx: ContextDep):
    """
    Set a new password using a reset token.

    Signs the user out everywhere.

    Raises:
        400 INVALID_TOKEN: Token unknown, used or expired
    """
    AuthService.reset_password(db, body, ctx)
    return OkResponse()


# =============================================================================
# Two-Factor Authentication
# =============================================================================

@router.get("/2fa/status", response_model=TwoFactorStatusResponse)
async def two_factor_status(
    db: DbDep,
    user: AuthUser = Depends(get_current_user),
):
    return TwoFactorService.status(db, user.id)


@router.post("/2fa/setup", response_model=TwoFactorSetupResponse)
async def two_factor_setup(
    db: DbDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Begin enabling 2FA.

    Returns a new TOTP secret, its otpauth:// URL for authenticator apps
    and ten backup codes. Nothing is stored until /2fa/enable confirms a
    code; the pending setup expires after 10 minutes.
    """
    return TwoFactorService.setup(db, user.id)


@router.post("/2fa/enable", response_model=OkResponse)
async def two_factor_enable(
    body: TwoFactorEnableRequest,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    """Confirm the pending setup with a current 6-digit code."""
    TwoFactorService.enable(db, user.id, body.code, ctx)
    return OkResponse()


@router.post("/2fa/disable", response_model=OkResponse)
async def two_factor_disable(
    body: TwoFactorCodeRequest,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    """Turn 2FA off. Accepts an authenticator code or a backup code."""
    TwoFactorService.disable(db, user.id, body.code, ctx)
    return OkResponse()


@router.post("/2fa/backup-codes", response_model=BackupCodesResponse)
async def regenerate_backup_codes(
    body: TwoFactorCodeRequest,
    db: DbDep,
    user: AuthUser = Depends(get_current_user),
):
    """Replace all backup codes. The old ones stop working immediately."""
    codes = TwoFactorService.regenerate_backup_codes(db, user.id, body.code)
    return BackupCodesResponse(backup_codes=codes)
