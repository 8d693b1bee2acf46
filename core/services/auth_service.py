# =============================================================================
# core/services/auth_service.py - Password Authentication
# =============================================================================
# Registration, login (with throttling and optional 2FA), password reset
# and password change. Successful sign-ins create a UserSession and return
# a JWT that references it.
# =============================================================================

import logging
from datetime import timedelta

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.auth.models import (
    ChangePasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    TwoFactorRequiredResponse,
    UserResponse,
)
from app.config import settings
from app.dependencies import RequestContext
from app.exceptions import (
    AccountLockedError,
    BadRequestError,
    ConflictError,
    NotFoundError,
    UnauthorizedError,
)
from core.models.common import AuditAction, Plan
from core.services.audit_service import AuditService
from core.services.session_service import SessionService
from core.services.two_factor_service import TwoFactorService
from core.tables import PasswordResetToken, User
from lib.database import utcnow
from lib.email_client import EmailClient, EmailSendError
from lib.login_throttle import LoginAttemptResult, format_lockout_duration, login_throttle, mask_email
from lib.security import (
    create_access_token,
    generate_urlsafe_token,
    hash_password,
    hash_token,
    verify_password,
)

logger = logging.getLogger(__name__)

RESET_TOKEN_TTL = timedelta(hours=1)


def to_user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        plan=Plan(user.plan),
        two_factor_enabled=bool(user.two_factor_enabled),
        has_password=user.password_hash is not None,
        created_at=user.created_at,
    )


def _locked_error(result: LoginAttemptResult) -> AccountLockedError:
    seconds = result.retry_after_seconds or 0
    return AccountLockedError(
        retry_after_seconds=seconds,
        locked_until=result.locked_until_iso,
        duration_text=format_lockout_duration(seconds),
    )


class AuthService:
    """Service for password-based authentication."""

    @staticmethod
    def find_user_by_email(db: Session, email: str) -> User | None:
        return db.scalar(select(User).where(User.email == email.strip().lower(), User.deleted_at.is_(None)))

    @staticmethod
    def issue_token(db: Session, user: User, ctx: RequestContext | None = None) -> TokenResponse:
        """Create a session and wrap it in an access token."""
        raw_token, session = SessionService.create_session(
            db,
            user.id,
            user_agent=ctx.user_agent if ctx else None,
            ip_address=ctx.ip if ctx else None,
        )
        access_token = create_access_token(
            {"sub": user.id, "sid": raw_token},
            expires_delta=session.expires_at - utcnow(),
        )
        return TokenResponse(access_token=access_token, expires_at=session.expires_at, user=to_user_response(user))

    @staticmethod
    def register(db: Session, data: RegisterRequest, ctx: RequestContext | None = None) -> TokenResponse:
        """
        Create a password account.

        Raises:
            ConflictError: EMAIL_TAKEN
        """
        existing = db.scalar(select(User.id).where(User.email == data.email))
        if existing is not None:
            raise ConflictError("An account with this email already exists", code="EMAIL_TAKEN")

        user = User(
            email=data.email,
            name=data.name.strip() if data.name and data.name.strip() else None,
            password_hash=hash_password(data.password),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info(f"Registered user {user.id} ({mask_email(user.email)})")

        try:
            EmailClient.send_welcome(user.email)
        except EmailSendError as e:
            logger.warning(f"Welcome email failed for user {user.id}: {e}")

        return AuthService.issue_token(db, user, ctx)

    @staticmethod
    def login(
        db: Session,
        data: LoginRequest,
        ctx: RequestContext,
    ) -> TokenResponse | TwoFactorRequiredResponse:
        """
        Verify credentials, throttle failures and handle the 2FA step.

        Raises:
            AccountLockedError: Too many recent failures for this ip + email
            UnauthorizedError: INVALID_CREDENTIALS or INVALID_2FA_CODE
        """
        check = login_throttle.check_login_allowed(ctx.ip, data.email)
        if not check.allowed:
            raise _locked_error(check)

        user = AuthService.find_user_by_email(db, data.email)
        if user is None or not verify_password(data.password, user.password_hash):
            failure = login_throttle.record_failed_attempt(ctx.ip, data.email)
            if not failure.allowed:
                raise _locked_error(failure)
            raise UnauthorizedError(
                "Invalid email or password",
                code="INVALID_CREDENTIALS",
                details={"remaining_attempts": failure.remaining_attempts},
            )

        if user.two_factor_enabled:
            if not data.totp_code:
                return TwoFactorRequiredResponse()
            if not TwoFactorService.verify_code(db, user, data.totp_code.strip()):
                failure = login_throttle.record_failed_attempt(ctx.ip, data.email)
                if not failure.allowed:
                    raise _locked_error(failure)
                raise UnauthorizedError(
                    "Invalid two-factor code",
                    code="INVALID_2FA_CODE",
                    details={"remaining_attempts": failure.remaining_attempts},
                )

        login_throttle.clear_login_attempts(ctx.ip, data.email)
        token = AuthService.issue_token(db, user, ctx)
        AuditService.record(
            db, user.id, AuditAction.AUTH_LOGIN,
            entity_type="User", entity_id=user.id, meta={"method": "password"}, ctx=ctx,
        )
        return token

    @staticmethod
    def logout(db: Session, user_id: str, session_id: str, ctx: RequestContext | None = None) -> None:
        SessionService.revoke_current(db, session_id)
        AuditService.record(db, user_id, AuditAction.AUTH_LOGOUT, entity_type="User", entity_id=user_id, ctx=ctx)

    @staticmethod
    def forgot_password(db: Session, email: str) -> None:
        """
        Email a reset link if the account exists.

        Never reveals whether the email is registered.
        """
        user = AuthService.find_user_by_email(db, email)
        if user is None:
            logger.info(f"Password reset requested for unknown email {mask_email(email)}")
            return

        token = generate_urlsafe_token()
        db.add(PasswordResetToken(
            user_id=user.id,
            token_hash=hash_token(token),
            expires_at=utcnow() + RESET_TOKEN_TTL,
        ))
        db.commit()

        reset_url = f"{settings.APP_URL}/reset-password?token={token}"
        try:
            EmailClient.send_password_reset(user.email, reset_url)
        except EmailSendError as e:
            logger.error(f"Password reset email failed for user {user.id}: {e}")

    @staticmethod
    def reset_password(db: Session, data: ResetPasswordRequest, ctx: RequestContext | None = None) -> None:
        """
        Raises:
            BadRequestError: INVALID_TOKEN (unknown, used or expired)
        """
        row = db.scalar(select(PasswordResetToken).where(PasswordResetToken.token_hash == hash_token(data.token)))
        if row is None or row.used_at is not None or row.expires_at <= utcnow():
            raise BadRequestError(
                "Reset link is invalid or has expired",
                code="INVALID_TOKEN",
                suggestion="Request a new password reset email",
            )

        user = db.scalar(select(User).where(User.id == row.user_id, User.deleted_at.is_(None)))
        if user is None:
            raise BadRequestError("Reset link is invalid or has expired", code="INVALID_TOKEN")

        user.password_hash = hash_password(data.password)
        row.used_at = utcnow()
        # Any other outstanding links for this user die with this one
        db.execute(
            update(PasswordResetToken)
            .where(PasswordResetToken.user_id == user.id, PasswordResetToken.used_at.is_(None))
            .values(used_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        db.commit()

        SessionService.revoke_all_user_sessions(db, user.id)
        logger.info(f"Password reset for user {user.id}")
        AuditService.record(db, user.id, AuditAction.AUTH_PASSWORD_RESET, entity_type="User", entity_id=user.id, ctx=ctx)

    @staticmethod
    def change_password(
        db: Session,
        user_id: str,
        session_id: str,
        data: ChangePasswordRequest,
        ctx: RequestContext | None = None,
    ) -> int:
        """
        Set a new password and sign out every other device.

        Returns:
            Number of other sessions revoked
        """
        user = db.scalar(select(User).where(User.id == user_id, User.deleted_at.is_(None)))
        if user is None:
            raise NotFoundError("User")

        if user.password_hash is not None:
            if not data.current_password or not verify_password(data.current_password, user.password_hash):
                raise BadRequestError("Current password is incorrect", code="INVALID_PASSWORD")

        user.password_hash = hash_password(data.new_password)
        db.commit()

        revoked = SessionService.revoke_all_user_sessions(db, user.id, except_session_id=session_id)
        AuditService.record(
            db, user.id, AuditAction.AUTH_PASSWORD_CHANGED,
            entity_type="User", entity_id=user.id, meta={"sessions_revoked": revoked}, ctx=ctx,
        )
        return revoked
