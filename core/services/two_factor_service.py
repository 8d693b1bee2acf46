# =============================================================================
# core/services/two_factor_service.py - TOTP Two-Factor Authentication
# =============================================================================
# Flow:
#   1. setup   - generate a secret + 10 backup codes, hold them as a pending
#                setup for 10 minutes and return the otpauth:// URI
#   2. enable  - confirm with a 6-digit code; the secret is stored Fernet
#                encrypted and only SHA-256 hashes of backup codes are kept
#   3. login   - a TOTP code or a backup code (consumed on use)
#   4. disable / regenerate backup codes - require a valid code
#
# Pending setups live in process memory and are lost on restart.
# =============================================================================

import logging
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Callable

import pyotp
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.auth.models import TwoFactorSetupResponse, TwoFactorStatusResponse
from app.dependencies import RequestContext
from app.exceptions import BadRequestError, NotFoundError
from core.models.common import AuditAction
from core.services.audit_service import AuditService
from core.tables import User
from lib.security import decrypt_secret, encrypt_secret, hash_token

logger = logging.getLogger(__name__)

ISSUER_NAME = "Job Tracker"
BACKUP_CODE_COUNT = 10
BACKUP_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
SETUP_TTL_SECONDS = 10 * 60


@dataclass
class PendingSetup:
    secret: str
    backup_codes: list[str]
    expires_at: float


# =============================================================================
# Backup Codes
# =============================================================================

def generate_backup_codes(count: int = BACKUP_CODE_COUNT) -> list[str]:
    """Random XXXX-XXXX codes without look-alike characters (0/O, 1/I)."""
    codes = []
    for _ in range(count):
        raw = "".join(secrets.choice(BACKUP_CODE_ALPHABET) for _ in range(8))
        codes.append(f"{raw[:4]}-{raw[4:]}")
    return codes


def normalize_backup_code(code: str) -> str:
    """Accept "abcd efgh", "ABCDEFGH" or "ABCD-EFGH" alike."""
    compact = "".join(ch for ch in code if ch not in " -").upper()
    if len(compact) != 8:
        return compact
    return f"{compact[:4]}-{compact[4:]}"


def hash_backup_code(code: str) -> str:
    return hash_token("".join(code.split()).lower())


def is_totp_format(code: str) -> bool:
    stripped = code.replace(" ", "")
    return len(stripped) == 6 and stripped.isdigit()


def verify_totp(secret: str, code: str) -> bool:
    """Accepts the current code and one step either side for clock drift."""
    return pyotp.TOTP(secret).verify(code.replace(" ", ""), valid_window=1)


# =============================================================================
# Service
# =============================================================================

class TwoFactorService:
    """Service for TOTP enrolment and verification."""

    _pending: dict[str, PendingSetup] = {}
    _lock = threading.Lock()
    clock: Callable[[], float] = time.time

    @staticmethod
    def _get_user(db: Session, user_id: str) -> User:
        user = db.scalar(select(User).where(User.id == user_id, User.deleted_at.is_(None)))
        if user is None:
            raise NotFoundError("User")
        return user

    @classmethod
    def _take_pending(cls, user_id: str) -> PendingSetup | None:
        with cls._lock:
            pending = cls._pending.get(user_id)
            if pending is not None and pending.expires_at <= cls.clock():
                del cls._pending[user_id]
                return None
            return pending

    @classmethod
    def clear_pending(cls) -> None:
        with cls._lock:
            cls._pending.clear()

    @staticmethod
    def status(db: Session, user_id: str) -> TwoFactorStatusResponse:
        user = TwoFactorService._get_user(db, user_id)
        return TwoFactorStatusResponse(
            enabled=bool(user.two_factor_enabled),
            backup_codes_count=len(user.backup_codes or []) if user.two_factor_enabled else 0,
        )

    @classmethod
    def setup(cls, db: Session, user_id: str) -> TwoFactorSetupResponse:
        """
        Start enrolment.

        Raises:
            BadRequestError: ALREADY_ENABLED
        """
        user = cls._get_user(db, user_id)
        if user.two_factor_enabled:
            raise BadRequestError("Two-factor authentication is already enabled", code="ALREADY_ENABLED")

        secret = pyotp.random_base32()
        backup_codes = generate_backup_codes()
        with cls._lock:
            cls._pending[user_id] = PendingSetup(
                secret=secret,
                backup_codes=backup_codes,
                expires_at=cls.clock() + SETUP_TTL_SECONDS,
            )

        otpauth_url = pyotp.TOTP(secret).provisioning_uri(name=user.email, issuer_name=ISSUER_NAME)
        logger.info(f"Started 2FA setup for user {user_id}")
        return TwoFactorSetupResponse(secret=secret, otpauth_url=otpauth_url, backup_codes=backup_codes)

    @classmethod
    def enable(cls, db: Session, user_id: str, code: str, ctx: RequestContext | None = None) -> None:
        """
        Confirm a pending setup.

        Raises:
            BadRequestError: ALREADY_ENABLED, SETUP_EXPIRED or INVALID_CODE
        """
        user = cls._get_user(db, user_id)
        if user.two_factor_enabled:
            raise BadRequestError("Two-factor authentication is already enabled", code="ALREADY_ENABLED")

        pending = cls._take_pending(user_id)
        if pending is None:
            raise BadRequestError(
                "Two-factor setup has expired",
                code="SETUP_EXPIRED",
                suggestion="Start the setup again",
            )
        if not verify_totp(pending.secret, code):
            raise BadRequestError("Invalid verification code", code="INVALID_CODE")

        user.two_factor_secret = encrypt_secret(pending.secret)
        user.backup_codes = [hash_backup_code(c) for c in pending.backup_codes]
        user.two_factor_enabled = True
        db.commit()

        with cls._lock:
            cls._pending.pop(user_id, None)

        logger.info(f"Enabled 2FA for user {user_id}")
        AuditService.record(db, user_id, AuditAction.AUTH_2FA_ENABLED, entity_type="User", entity_id=user_id, ctx=ctx)

    @staticmethod
    def verify_code(db: Session, user: User, code: str) -> bool:
        """
        Check a login/confirmation code against a 2FA-enabled user.

        A matching backup code is removed so it can't be used twice; the
        caller's session is committed here in that case.
        """
        if not user.two_factor_enabled or not code:
            return False

        if is_totp_format(code):
            secret = decrypt_secret(user.two_factor_secret) if user.two_factor_secret else None
            return bool(secret) and verify_totp(secret, code)

        hashed = hash_backup_code(normalize_backup_code(code))
        remaining = list(user.backup_codes or [])
        if hashed not in remaining:
            return False

        remaining.remove(hashed)
        user.backup_codes = remaining
        db.commit()
        logger.info(f"Consumed a backup code for user {user.id} ({len(remaining)} left)")
        return True

    @staticmethod
    def _require_enabled_and_valid(db: Session, user_id: str, code: str) -> User:
        user = TwoFactorService._get_user(db, user_id)
        if not user.two_factor_enabled:
            raise BadRequestError("Two-factor authentication is not enabled", code="NOT_ENABLED")
        if not TwoFactorService.verify_code(db, user, code):
            raise BadRequestError("Invalid verification code", code="INVALID_CODE")
        return user

    @staticmethod
    def disable(db: Session, user_id: str, code: str, ctx: RequestContext | None = None) -> None:
        """
        Raises:
            BadRequestError: NOT_ENABLED or INVALID_CODE
        """
        user = TwoFactorService._require_enabled_and_valid(db, user_id, code)
        user.two_factor_enabled = False
        user.two_factor_secret = None
        user.backup_codes = []
        db.commit()

        logger.info(f"Disabled 2FA for user {user_id}")
        AuditService.record(db, user_id, AuditAction.AUTH_2FA_DISABLED, entity_type="User", entity_id=user_id, ctx=ctx)

    @staticmethod
    def regenerate_backup_codes(db: Session, user_id: str, code: str) -> list[str]:
        """Replace every backup code; returns the new plaintext codes once."""
        user = TwoFactorService._require_enabled_and_valid(db, user_id, code)
        codes = generate_backup_codes()
        user.backup_codes = [hash_backup_code(c) for c in codes]
        db.commit()
        logger.info(f"Regenerated backup codes for user {user_id}")
        return codes
