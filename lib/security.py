# =============================================================================
# lib/security.py - Passwords, Tokens and Secrets
# =============================================================================
# Cryptographic helpers shared by auth, sessions and 2FA:
# - bcrypt password hashing (passlib)
# - opaque random tokens stored only as SHA-256 hashes
# - JWT access tokens (python-jose, HS256)
# - Fernet encryption for 2FA secrets at rest
# =============================================================================

import base64
import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

from cryptography.fernet import Fernet, InvalidToken
from jose import jwt
from passlib.context import CryptContext

from app.config import settings

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# =============================================================================
# Passwords
# =============================================================================

def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """Verify password against hash. Accounts without a password never match."""
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        logger.warning("Stored password hash could not be parsed")
        return False


# =============================================================================
# Opaque Tokens
# =============================================================================

def generate_session_token() -> str:
    """32 random bytes as hex."""
    return secrets.token_hex(32)


def generate_urlsafe_token() -> str:
    """32 random bytes, url-safe base64 (password reset links)."""
    return secrets.token_urlsafe(32)


def hash_token(token: str) -> str:
    """SHA-256 hex digest. Only this value is ever stored."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def constant_time_equals(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


# =============================================================================
# JWT
# =============================================================================

def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a JWT.

    Raises:
        jose.JWTError (incl. ExpiredSignatureError) on any failure
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[JWT_ALGORITHM])


# =============================================================================
# Secret Encryption (2FA)
# =============================================================================

def _fernet() -> Fernet:
    key = settings.TWO_FACTOR_ENCRYPTION_KEY
    if not key:
        # Stable key derived from SECRET_KEY so dev setups need no extra config
        digest = hashlib.sha256(f"2fa:{settings.SECRET_KEY}".encode("utf-8")).digest()
        key = base64.urlsafe_b64encode(digest).decode("ascii")
    return Fernet(key.encode("ascii"))


def encrypt_secret(plaintext: str) -> str:
    return _fernet().encrypt(plaintext.encode("utf-8")).decode("ascii")


def decrypt_secret(ciphertext: str) -> str | None:
    """Decrypt a stored secret; None when the key changed or data is corrupt."""
    try:
        return _fernet().decrypt(ciphertext.encode("ascii")).decode("utf-8")
    except InvalidToken:
        logger.error("Failed to decrypt 2FA secret (wrong key or corrupt value)")
        return None
