# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# Passwords are never whitespace-stripped.
# =============================================================================

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from core.models.common import Plan


class AuthUser(BaseModel):
    """
    Authenticated caller resolved from the access token.

    session_id is the UserSession row backing the token; plan is read from
    the users table on every request so upgrades apply immediately.
    """
    id: str
    email: str
    plan: Plan = Plan.FREE
    session_id: str

    model_config = ConfigDict(frozen=True)

    @property
    def is_pro(self) -> bool:
        return self.plan == Plan.PRO


class UserResponse(BaseModel):
    """Public view of the current user."""
    id: str
    email: str
    name: Optional[str] = None
    plan: Plan
    two_factor_enabled: bool = False
    has_password: bool = True
    created_at: Optional[datetime] = None
    # Only filled in by /account/me
    active_sessions: Optional[int] = None


# =============================================================================
# Requests
# =============================================================================

class _AuthRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=False, extra="ignore")

    @field_validator("email", mode="before", check_fields=False)
    @classmethod
    def _normalize_email(cls, value):
        return value.strip().lower() if isinstance(value, str) else value


class RegisterRequest(_AuthRequest):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    name: Optional[str] = Field(default=None, max_length=120)


class LoginRequest(_AuthRequest):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=200)
    totp_code: Optional[str] = Field(
        default=None,
        max_length=20,
        description="6-digit authenticator code or a backup code (XXXX-XXXX)"
    )


class ForgotPasswordRequest(_AuthRequest):
    email: EmailStr


class ResetPasswordRequest(_AuthRequest):
    token: str = Field(..., min_length=10, max_length=200)
    password: str = Field(..., min_length=8, max_length=200)


class ChangePasswordRequest(_AuthRequest):
    current_password: Optional[str] = Field(default=None, max_length=200)
    new_password: str = Field(..., min_length=8, max_length=72)


class TwoFactorCodeRequest(_AuthRequest):
    code: str = Field(..., min_length=6, max_length=20)


class TwoFactorEnableRequest(_AuthRequest):
    code: str = Field(..., pattern=r"^\d{6}$")


class OAuthCallbackRequest(_AuthRequest):
    code: str = Field(..., min_length=1, max_length=2000)
    state: str = Field(..., min_length=1, max_length=4000)


# =============================================================================
# Responses
# =============================================================================

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserResponse


class TwoFactorRequiredResponse(BaseModel):
    requires_2fa: bool = True


class TwoFactorSetupResponse(BaseModel):
    secret: str
    otpauth_url: str
    backup_codes: list[str]


class TwoFactorStatusResponse(BaseModel):
    enabled: bool
    backup_codes_count: int


class BackupCodesResponse(BaseModel):
    backup_codes: list[str]


class OAuthAuthorizeResponse(BaseModel):
    url: str
    state: str
