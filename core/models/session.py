# =============================================================================
# core/models/session.py - Login Session Schemas
# =============================================================================
# These models define the API contract for session management:
# - SessionInfo: one signed-in device as shown in the sessions list
# - RevokeAllResponse: result of signing out every other device
#
# A session is created on every successful login (password or OAuth) and
# backs the access token; revoking it invalidates the token immediately.
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, Field


class SessionInfo(BaseModel):
    """
    A signed-in device.

    Example:
        {
            "id": "550e8400-e29b-41d4-a716-446655440000",
            "device": "Chrome on macOS",
            "device_type": "desktop",
            "browser": "Chrome",
            "os": "macOS",
            "ip_address": "203.0.113.7",
            "last_active_at": "2024-01-15T10:30:00Z",
            "created_at": "2024-01-10T08:00:00Z",
            "is_current": true
        }
    """

    id: str = Field(..., description="Session identifier")

    # Human-readable label, e.g. "Safari on iOS (mobile)"
    device: str = Field(..., description="Device description")

    device_type: str | None = Field(default=None, description="desktop, mobile, tablet or unknown")
    browser: str | None = None
    os: str | None = None
    ip_address: str | None = None

    last_active_at: datetime
    created_at: datetime
    expires_at: datetime

    # True for the session making this request
    is_current: bool = False


class SessionList(BaseModel):
    items: list[SessionInfo]
    total: int


class RevokeAllResponse(BaseModel):
    revoked: int = Field(..., ge=0, description="Number of sessions revoked")
