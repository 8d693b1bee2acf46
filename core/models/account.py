# =============================================================================
# core/models/account.py - Account Settings Schemas
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, Field


class ConnectionInfo(BaseModel):
    """A linked OAuth provider."""
    provider: str
    connected_at: datetime


class ConnectionsResponse(BaseModel):
    accounts: list[ConnectionInfo] = Field(default_factory=list)
    has_password: bool


class ChangePasswordResponse(BaseModel):
    ok: bool = True
    sessions_revoked: int = 0
