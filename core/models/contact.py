# =============================================================================
# core/models/contact.py - Contact Schemas
# =============================================================================
# Recruiters, hiring managers and referrals, optionally linked to an
# application.
# =============================================================================

from datetime import datetime

from pydantic import EmailStr, Field

from .common import InputSchema, OutputSchema


class ContactCreate(InputSchema):
    name: str = Field(..., min_length=1, max_length=120)
    application_id: str | None = None
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=40)
    role: str | None = Field(default=None, max_length=120)
    company: str | None = Field(default=None, max_length=120)


class ContactUpdate(InputSchema):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=40)
    role: str | None = Field(default=None, max_length=120)
    company: str | None = Field(default=None, max_length=120)


class ContactResponse(OutputSchema):
    id: str
    application_id: str | None = None
    name: str
    email: str | None = None
    phone: str | None = None
    role: str | None = None
    company: str | None = None
    created_at: datetime
    updated_at: datetime
