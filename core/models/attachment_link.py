# =============================================================================
# core/models/attachment_link.py - Attachment Link Schemas
# =============================================================================

from datetime import datetime

from pydantic import Field, field_validator

from .common import InputSchema, OutputSchema, validate_http_url


class AttachmentLinkCreate(InputSchema):
    application_id: str = Field(..., min_length=1)
    label: str = Field(..., min_length=1, max_length=120)
    url: str = Field(..., max_length=2000)

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        return validate_http_url(value)


class AttachmentLinkUpdate(InputSchema):
    label: str | None = Field(default=None, min_length=1, max_length=120)
    url: str | None = Field(default=None, max_length=2000)

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str | None) -> str | None:
        return validate_http_url(value)


class AttachmentLinkResponse(OutputSchema):
    id: str
    application_id: str
    label: str
    url: str
    created_at: datetime
    updated_at: datetime
