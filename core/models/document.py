# =============================================================================
# core/models/document.py - Document Schemas
# =============================================================================
# Resumes, cover letters and portfolios. Content is stored inline
# (file_content) or referenced by URL (file_url).
# =============================================================================

from datetime import datetime

from pydantic import Field, field_validator

from .common import DocumentType, InputSchema, OutputSchema, validate_http_url


class DocumentCreate(InputSchema):
    name: str = Field(..., min_length=1, max_length=200)
    type: DocumentType = DocumentType.RESUME
    file_name: str = Field(..., min_length=1, max_length=500)
    file_url: str | None = Field(default=None, max_length=2000)
    file_content: str | None = Field(default=None, max_length=100_000)
    version: str | None = Field(default=None, max_length=50)
    application_id: str | None = None
    is_default: bool = False

    @field_validator("file_url")
    @classmethod
    def _check_url(cls, value: str | None) -> str | None:
        return validate_http_url(value)


class DocumentUpdate(InputSchema):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    type: DocumentType | None = None
    file_name: str | None = Field(default=None, min_length=1, max_length=500)
    file_url: str | None = Field(default=None, max_length=2000)
    file_content: str | None = Field(default=None, max_length=100_000)
    version: str | None = Field(default=None, max_length=50)
    application_id: str | None = None
    is_default: bool | None = None

    @field_validator("file_url")
    @classmethod
    def _check_url(cls, value: str | None) -> str | None:
        return validate_http_url(value)


class DocumentResponse(OutputSchema):
    id: str
    name: str
    type: DocumentType
    file_name: str
    file_url: str | None = None
    file_content: str | None = None
    version: str | None = None
    application_id: str | None = None
    is_default: bool
    created_at: datetime
    updated_at: datetime
