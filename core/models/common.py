# =============================================================================
# core/models/common.py - Shared Enums and Field Types
# =============================================================================
# Enumerations and reusable annotated types used by every resource schema.
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Generic, TypeVar
from urllib.parse import urlparse

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator

from lib.utils import ensure_utc

T = TypeVar("T")


# =============================================================================
# Enums
# =============================================================================

class Plan(str, Enum):
    FREE = "FREE"
    PRO = "PRO"


class Stage(str, Enum):
    """Pipeline status of a job application."""
    SAVED = "SAVED"
    APPLIED = "APPLIED"
    INTERVIEW = "INTERVIEW"
    OFFER = "OFFER"
    REJECTED = "REJECTED"


class Priority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class RemoteType(str, Enum):
    REMOTE = "REMOTE"
    HYBRID = "HYBRID"
    ONSITE = "ONSITE"


class JobType(str, Enum):
    FULL_TIME = "FULL_TIME"
    PART_TIME = "PART_TIME"
    CONTRACT = "CONTRACT"
    FREELANCE = "FREELANCE"
    INTERNSHIP = "INTERNSHIP"


class InterviewType(str, Enum):
    PHONE = "PHONE"
    VIDEO = "VIDEO"
    ONSITE = "ONSITE"
    TECHNICAL = "TECHNICAL"
    BEHAVIORAL = "BEHAVIORAL"
    FINAL = "FINAL"
    OTHER = "OTHER"


class InterviewResult(str, Enum):
    PENDING = "PENDING"
    PASSED = "PASSED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class TaskStatus(str, Enum):
    OPEN = "OPEN"
    DONE = "DONE"


class DocumentType(str, Enum):
    RESUME = "RESUME"
    COVER_LETTER = "COVER_LETTER"
    PORTFOLIO = "PORTFOLIO"
    OTHER = "OTHER"


class OfferType(str, Enum):
    INITIAL = "INITIAL"
    COUNTER = "COUNTER"
    REVISED = "REVISED"
    FINAL_OFFER = "FINAL_OFFER"


class DigestFrequency(str, Enum):
    NEVER = "NEVER"
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class AuditAction(str, Enum):
    """Every action that lands in the audit log."""
    AUTH_LOGIN = "AUTH_LOGIN"
    AUTH_LOGOUT = "AUTH_LOGOUT"
    AUTH_PASSWORD_RESET = "AUTH_PASSWORD_RESET"
    AUTH_PASSWORD_CHANGED = "AUTH_PASSWORD_CHANGED"
    AUTH_2FA_ENABLED = "AUTH_2FA_ENABLED"
    AUTH_2FA_DISABLED = "AUTH_2FA_DISABLED"
    ACCOUNT_DELETED = "ACCOUNT_DELETED"
    ACCOUNT_DISCONNECTED = "ACCOUNT_DISCONNECTED"

    APPLICATION_CREATED = "APPLICATION_CREATED"
    APPLICATION_UPDATED = "APPLICATION_UPDATED"
    APPLICATION_DELETED = "APPLICATION_DELETED"
    NOTE_CREATED = "NOTE_CREATED"
    NOTE_UPDATED = "NOTE_UPDATED"
    NOTE_DELETED = "NOTE_DELETED"
    TASK_CREATED = "TASK_CREATED"
    TASK_UPDATED = "TASK_UPDATED"
    TASK_DELETED = "TASK_DELETED"
    CONTACT_CREATED = "CONTACT_CREATED"
    CONTACT_UPDATED = "CONTACT_UPDATED"
    CONTACT_DELETED = "CONTACT_DELETED"
    LINK_CREATED = "LINK_CREATED"
    LINK_UPDATED = "LINK_UPDATED"
    LINK_DELETED = "LINK_DELETED"
    INTERVIEW_CREATED = "INTERVIEW_CREATED"
    INTERVIEW_UPDATED = "INTERVIEW_UPDATED"
    INTERVIEW_DELETED = "INTERVIEW_DELETED"
    DOCUMENT_CREATED = "DOCUMENT_CREATED"
    DOCUMENT_UPDATED = "DOCUMENT_UPDATED"
    DOCUMENT_DELETED = "DOCUMENT_DELETED"
    LABEL_CREATED = "LABEL_CREATED"
    LABEL_UPDATED = "LABEL_UPDATED"
    LABEL_DELETED = "LABEL_DELETED"
    OFFER_CREATED = "OFFER_CREATED"
    OFFER_UPDATED = "OFFER_UPDATED"
    OFFER_DELETED = "OFFER_DELETED"

    EXPORT_CSV = "EXPORT_CSV"
    BILLING_UPGRADED = "BILLING_UPGRADED"
    BILLING_DOWNGRADED = "BILLING_DOWNGRADED"
    EMAIL_PREFERENCES_UPDATED = "EMAIL_PREFERENCES_UPDATED"


# =============================================================================
# Base Schemas and Field Types
# =============================================================================

def validate_http_url(value: str | None) -> str | None:
    """Accept only absolute http(s) URLs (None passes through)."""
    if value is None:
        return value
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("Must be a valid http(s) URL")
    return value


# Datetime that is always timezone-aware UTC (naive input is taken as UTC)
UTCDatetime = Annotated[datetime, AfterValidator(ensure_utc)]


class InputSchema(BaseModel):
    """
    Base for request bodies.

    - surrounding whitespace is stripped from every string
    - "" for any field means "not provided": the key is dropped so the
      field default applies
    - unknown fields are ignored
    - enum fields hold their plain string values
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore", use_enum_values=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_blank_strings(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {
                key: value
                for key, value in data.items()
                if not (isinstance(value, str) and not value.strip())
            }
        return data


class OutputSchema(BaseModel):
    """Base for responses built from ORM rows."""

    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# Pagination
# =============================================================================

class Page(BaseModel, Generic[T]):
    """Paginated list envelope."""
    page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)
    total: int = Field(..., ge=0)
    items: list[T] = Field(default_factory=list)


class ItemList(BaseModel, Generic[T]):
    """Unpaginated list envelope."""
    items: list[T] = Field(default_factory=list)


class OkResponse(BaseModel):
    ok: bool = True
