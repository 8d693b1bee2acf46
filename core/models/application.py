# =============================================================================
# core/models/application.py - Job Application Schemas
# =============================================================================
# These models define the API contract for job applications:
# - ApplicationCreate / ApplicationUpdate: request bodies
# - ApplicationResponse: what clients get back
# - ApplicationListParams: validated list/search query
# - BulkOperationRequest / BulkOperationResult: bulk update & delete
# - ImportRequest / ImportResult: JSON or CSV import
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator

from .common import (
    InputSchema,
    JobType,
    OutputSchema,
    Priority,
    RemoteType,
    Stage,
    UTCDatetime,
    validate_http_url,
)

MAX_TAGS = 20
MAX_TAG_LENGTH = 40
MAX_BULK_IDS = 100
MAX_IMPORT_ROWS = 500


def _clean_tags(tags: list[str] | None) -> list[str] | None:
    if tags is None:
        return None
    cleaned: list[str] = []
    for tag in tags:
        if not isinstance(tag, str):
            raise ValueError("Tags must be strings")
        tag = tag.strip().lower()
        if not tag:
            continue
        if len(tag) > MAX_TAG_LENGTH:
            raise ValueError(f"Tags must be at most {MAX_TAG_LENGTH} characters")
        if tag not in cleaned:
            cleaned.append(tag)
    if len(cleaned) > MAX_TAGS:
        raise ValueError(f"At most {MAX_TAGS} tags are allowed")
    return cleaned


class _ApplicationFields(InputSchema):
    """Fields shared by create and update; all optional here."""

    location: str | None = Field(default=None, max_length=120)
    url: str | None = Field(default=None, max_length=2000)
    salary_min: int | None = Field(default=None, ge=0)
    salary_max: int | None = Field(default=None, ge=0)
    salary_currency: str | None = Field(default=None, max_length=10)
    applied_date: UTCDatetime | None = None
    source: str | None = Field(default=None, max_length=120)
    tags: list[str] | None = None
    remote_type: RemoteType | None = None
    job_type: JobType | None = None
    description: str | None = Field(default=None, max_length=10000)
    next_follow_up: UTCDatetime | None = None
    rejection_reason: str | None = Field(default=None, max_length=500)

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str | None) -> str | None:
        return validate_http_url(value)

    @field_validator("tags")
    @classmethod
    def _check_tags(cls, value: list[str] | None) -> list[str] | None:
        return _clean_tags(value)

    @model_validator(mode="after")
    def _check_salary_range(self):
        if (
            self.salary_min is not None
            and self.salary_max is not None
            and self.salary_min > self.salary_max
        ):
            raise ValueError("salary_min must be less than or equal to salary_max")
        return self


class ApplicationCreate(_ApplicationFields):
    """
    Schema for creating a job application.

    Example:
        {
            "company": "Stripe",
            "title": "Backend Engineer",
            "stage": "APPLIED",
            "tags": ["fintech", "remote"]
        }
    """

    company: str = Field(..., min_length=1, max_length=120)
    title: str = Field(..., min_length=1, max_length=120)
    stage: Stage = Stage.SAVED
    priority: Priority = Priority.MEDIUM


class ApplicationUpdate(_ApplicationFields):
    """Partial update; only fields present in the body are applied."""

    company: str | None = Field(default=None, min_length=1, max_length=120)
    title: str | None = Field(default=None, min_length=1, max_length=120)
    stage: Stage | None = None
    priority: Priority | None = None


class ApplicationResponse(OutputSchema):
    id: str
    company: str
    title: str
    location: str | None = None
    url: str | None = None
    salary_min: int | None = None
    salary_max: int | None = None
    salary_currency: str | None = None
    stage: Stage
    applied_date: datetime | None = None
    source: str | None = None
    tags: list[str] = Field(default_factory=list)
    priority: Priority = Priority.MEDIUM
    remote_type: RemoteType | None = None
    job_type: JobType | None = None
    description: str | None = None
    next_follow_up: datetime | None = None
    rejection_reason: str | None = None
    created_at: datetime
    updated_at: datetime


# =============================================================================
# List / Search
# =============================================================================

class SortField(str, Enum):
    COMPANY = "company"
    TITLE = "title"
    STAGE = "stage"
    UPDATED_AT = "updated_at"
    APPLIED_DATE = "applied_date"
    CREATED_AT = "created_at"


class ApplicationListParams(InputSchema):
    """Validated query string for GET /applications."""

    q: str | None = Field(default=None, max_length=200)
    stage: Stage | None = None
    tags: str | None = Field(default=None, max_length=500, description="Comma-separated, any-match")
    from_date: UTCDatetime | None = Field(default=None, alias="from")
    to_date: UTCDatetime | None = Field(default=None, alias="to")
    sort_by: SortField = SortField.UPDATED_AT
    sort_dir: Literal["asc", "desc"] = "desc"
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1, le=100)

    model_config = {"populate_by_name": True}

    @property
    def tag_list(self) -> list[str]:
        if not self.tags:
            return []
        return [t.strip().lower() for t in self.tags.split(",") if t.strip()]


# =============================================================================
# Bulk Operations
# =============================================================================

class BulkUpdateData(InputSchema):
    stage: Stage | None = None
    priority: Priority | None = None
    tags: list[str] | None = None
    add_tags: list[str] | None = None
    remove_tags: list[str] | None = None

    @field_validator("tags", "add_tags", "remove_tags")
    @classmethod
    def _check_tags(cls, value: list[str] | None) -> list[str] | None:
        return _clean_tags(value)

    @model_validator(mode="after")
    def _check_combination(self):
        if self.tags is not None and (self.add_tags or self.remove_tags):
            raise ValueError("Use either tags or add_tags/remove_tags, not both")
        if all(
            value is None
            for value in (self.stage, self.priority, self.tags, self.add_tags, self.remove_tags)
        ):
            raise ValueError("At least one field must be provided for update")
        return self


class BulkOperationRequest(InputSchema):
    """
    Bulk update or delete of up to 100 applications.

    Example:
        {"ids": ["..."], "operation": "update", "data": {"stage": "REJECTED"}}
    """

    ids: list[str] = Field(..., min_length=1, max_length=MAX_BULK_IDS)
    operation: Literal["update", "delete"]
    data: BulkUpdateData | None = None

    @model_validator(mode="after")
    def _check_data(self):
        if self.operation == "update" and self.data is None:
            raise ValueError("data is required for update operations")
        return self


class BulkOperationResult(OutputSchema):
    success: bool
    updated: int = 0
    deleted: int = 0
    failed: int = 0
    errors: list[str] = Field(default_factory=list)


# =============================================================================
# Import
# =============================================================================

class ImportRequest(InputSchema):
    rows: list[dict[str, Any]] = Field(..., min_length=1, max_length=MAX_IMPORT_ROWS)


class ImportFailure(OutputSchema):
    row: int
    errors: dict[str, list[str]]


class ImportResult(OutputSchema):
    ok: bool = True
    created: int = 0
    truncated: bool = False
    failures: list[ImportFailure] = Field(default_factory=list)


class TagCount(OutputSchema):
    tag: str
    count: int
