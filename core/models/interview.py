# =============================================================================
# core/models/interview.py - Interview Schemas
# =============================================================================

from datetime import datetime

from pydantic import Field, field_validator

from .common import InputSchema, InterviewResult, InterviewType, OutputSchema, UTCDatetime

MAX_INTERVIEWERS = 20


def _clean_interviewers(value: list[str] | None) -> list[str] | None:
    if value is None:
        return None
    cleaned = [name.strip() for name in value if isinstance(name, str) and name.strip()]
    if len(cleaned) > MAX_INTERVIEWERS:
        raise ValueError(f"At most {MAX_INTERVIEWERS} interviewers are allowed")
    if any(len(name) > 100 for name in cleaned):
        raise ValueError("Interviewer names must be at most 100 characters")
    return cleaned


class InterviewCreate(InputSchema):
    """
    Schema for scheduling an interview.

    Example:
        {
            "application_id": "550e8400-...",
            "scheduled_at": "2024-03-01T15:00:00Z",
            "type": "TECHNICAL",
            "interviewers": ["Jane Doe"]
        }
    """

    application_id: str = Field(..., min_length=1)
    scheduled_at: UTCDatetime
    duration: int = Field(default=60, ge=15, le=480, description="Minutes")
    type: InterviewType = InterviewType.VIDEO
    location: str | None = Field(default=None, max_length=500)
    interviewers: list[str] = Field(default_factory=list)
    notes: str | None = Field(default=None, max_length=5000)
    feedback: str | None = Field(default=None, max_length=5000)
    result: InterviewResult = InterviewResult.PENDING

    @field_validator("interviewers", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return [] if value is None else value

    @field_validator("interviewers")
    @classmethod
    def _check_interviewers(cls, value: list[str]) -> list[str]:
        return _clean_interviewers(value) or []


class InterviewUpdate(InputSchema):
    scheduled_at: UTCDatetime | None = None
    duration: int | None = Field(default=None, ge=15, le=480)
    type: InterviewType | None = None
    location: str | None = Field(default=None, max_length=500)
    interviewers: list[str] | None = None
    notes: str | None = Field(default=None, max_length=5000)
    feedback: str | None = Field(default=None, max_length=5000)
    result: InterviewResult | None = None
    reminder_sent: bool | None = None

    @field_validator("interviewers")
    @classmethod
    def _check_interviewers(cls, value: list[str] | None) -> list[str] | None:
        return _clean_interviewers(value)


class InterviewApplicationSummary(OutputSchema):
    id: str
    company: str
    title: str


class InterviewResponse(OutputSchema):
    id: str
    application_id: str
    scheduled_at: datetime
    duration: int
    type: InterviewType
    location: str | None = None
    interviewers: list[str] = Field(default_factory=list)
    notes: str | None = None
    feedback: str | None = None
    result: InterviewResult
    reminder_sent: bool
    created_at: datetime
    updated_at: datetime
    application: InterviewApplicationSummary | None = None
