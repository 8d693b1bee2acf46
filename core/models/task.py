# =============================================================================
# core/models/task.py - Task Schemas
# =============================================================================

from datetime import datetime

from pydantic import Field

from .common import InputSchema, OutputSchema, TaskStatus, UTCDatetime


class TaskCreate(InputSchema):
    """A follow-up task, optionally tied to an application."""

    title: str = Field(..., min_length=1, max_length=200)
    application_id: str | None = None
    due_date: UTCDatetime | None = None
    status: TaskStatus = TaskStatus.OPEN


class TaskUpdate(InputSchema):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    due_date: UTCDatetime | None = None
    status: TaskStatus | None = None


class TaskResponse(OutputSchema):
    id: str
    application_id: str | None = None
    title: str
    due_date: datetime | None = None
    status: TaskStatus
    created_at: datetime
    updated_at: datetime
