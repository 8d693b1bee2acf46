# =============================================================================
# core/models/dashboard.py - Dashboard and Activity Schemas
# =============================================================================

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from .common import OutputSchema


class WeeklyCount(BaseModel):
    week_start: str = Field(..., description="Monday of the ISO week, YYYY-MM-DD")
    count: int


class DashboardSummary(BaseModel):
    """
    Pipeline overview.

    stage_counts always contains every stage, zero when empty.
    weekly_applications holds the last 8 weeks, oldest first.
    """
    stage_counts: dict[str, int]
    weekly_applications: list[WeeklyCount]
    total: int


class TimelineEvent(BaseModel):
    id: str
    type: str
    title: str
    description: str = ""
    date: datetime
    icon: str
    color: str


class AuditEntryResponse(OutputSchema):
    id: str
    action: str
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    ip: Optional[str] = None
    meta: Optional[dict[str, Any]] = None
    created_at: datetime
