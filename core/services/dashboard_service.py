# =============================================================================
# core/services/dashboard_service.py - Dashboard Analytics
# =============================================================================

from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.models.common import Stage
from core.tables import JobApplication
from lib.database import utcnow
from lib.utils import ensure_utc

WEEKS = 8


def start_of_iso_week(value: datetime) -> datetime:
    """Monday 00:00 UTC of the week containing `value`."""
    value = ensure_utc(value)
    midnight = value.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight - timedelta(days=midnight.weekday())


class DashboardService:

    @staticmethod
    def summary(db: Session, user_id: str, now: datetime | None = None) -> dict[str, Any]:
        """
        Stage counts, applications created per week for the last 8 ISO
        weeks (oldest first, current week last) and the live total.
        """
        rows = db.execute(
            select(JobApplication.stage, JobApplication.created_at).where(
                JobApplication.user_id == user_id,
                JobApplication.deleted_at.is_(None),
            )
        ).all()

        stage_counts = {stage.value: 0 for stage in Stage}
        for stage, _ in rows:
            stage_counts[stage] = stage_counts.get(stage, 0) + 1

        this_week = start_of_iso_week(now or utcnow())
        weekly = []
        for offset in range(WEEKS - 1, -1, -1):
            week_start = this_week - timedelta(weeks=offset)
            week_end = week_start + timedelta(weeks=1)
            count = sum(1 for _, created_at in rows if week_start <= created_at < week_end)
            weekly.append({"week_start": week_start.date().isoformat(), "count": count})

        return {
            "stage_counts": stage_counts,
            "weekly_applications": weekly,
            "total": len(rows),
        }
