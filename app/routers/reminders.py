# =============================================================================
# app/routers/reminders.py - Scheduled Job Endpoints
# =============================================================================
# Triggered by an external cron with `Authorization: Bearer <CRON_SECRET>`.
# The same jobs also run as Celery beat tasks (see workers/tasks.py).
# =============================================================================

from typing import Any

from fastapi import APIRouter, Depends

from app.dependencies import DbDep, require_cron_secret
from core.services.reminder_service import ReminderService

router = APIRouter(dependencies=[Depends(require_cron_secret)])


@router.post("/interviews")
async def run_interview_reminders(db: DbDep) -> dict[str, Any]:
    """Email reminders for upcoming interviews within each user's window."""
    return ReminderService.send_interview_reminders(db)


@router.post("/tasks")
async def run_task_reminders(db: DbDep) -> dict[str, Any]:
    """One digest per user of open tasks due by end of today."""
    return ReminderService.send_task_reminders(db)


@router.post("/follow-ups")
async def run_follow_up_reminders(db: DbDep) -> dict[str, Any]:
    return ReminderService.send_follow_up_reminders(db)


@router.post("/cleanup-sessions")
async def run_session_cleanup(db: DbDep) -> dict[str, Any]:
    """Delete expired sessions and long-revoked ones."""
    return ReminderService.cleanup_sessions(db)
