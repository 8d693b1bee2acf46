# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Scheduled jobs. Each task opens its own database session and delegates to
# ReminderService, which is also what the cron endpoints call.
#
# Tasks:
# - send_interview_reminders: hourly
# - send_task_reminders: daily digest of open tasks due today
# - send_follow_up_reminders: daily, applications whose follow-up is due
# - cleanup_sessions: nightly removal of expired sessions
# =============================================================================

import logging
from typing import Any

from celery import shared_task

from core.services.reminder_service import ReminderService
from lib.database import session_scope

logger = logging.getLogger(__name__)


@shared_task(name="workers.tasks.send_interview_reminders")
def send_interview_reminders() -> dict[str, Any]:
    with session_scope() as db:
        result = ReminderService.send_interview_reminders(db)
    logger.info(f"Interview reminders: sent {result['sent']}, skipped {result['users_skipped']} users")
    return result


@shared_task(name="workers.tasks.send_task_reminders")
def send_task_reminders() -> dict[str, Any]:
    with session_scope() as db:
        result = ReminderService.send_task_reminders(db)
    logger.info(f"Task reminders: sent {result['sent']} of {result['total']}")
    return result


@shared_task(name="workers.tasks.send_follow_up_reminders")
def send_follow_up_reminders() -> dict[str, Any]:
    with session_scope() as db:
        return ReminderService.send_follow_up_reminders(db)


@shared_task(name="workers.tasks.cleanup_sessions")
def cleanup_sessions() -> dict[str, Any]:
    """Delete expired sessions and sessions revoked more than 30 days ago."""
    with session_scope() as db:
        return ReminderService.cleanup_sessions(db)
