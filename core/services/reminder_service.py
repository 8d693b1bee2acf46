# =============================================================================
# core/services/reminder_service.py - Scheduled Reminder Emails
# =============================================================================
# Run from the cron endpoints and from Celery beat:
#   - interview reminders (hourly): one email per upcoming interview
#   - task reminders (daily): one digest of open tasks due today or overdue
#   - follow-up reminders (daily): applications whose follow-up date is today
#
# Users without an email_preferences row get the defaults (opted in).
# Day boundaries are UTC.
# =============================================================================

import logging
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from app.config import settings
from core.services.session_service import SessionService
from core.tables import EmailPreferences, Interview, JobApplication, Task, User
from lib.database import utcnow
from lib.email_client import EmailClient, EmailSendError
from lib.email_templates import InterviewItem, ReminderItem
from lib.utils import iso

logger = logging.getLogger(__name__)

MAX_TASKS_PER_EMAIL = 10
DEFAULT_INTERVIEW_REMINDER_HOURS = 24

INTERVIEW_TYPE_LABELS = {
    "PHONE": "Phone Screen",
    "VIDEO": "Video Call",
    "ONSITE": "On-site Interview",
    "TECHNICAL": "Technical Interview",
    "BEHAVIORAL": "Behavioral Interview",
    "FINAL": "Final Round",
    "OTHER": "Interview",
}


def format_interview_type(value: str) -> str:
    return INTERVIEW_TYPE_LABELS.get(value, value)


def format_due_date(value: datetime | None) -> str:
    """e.g. "Mon, Jan 15"."""
    if value is None:
        return "No due date"
    return f"{value.strftime('%a, %b')} {value.day}"


def end_of_day(value: datetime) -> datetime:
    return value.replace(hour=23, minute=59, second=59, microsecond=999999)


def start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def application_url(application_id: str) -> str:
    return f"{settings.APP_URL}/applications/{application_id}"


def _opted_in_users(db: Session, flag) -> list[tuple[User, EmailPreferences | None]]:
    """Live users whose preference `flag` is on (or who have no prefs row)."""
    return list(db.execute(
        select(User, EmailPreferences)
        .outerjoin(EmailPreferences, EmailPreferences.user_id == User.id)
        .where(
            User.deleted_at.is_(None),
            or_(
                EmailPreferences.id.is_(None),
                and_(flag.is_(True), EmailPreferences.unsubscribed_all.is_(False)),
            ),
        )
        .order_by(User.created_at.asc())
    ).all())


class ReminderService:
    """Service for batch reminder emails."""

    @staticmethod
    def send_interview_reminders(db: Session, now: datetime | None = None) -> dict[str, Any]:
        now = now or utcnow()
        sent = 0
        skipped = 0
        errors: list[str] = []

        users = _opted_in_users(db, EmailPreferences.interview_reminder)
        for user, prefs in users:
            hours = prefs.interview_reminder_hours if prefs else DEFAULT_INTERVIEW_REMINDER_HOURS
            window_end = now + timedelta(hours=hours)

            rows = db.execute(
                select(Interview, JobApplication)
                .join(JobApplication, Interview.application_id == JobApplication.id)
                .where(
                    Interview.user_id == user.id,
                    Interview.deleted_at.is_(None),
                    Interview.reminder_sent.is_(False),
                    Interview.result == "PENDING",
                    Interview.scheduled_at > now,
                    Interview.scheduled_at <= window_end,
                    JobApplication.deleted_at.is_(None),
                )
                .order_by(Interview.scheduled_at.asc())
            ).all()

            if not rows:
                skipped += 1
                continue

            for interview, app in rows:
                item = InterviewItem(
                    company=app.company,
                    title=app.title,
                    interview_date=interview.scheduled_at,
                    interview_type=format_interview_type(interview.type),
                    application_url=application_url(app.id),
                    location=interview.location,
                    meeting_link=interview.location if interview.type == "VIDEO" else None,
                )
                try:
                    EmailClient.send_interview_reminder(user.email, item)
                except EmailSendError as e:
                    errors.append(f"Failed to send interview reminder for interview {interview.id}: {e}")
                    continue

                interview.reminder_sent = True
                db.commit()
                sent += 1

        logger.info(f"Interview reminders: sent {sent}, checked {len(users)} users, {len(errors)} errors")
        return {
            "success": True,
            "sent": sent,
            "users_checked": len(users),
            "users_skipped": skipped,
            "errors": errors or None,
            "timestamp": iso(now),
        }

    @staticmethod
    def send_task_reminders(db: Session, now: datetime | None = None) -> dict[str, Any]:
        now = now or utcnow()
        cutoff = end_of_day(now)
        sent = 0
        total = 0
        errors: list[str] = []

        for user, _ in _opted_in_users(db, EmailPreferences.task_reminder):
            rows = db.execute(
                select(Task, JobApplication)
                .join(JobApplication, Task.application_id == JobApplication.id)
                .where(
                    Task.user_id == user.id,
                    Task.status == "OPEN",
                    Task.deleted_at.is_(None),
                    Task.due_date <= cutoff,
                    JobApplication.deleted_at.is_(None),
                )
                .order_by(Task.due_date.asc())
                .limit(MAX_TASKS_PER_EMAIL)
            ).all()
            if not rows:
                continue

            total += 1
            items = [
                ReminderItem(
                    company=app.company,
                    title=app.title,
                    task_title=task.title,
                    due_date=format_due_date(task.due_date),
                    application_url=application_url(app.id),
                )
                for task, app in rows
            ]
            try:
                EmailClient.send_follow_up_reminder(user.email, items, f"{settings.APP_URL}/dashboard")
                sent += 1
            except EmailSendError as e:
                errors.append(f"Failed to send task reminder to user {user.id}: {e}")

        logger.info(f"Task reminders: sent {sent}/{total}")
        return {"success": True, "sent": sent, "total": total, "errors": errors or None}

    @staticmethod
    def send_follow_up_reminders(db: Session, now: datetime | None = None) -> dict[str, Any]:
        """Remind about applications whose next_follow_up falls on today."""
        now = now or utcnow()
        day_start, day_end = start_of_day(now), end_of_day(now)
        sent = 0
        total = 0
        errors: list[str] = []

        for user, _ in _opted_in_users(db, EmailPreferences.follow_up_reminder):
            apps = db.scalars(
                select(JobApplication)
                .where(
                    JobApplication.user_id == user.id,
                    JobApplication.deleted_at.is_(None),
                    JobApplication.stage.notin_(("REJECTED",)),
                    JobApplication.next_follow_up >= day_start,
                    JobApplication.next_follow_up <= day_end,
                )
                .order_by(JobApplication.next_follow_up.asc())
                .limit(MAX_TASKS_PER_EMAIL)
            ).all()
            if not apps:
                continue

            total += 1
            items = [
                ReminderItem(
                    company=app.company,
                    title=app.title,
                    task_title="Follow up",
                    due_date=format_due_date(app.next_follow_up),
                    application_url=application_url(app.id),
                )
                for app in apps
            ]
            try:
                EmailClient.send_follow_up_reminder(user.email, items, f"{settings.APP_URL}/dashboard")
                sent += 1
            except EmailSendError as e:
                errors.append(f"Failed to send follow-up reminder to user {user.id}: {e}")

        logger.info(f"Follow-up reminders: sent {sent}/{total}")
        return {"success": True, "sent": sent, "total": total, "errors": errors or None}

    @staticmethod
    def cleanup_sessions(db: Session) -> dict[str, Any]:
        deleted = SessionService.cleanup_expired_sessions(db)
        return {"success": True, "deleted": deleted}
