# =============================================================================
# tests/test_reminders.py - Reminder Job and Cron Endpoint Tests
# =============================================================================
# Run with: pytest tests/test_reminders.py -v
# =============================================================================

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from core.services.reminder_service import (
    ReminderService,
    end_of_day,
    format_due_date,
    format_interview_type,
    start_of_day,
)
from core.services.session_service import SessionService
from core.tables import Interview, User, UserSession
from lib.database import utcnow
from lib.email_client import EmailClient

API = "/api/v1"
CRON = f"{API}/cron/reminders"
CRON_HEADERS = {"Authorization": "Bearer test-cron-secret"}


def subjects() -> list[str]:
    return [template.subject for _, template in EmailClient.outbox]


@pytest.fixture
def schedule(client, auth_headers, application):
    """Schedule an interview `hours` from now on the fixture application."""

    def _schedule(hours: float, **fields) -> dict:
        body = {
            "application_id": application["id"],
            "scheduled_at": (utcnow() + timedelta(hours=hours)).isoformat(),
            **fields,
        }
        response = client.post(f"{API}/interviews", json=body, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _schedule


# =============================================================================
# Helpers
# =============================================================================

class TestFormatting:

    def test_interview_type_labels(self):
        assert format_interview_type("PHONE") == "Phone Screen"
        assert format_interview_type("SOMETHING") == "SOMETHING"

    def test_due_date(self):
        assert format_due_date(datetime(2024, 1, 5, tzinfo=timezone.utc)) == "Fri, Jan 5"
        assert format_due_date(None) == "No due date"

    def test_day_bounds(self):
        now = datetime(2024, 1, 5, 13, 45, tzinfo=timezone.utc)

        assert start_of_day(now) == datetime(2024, 1, 5, tzinfo=timezone.utc)
        assert end_of_day(now) == datetime(2024, 1, 5, 23, 59, 59, 999999, tzinfo=timezone.utc)


# =============================================================================
# Cron Auth
# =============================================================================

class TestCronAuth:
    """The cron endpoints require the shared secret."""

    @pytest.mark.parametrize("path", ["/interviews", "/tasks", "/follow-ups", "/cleanup-sessions"])
    def test_missing_secret(self, client, path):
        response = client.post(f"{CRON}{path}")

        assert response.status_code == 401

    def test_wrong_secret(self, client):
        response = client.post(f"{CRON}/interviews", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401

    def test_user_token_is_not_enough(self, client, auth_headers):
        assert client.post(f"{CRON}/interviews", headers=auth_headers).status_code == 401


# =============================================================================
# Interview Reminders
# =============================================================================

class TestInterviewReminders:
    """Tests for the interview reminder job."""

    def test_sends_once_within_window(self, client, schedule, db):
        # Arrange
        soon = schedule(2)
        schedule(48)
        EmailClient.outbox.clear()

        # Act
        first = client.post(f"{CRON}/interviews", headers=CRON_HEADERS).json()
        second = client.post(f"{CRON}/interviews", headers=CRON_HEADERS).json()

        # Assert
        assert first["success"] is True
        assert first["sent"] == 1
        assert second["sent"] == 0
        assert len(EmailClient.outbox) == 1
        to, template = EmailClient.outbox[0]
        assert to == "alice@example.com"
        assert "Acme" in template.subject
        assert db.get(Interview, soon["id"]).reminder_sent is True

    def test_window_follows_preferences(self, client, auth_headers, schedule):
        schedule(30)
        client.patch(f"{API}/email-preferences", json={"interview_reminder_hours": 48}, headers=auth_headers)

        result = client.post(f"{CRON}/interviews", headers=CRON_HEADERS).json()

        assert result["sent"] == 1

    def test_opted_out(self, client, auth_headers, schedule):
        schedule(2)
        client.patch(f"{API}/email-preferences", json={"interview_reminder": False}, headers=auth_headers)

        result = client.post(f"{CRON}/interviews", headers=CRON_HEADERS).json()

        assert result["sent"] == 0
        assert result["users_checked"] == 0

    def test_decided_interviews_skipped(self, client, schedule):
        schedule(2, result="CANCELLED")

        assert client.post(f"{CRON}/interviews", headers=CRON_HEADERS).json()["sent"] == 0

    def test_deleted_application_skipped(self, client, auth_headers, application, schedule):
        schedule(2)
        client.delete(f"{API}/applications/{application['id']}", headers=auth_headers)

        assert client.post(f"{CRON}/interviews", headers=CRON_HEADERS).json()["sent"] == 0

    def test_rescheduled_interview_reminded_again(self, client, auth_headers, schedule):
        interview = schedule(2)
        client.post(f"{CRON}/interviews", headers=CRON_HEADERS)
        client.patch(
            f"{API}/interviews/{interview['id']}",
            json={"scheduled_at": (utcnow() + timedelta(hours=5)).isoformat()},
            headers=auth_headers,
        )

        assert client.post(f"{CRON}/interviews", headers=CRON_HEADERS).json()["sent"] == 1


# =============================================================================
# Task and Follow-up Reminders
# =============================================================================

class TestTaskReminders:
    """Tests for the daily task digest."""

    def test_one_digest_for_due_tasks(self, client, auth_headers, application):
        # Arrange
        for title, hours in (("Overdue", -30), ("Due soon", -1), ("Next week", 24 * 7)):
            client.post(
                f"{API}/tasks",
                json={
                    "title": title,
                    "application_id": application["id"],
                    "due_date": (utcnow() + timedelta(hours=hours)).isoformat(),
                },
                headers=auth_headers,
            )
        EmailClient.outbox.clear()

        # Act
        result = client.post(f"{CRON}/tasks", headers=CRON_HEADERS).json()

        # Assert
        assert result == {"success": True, "sent": 1, "total": 1, "errors": None}
        assert subjects() == ["2 tasks due - Job Tracker"]

    def test_done_tasks_ignored(self, client, auth_headers, application):
        client.post(
            f"{API}/tasks",
            json={
                "title": "Done",
                "application_id": application["id"],
                "due_date": (utcnow() - timedelta(hours=1)).isoformat(),
                "status": "DONE",
            },
            headers=auth_headers,
        )

        assert client.post(f"{CRON}/tasks", headers=CRON_HEADERS).json()["sent"] == 0


class TestFollowUpReminders:
    """Tests for the follow-up reminder job."""

    def test_today_only_and_not_rejected(self, client, auth_headers):
        today_noon = (start_of_day(utcnow()) + timedelta(hours=12)).isoformat()
        tomorrow = (start_of_day(utcnow()) + timedelta(days=1, hours=12)).isoformat()
        for company, stage, follow_up in (
            ("Acme", "APPLIED", today_noon),
            ("Globex", "REJECTED", today_noon),
            ("Initech", "APPLIED", tomorrow),
        ):
            client.post(
                f"{API}/applications",
                json={"company": company, "title": "Eng", "stage": stage, "next_follow_up": follow_up},
                headers=auth_headers,
            )
        EmailClient.outbox.clear()

        result = client.post(f"{CRON}/follow-ups", headers=CRON_HEADERS).json()

        assert result["sent"] == 1
        _, template = EmailClient.outbox[0]
        assert "Acme" in template.html
        assert "Globex" not in template.html
        assert "Initech" not in template.html


# =============================================================================
# Session Cleanup
# =============================================================================

class TestSessionCleanup:
    """Tests for expired session removal."""

    def test_removes_expired_and_old_revoked(self, client, auth_headers, db):
        # Arrange
        user = db.scalar(select(User).where(User.email == "alice@example.com"))
        _, expired = SessionService.create_session(db, user.id)
        _, revoked = SessionService.create_session(db, user.id)
        _, recently_revoked = SessionService.create_session(db, user.id)
        expired.expires_at = utcnow() - timedelta(minutes=1)
        revoked.revoked_at = utcnow() - timedelta(days=31)
        recently_revoked.revoked_at = utcnow() - timedelta(days=1)
        db.commit()
        kept_id = recently_revoked.id

        # Act
        result = client.post(f"{CRON}/cleanup-sessions", headers=CRON_HEADERS).json()

        # Assert
        assert result == {"success": True, "deleted": 2}
        db.expire_all()
        remaining = set(db.scalars(select(UserSession.id)).all())
        assert kept_id in remaining
        assert client.get(f"{API}/sessions", headers=auth_headers).status_code == 200


class TestCeleryTasks:
    """The Celery tasks run the same jobs with their own session."""

    def test_interview_task(self, schedule):
        from workers.tasks import send_interview_reminders

        schedule(2)
        EmailClient.outbox.clear()

        result = send_interview_reminders()

        assert result["sent"] == 1
        assert len(EmailClient.outbox) == 1

    def test_cleanup_task(self):
        from workers.tasks import cleanup_sessions

        assert cleanup_sessions() == {"success": True, "deleted": 0}
