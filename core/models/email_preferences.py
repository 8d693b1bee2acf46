# =============================================================================
# core/models/email_preferences.py - Email Preference Schemas
# =============================================================================

from pydantic import Field

from .common import DigestFrequency, InputSchema, OutputSchema


class EmailPreferencesUpdate(InputSchema):
    """Partial update; omitted fields keep their current value."""

    interview_reminder: bool | None = None
    interview_reminder_hours: int | None = Field(default=None, ge=1, le=168)
    task_reminder: bool | None = None
    task_reminder_hours: int | None = Field(default=None, ge=1, le=168)
    follow_up_reminder: bool | None = None
    status_change_notify: bool | None = None
    digest_frequency: DigestFrequency | None = None
    digest_day: int | None = Field(default=None, ge=0, le=6, description="0 = Sunday")
    digest_hour: int | None = Field(default=None, ge=0, le=23, description="UTC hour")
    stale_alert_enabled: bool | None = None
    stale_alert_days: int | None = Field(default=None, ge=3, le=90)
    marketing_emails: bool | None = None
    unsubscribed_all: bool | None = None


class EmailPreferencesResponse(OutputSchema):
    interview_reminder: bool = True
    interview_reminder_hours: int = 24
    task_reminder: bool = True
    task_reminder_hours: int = 24
    follow_up_reminder: bool = True
    status_change_notify: bool = True
    digest_frequency: DigestFrequency = DigestFrequency.WEEKLY
    digest_day: int = 1
    digest_hour: int = 9
    stale_alert_enabled: bool = True
    stale_alert_days: int = 14
    marketing_emails: bool = False
    unsubscribed_all: bool = False
