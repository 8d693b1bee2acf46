# =============================================================================
# tests/test_email_templates.py - Email Rendering Tests
# =============================================================================

from datetime import datetime, timezone

from lib.email_templates import (
    InterviewItem,
    ReminderItem,
    escape_html,
    escape_url,
    follow_up_reminder_template,
    interview_reminder_template,
    password_reset_template,
    welcome_template,
)


class TestEscaping:
    """Tests for HTML and URL escaping."""

    def test_escape_html(self):
        assert escape_html("<b>\"Tom\" & 'Jerry'</b>") == (
            "&lt;b&gt;&quot;Tom&quot; &amp; &#039;Jerry&#039;&lt;/b&gt;"
        )

    def test_escape_url_allows_http(self):
        assert escape_url("https://example.com/a?b=1&c=2") == "https://example.com/a?b=1&amp;c=2"

    def test_escape_url_rejects_other_schemes(self):
        assert escape_url("javascript:alert(1)") == "#invalid-url"
        assert escape_url("/relative/path") == "#invalid-url"


class TestTemplates:
    """Tests for rendered subjects and bodies."""

    def test_password_reset(self):
        template = password_reset_template("https://app.example.com/reset-password?token=abc")

        assert template.subject == "Reset your password - Job Tracker"
        assert "https://app.example.com/reset-password?token=abc" in template.text
        assert "1 hour" in template.text
        assert 'href="https://app.example.com/reset-password?token=abc"' in template.html

    def test_welcome_escapes_email(self):
        template = welcome_template("<script>@example.com")

        assert "<script>" not in template.html
        assert "&lt;script&gt;" in template.html

    def test_follow_up_pluralizes(self):
        item = ReminderItem(
            company="Acme",
            title="Engineer",
            task_title="Send thank-you note",
            due_date="Mon, Jan 15",
            application_url="https://app.example.com/applications/1",
        )

        one = follow_up_reminder_template([item], "https://app.example.com/dashboard")
        two = follow_up_reminder_template([item, item], "https://app.example.com/dashboard")

        assert one.subject == "1 task due - Job Tracker"
        assert two.subject == "2 tasks due - Job Tracker"
        assert "Send thank-you note (Acme - Engineer), due Mon, Jan 15" in one.text

    def test_interview_reminder(self):
        interview = InterviewItem(
            company="Acme",
            title="Engineer",
            interview_date=datetime(2024, 1, 15, 14, 30, tzinfo=timezone.utc),
            interview_type="Video Call",
            application_url="https://app.example.com/applications/1",
            location="Zoom",
        )

        template = interview_reminder_template(interview)

        assert "Acme" in template.subject
        assert "Monday, January 15 at 14:30 UTC" in template.text
        assert "Where: Zoom" in template.text
        assert "Meeting link" not in template.text
