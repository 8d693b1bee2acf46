# =============================================================================
# lib/email_templates.py - Transactional Email Templates
# =============================================================================
# Every template returns an EmailTemplate with subject, plain text and HTML.
# All user-controlled values are HTML-escaped; links go through escape_url,
# which only lets http(s) URLs into href attributes.
# =============================================================================

import html
from dataclasses import dataclass
from datetime import datetime
from urllib.parse import urlparse

from lib.database import utcnow

PRODUCT_NAME = "Job Tracker"


@dataclass
class EmailTemplate:
    subject: str
    text: str
    html: str


@dataclass
class ReminderItem:
    """One task line in the daily follow-up email."""
    company: str
    title: str
    task_title: str
    due_date: str
    application_url: str


@dataclass
class InterviewItem:
    company: str
    title: str
    interview_date: datetime
    interview_type: str
    application_url: str
    location: str | None = None
    meeting_link: str | None = None


# =============================================================================
# Escaping
# =============================================================================

def escape_html(value: str) -> str:
    """Escape &, <, >, " and ' for safe HTML interpolation."""
    return html.escape(value, quote=True).replace("&#x27;", "&#039;")


def escape_url(url: str) -> str:
    """Escape a URL for href usage; non-http(s) URLs become "#invalid-url"."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return "#invalid-url"
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return "#invalid-url"
    return escape_html(url)


# =============================================================================
# Layout
# =============================================================================

def _layout(title: str, body_html: str) -> str:
    year = utcnow().year
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{escape_html(title)}</title>
</head>
<body style="margin:0;padding:0;font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,Arial,sans-serif;background-color:#f4f4f5;">
  <table role="presentation" width="100%" cellspacing="0" cellpadding="0" style="max-width:600px;margin:0 auto;padding:40px 20px;">
    <tr><td>
      <table role="presentation" width="100%" cellspacing="0" cellpadding="0" style="background-color:#ffffff;border-radius:8px;">
        <tr><td style="padding:40px;color:#3f3f46;font-size:16px;line-height:1.5;">
          <h1 style="margin:0 0 24px;font-size:24px;font-weight:600;color:#18181b;">{escape_html(title)}</h1>
          {body_html}
        </td></tr>
      </table>
      <p style="margin:24px 0 0;font-size:12px;color:#a1a1aa;text-align:center;">&copy; {year} {PRODUCT_NAME}. All rights reserved.</p>
    </td></tr>
  </table>
</body>
</html>"""


def _button(url: str, label: str) -> str:
    return (
        f'<p style="margin:0 0 24px;"><a href="{escape_url(url)}" '
        f'style="display:inline-block;padding:12px 24px;background-color:#18181b;'
        f'color:#ffffff;text-decoration:none;border-radius:6px;">{escape_html(label)}</a></p>'
    )


# =============================================================================
# Templates
# =============================================================================

def password_reset_template(reset_url: str) -> EmailTemplate:
    text = (
        "Reset your password\n\n"
        f"You requested to reset your password for your {PRODUCT_NAME} account.\n\n"
        "Click the link below to reset your password:\n"
        f"{reset_url}\n\n"
        "This link will expire in 1 hour.\n\n"
        "If you didn't request this, you can safely ignore this email.\n\n"
        f"---\n{PRODUCT_NAME} Team"
    )
    body = (
        f"<p>You requested to reset your password for your {PRODUCT_NAME} account.</p>"
        + _button(reset_url, "Reset Password")
        + '<p style="font-size:14px;color:#71717a;">Or copy and paste this link in your browser:<br>'
        f'<a href="{escape_url(reset_url)}">{escape_html(reset_url)}</a></p>'
        '<p style="font-size:14px;color:#71717a;">This link will expire in <strong>1 hour</strong>. '
        "If you didn't request this, you can safely ignore this email.</p>"
    )
    return EmailTemplate(
        subject=f"Reset your password - {PRODUCT_NAME}",
        text=text,
        html=_layout("Reset your password", body),
    )


def welcome_template(user_email: str) -> EmailTemplate:
    text = (
        f"Welcome to {PRODUCT_NAME}!\n\n"
        "Hi there,\n\n"
        f"Thank you for signing up for {PRODUCT_NAME}. We're excited to help you organize your job search!\n\n"
        "Get started by:\n"
        "1. Adding your first job application\n"
        "2. Setting up tasks and reminders\n"
        "3. Tracking your progress\n\n"
        "Best of luck with your job search!\n\n"
        f"---\n{PRODUCT_NAME} Team"
    )
    body = (
        f"<p>Hi {escape_html(user_email)},</p>"
        "<p>Thank you for signing up! We're excited to help you organize your job search.</p>"
        "<ul><li>Adding your first job application</li>"
        "<li>Setting up tasks and reminders</li>"
        "<li>Tracking your progress</li></ul>"
        "<p>Best of luck with your job search!</p>"
    )
    return EmailTemplate(
        subject=f"Welcome to {PRODUCT_NAME}!",
        text=text,
        html=_layout(f"Welcome to {PRODUCT_NAME}!", body),
    )


def follow_up_reminder_template(items: list[ReminderItem], dashboard_url: str) -> EmailTemplate:
    count = len(items)
    noun = "task" if count == 1 else "tasks"

    text_lines = [f"You have {count} {noun} due today or overdue:", ""]
    for item in items:
        text_lines.append(f"- {item.task_title} ({item.company} - {item.title}), due {item.due_date}")
        text_lines.append(f"  {item.application_url}")
    text_lines += ["", f"Open your dashboard: {dashboard_url}", "", f"---\n{PRODUCT_NAME} Team"]

    rows = "".join(
        f'<li style="margin-bottom:12px;"><strong>{escape_html(item.task_title)}</strong><br>'
        f'<a href="{escape_url(item.application_url)}">{escape_html(item.company)} - {escape_html(item.title)}</a>'
        f'<br><span style="font-size:14px;color:#71717a;">Due {escape_html(item.due_date)}</span></li>'
        for item in items
    )
    body = (
        f"<p>You have <strong>{count}</strong> {noun} due today or overdue:</p>"
        f'<ul style="padding-left:20px;">{rows}</ul>'
        + _button(dashboard_url, "Open Dashboard")
    )
    return EmailTemplate(
        subject=f"{count} {noun} due - {PRODUCT_NAME}",
        text="\n".join(text_lines),
        html=_layout("Your follow-ups for today", body),
    )


def interview_reminder_template(interview: InterviewItem) -> EmailTemplate:
    when = interview.interview_date.strftime("%A, %B %d at %H:%M UTC")

    text_lines = [
        f"Upcoming {interview.interview_type}",
        "",
        f"Company: {interview.company}",
        f"Role: {interview.title}",
        f"When: {when}",
    ]
    if interview.location:
        text_lines.append(f"Where: {interview.location}")
    if interview.meeting_link:
        text_lines.append(f"Meeting link: {interview.meeting_link}")
    text_lines += ["", f"View application: {interview.application_url}", "", f"---\n{PRODUCT_NAME} Team"]

    details = (
        f"<p><strong>Company:</strong> {escape_html(interview.company)}<br>"
        f"<strong>Role:</strong> {escape_html(interview.title)}<br>"
        f"<strong>When:</strong> {escape_html(when)}"
    )
    if interview.location:
        details += f"<br><strong>Where:</strong> {escape_html(interview.location)}"
    if interview.meeting_link:
        details += (
            f'<br><strong>Meeting link:</strong> <a href="{escape_url(interview.meeting_link)}">'
            f"{escape_html(interview.meeting_link)}</a>"
        )
    details += "</p>"

    return EmailTemplate(
        subject=f"Reminder: {interview.interview_type} with {interview.company} - {PRODUCT_NAME}",
        text="\n".join(text_lines),
        html=_layout(f"Upcoming {interview.interview_type}", details + _button(interview.application_url, "View Application")),
    )
