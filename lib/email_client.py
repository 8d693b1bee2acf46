# =============================================================================
# lib/email_client.py - Outgoing Email
# =============================================================================
# Sends rendered templates over SMTP. When SMTP isn't configured (local
# development, tests) messages are logged instead of sent.
#
# Usage:
#   from lib.email_client import EmailClient
#   EmailClient.send_password_reset(to="a@b.com", reset_url="https://...")
# =============================================================================

import logging
import smtplib
from email.message import EmailMessage

from app.config import settings
from lib.email_templates import (
    EmailTemplate,
    InterviewItem,
    ReminderItem,
    follow_up_reminder_template,
    interview_reminder_template,
    password_reset_template,
    welcome_template,
)
from lib.login_throttle import mask_email

logger = logging.getLogger(__name__)

SMTP_TIMEOUT_SECONDS = 20


class EmailSendError(Exception):
    """Raised when the SMTP server rejects or can't receive a message."""
    pass


class EmailClient:
    """
    Thin SMTP wrapper.

    All methods are static; the client holds no connection between sends.
    """

    # Messages "sent" while SMTP is unconfigured, newest last (dev/test aid)
    outbox: list[tuple[str, EmailTemplate]] = []

    @staticmethod
    def send(to: str, template: EmailTemplate) -> None:
        """
        Send a template to one recipient.

        Raises:
            EmailSendError: If the SMTP exchange fails
        """
        if not settings.smtp_configured:
            logger.info(f"[DEV] Email to {mask_email(to)}: {template.subject}")
            logger.debug(f"[DEV] Body: {template.text[:100]}...")
            EmailClient.outbox.append((to, template))
            return

        msg = EmailMessage()
        msg["Subject"] = template.subject
        msg["From"] = settings.EMAIL_FROM
        msg["To"] = to
        msg.set_content(template.text)
        msg.add_alternative(template.html, subtype="html")

        try:
            if settings.SMTP_PORT == 465:
                with smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT, timeout=SMTP_TIMEOUT_SECONDS) as server:
                    EmailClient._login(server)
                    server.send_message(msg)
            else:
                with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=SMTP_TIMEOUT_SECONDS) as server:
                    server.starttls()
                    EmailClient._login(server)
                    server.send_message(msg)
        except smtplib.SMTPAuthenticationError as e:
            logger.error(f"SMTP auth failed for {settings.SMTP_USER}")
            raise EmailSendError("SMTP authentication failed") from e
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP error while sending '{template.subject}': {e}")
            raise EmailSendError(str(e)) from e

        logger.info(f"Email sent: {template.subject}")

    @staticmethod
    def _login(server: smtplib.SMTP) -> None:
        if settings.SMTP_USER:
            server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)

    # -------------------------------------------------------------------------
    # Convenience senders
    # -------------------------------------------------------------------------

    @staticmethod
    def send_password_reset(to: str, reset_url: str) -> None:
        EmailClient.send(to, password_reset_template(reset_url))

    @staticmethod
    def send_welcome(to: str) -> None:
        EmailClient.send(to, welcome_template(to))

    @staticmethod
    def send_follow_up_reminder(to: str, items: list[ReminderItem], dashboard_url: str) -> None:
        EmailClient.send(to, follow_up_reminder_template(items, dashboard_url))

    @staticmethod
    def send_interview_reminder(to: str, interview: InterviewItem) -> None:
        EmailClient.send(to, interview_reminder_template(interview))
