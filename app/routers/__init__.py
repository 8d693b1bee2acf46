# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - applications.py: Applications, search, bulk edits, tags, timeline, CSV
# - interviews.py, tasks.py, notes.py, contacts.py, attachment_links.py:
#   records attached to an application
# - documents.py, labels.py, salary_offers.py: documents, labels and offers
# - email_preferences.py, sessions.py, account.py: user settings
# - billing.py: Stripe checkout and webhook
# - dashboard.py: Pipeline summary and audit log
# - onboarding.py: Sample data
# - reminders.py: Cron-triggered reminder jobs
# - health.py: Health check endpoints
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import account
from . import applications
from . import attachment_links
from . import billing
from . import contacts
from . import dashboard
from . import documents
from . import email_preferences
from . import health
from . import interviews
from . import labels
from . import notes
from . import onboarding
from . import reminders
from . import salary_offers
from . import sessions
from . import tasks

__all__ = [
    "account",
    "applications",
    "attachment_links",
    "billing",
    "contacts",
    "dashboard",
    "documents",
    "email_preferences",
    "health",
    "interviews",
    "labels",
    "notes",
    "onboarding",
    "reminders",
    "salary_offers",
    "sessions",
    "tasks",
]
