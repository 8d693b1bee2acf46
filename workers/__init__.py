# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# This package contains the Celery configuration and the scheduled reminder
# jobs.
#
# Components:
# - celery_app.py: Celery application configuration
# - tasks.py: Task definitions (reminders, session cleanup)
# - config.py: Worker settings and beat schedule
#
# Usage:
#   celery -A workers.celery_app worker --loglevel=info
#   celery -A workers.celery_app beat --loglevel=info
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
