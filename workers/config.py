# =============================================================================
# workers/config.py - Celery Worker Configuration
# =============================================================================
# Settings specific to Celery workers, including the beat schedule for the
# reminder jobs. Times are UTC.
# =============================================================================

from celery.schedules import crontab

from app.config import settings


class CeleryConfig:
    """
    Celery configuration settings.

    These are applied to the Celery app via app.config_from_object().
    """

    # -------------------------------------------------------------------------
    # Broker Settings (Redis)
    # -------------------------------------------------------------------------

    broker_url = settings.REDIS_URL
    result_backend = settings.REDIS_URL

    # -------------------------------------------------------------------------
    # Task Settings
    # -------------------------------------------------------------------------

    # Acknowledge tasks after they complete so a crashed worker doesn't lose one
    task_acks_late = True
    worker_prefetch_multiplier = 1

    # Task results expire after 1 hour
    result_expires = 3600

    # Reminder runs touch every opted-in user; allow 10 minutes
    task_time_limit = 600
    task_soft_time_limit = 540

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    task_serializer = "json"
    result_serializer = "json"
    accept_content = ["json"]

    task_default_queue = "default"

    # -------------------------------------------------------------------------
    # Schedule
    # -------------------------------------------------------------------------

    beat_schedule = {
        "interview-reminders": {
            "task": "workers.tasks.send_interview_reminders",
            "schedule": crontab(minute=0),
        },
        "task-reminders": {
            "task": "workers.tasks.send_task_reminders",
            "schedule": crontab(minute=0, hour=8),
        },
        "follow-up-reminders": {
            "task": "workers.tasks.send_follow_up_reminders",
            "schedule": crontab(minute=30, hour=8),
        },
        "cleanup-sessions": {
            "task": "workers.tasks.cleanup_sessions",
            "schedule": crontab(minute=0, hour=3),
        },
    }

    # -------------------------------------------------------------------------
    # Monitoring
    # -------------------------------------------------------------------------

    worker_send_task_events = True
    task_send_sent_event = True

    # -------------------------------------------------------------------------
    # Timezone
    # -------------------------------------------------------------------------

    timezone = "UTC"
    enable_utc = True
