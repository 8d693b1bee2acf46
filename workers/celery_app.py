# =============================================================================
# workers/celery_app.py - Celery Application Configuration
# =============================================================================
# Creates the Celery app that runs the reminder and cleanup jobs. The broker,
# result backend and beat schedule all come from workers/config.py.
#
# Usage:
#   # Start a worker
#   celery -A workers.celery_app worker --loglevel=info
#
#   # Start the scheduler (reminders, session cleanup)
#   celery -A workers.celery_app beat --loglevel=info
# =============================================================================

import logging
import time

from celery import Celery
from celery.signals import task_failure, task_postrun, task_prerun, worker_ready
from dotenv import load_dotenv

# Workers are started outside uvicorn, so .env isn't loaded for us
load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# task_id -> perf_counter() at start
_task_started: dict[str, float] = {}


def _redact_url(url: str) -> str:
    """Drop credentials from a redis:// URL before logging it."""
    return url.split("@")[-1] if "@" in url else url


def create_celery_app() -> Celery:
    """
    Create and configure the Celery application.

    Returns:
        Configured Celery app instance
    """
    app = Celery("jobtracker_worker", include=["workers.tasks"])
    app.config_from_object("workers.config:CeleryConfig")

    logger.info(f"Celery app created with broker: {_redact_url(app.conf.broker_url)}")
    return app


celery_app = create_celery_app()


@celery_app.task(name="workers.healthcheck")
def healthcheck() -> dict:
    """
    Verify a worker can reach the database.

    Usage:
        from workers.celery_app import healthcheck
        healthcheck.delay().get(timeout=5)  # {"status": "ok", ...}
    """
    from lib.database import check_connection, session_scope

    started = time.perf_counter()
    with session_scope() as db:
        check_connection(db)
    return {"status": "ok", "database_ms": round((time.perf_counter() - started) * 1000, 2)}


# =============================================================================
# Celery Signals (Lifecycle Hooks)
# =============================================================================

@worker_ready.connect
def worker_ready_handler(sender=None, **extra):
    schedule = sorted(celery_app.conf.beat_schedule or {})
    logger.info(f"Worker ready; scheduled jobs: {', '.join(schedule) or 'none'}")


@task_prerun.connect
def task_prerun_handler(sender=None, task_id=None, task=None, **extra):
    _task_started[task_id] = time.perf_counter()
    logger.info(f"Task started: {task.name} [{task_id}]")


@task_postrun.connect
def task_postrun_handler(sender=None, task_id=None, task=None, state=None, **extra):
    """Log completion with wall time."""
    started = _task_started.pop(task_id, None)
    elapsed = f"{time.perf_counter() - started:.2f}s" if started is not None else "?"
    logger.info(f"Task completed: {task.name} [{task_id}] - State: {state} in {elapsed}")


@task_failure.connect
def task_failure_handler(sender=None, task_id=None, exception=None, **extra):
    logger.error(f"Task failed: {sender.name} [{task_id}] - Error: {exception}")


if __name__ == "__main__":
    celery_app.start()
