"""
Infrastructure Services - Celery Configuration

Celery application and beat schedule for the periodic device
configuration automation.
"""

import os
from typing import Optional

from celery import Celery
from celery.schedules import crontab

AUTOMATION_TASK_NAME = "run_device_config_automation"
AUTOMATION_QUEUE = "automation"
DEFAULT_SCHEDULE = "0 * * * *"


def parse_cron(expression: str) -> crontab:
    """
    Build a crontab from a five-field cron expression.

    Raises:
        ValueError: If the expression does not have exactly five fields.
    """
    fields = expression.split()
    if len(fields) != 5:
        raise ValueError(
            f"Cron expression must have 5 fields, got {len(fields)}: {expression!r}"
        )
    minute, hour, day_of_month, month_of_year, day_of_week = fields
    return crontab(
        minute=minute,
        hour=hour,
        day_of_month=day_of_month,
        month_of_year=month_of_year,
        day_of_week=day_of_week,
    )


def create_celery_app(
    broker_url: Optional[str] = None,
    backend_url: Optional[str] = None,
    schedule: Optional[str] = None,
) -> Celery:
    """
    Create and configure Celery application.

    Args:
        broker_url: Message broker URL (uses env var if not provided)
        backend_url: Result backend URL (uses env var if not provided)
        schedule: Cron expression for the automation (uses env var if not provided)

    Returns:
        Configured Celery application
    """
    effective_broker = broker_url or os.getenv(
        "CELERY_BROKER_URL", "redis://redis:6379/0"
    )
    effective_backend = backend_url or os.getenv(
        "CELERY_RESULT_BACKEND", "redis://redis:6379/1"
    )
    effective_schedule = schedule or os.getenv("AUTOMATION_SCHEDULE", DEFAULT_SCHEDULE)

    app = Celery(
        "tracker_guard_worker",
        broker=effective_broker,
        backend=effective_backend,
        include=["tracker_guard.infrastructure.services.tasks.automation"],
    )

    app.conf.update(
        task_serializer="json",
        accept_content=["json"],
        result_serializer="json",
        timezone="UTC",
        enable_utc=True,
        result_expires=3600,  # 1 hour
        task_routes={AUTOMATION_TASK_NAME: {"queue": AUTOMATION_QUEUE}},
        worker_prefetch_multiplier=1,
        task_acks_late=True,
        # A pass over all accounts must never overlap with the next one
        worker_concurrency=1,
        beat_schedule={
            "device-config-automation": {
                "task": AUTOMATION_TASK_NAME,
                "schedule": parse_cron(effective_schedule),
                "options": {"queue": AUTOMATION_QUEUE},
            }
        },
    )

    return app


celery_app = create_celery_app()
