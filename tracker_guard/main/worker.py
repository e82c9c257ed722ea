#!/usr/bin/env python3
"""
Worker Entry Point - Main Layer

Starts the Celery worker with an embedded beat scheduler so the device
configuration automation runs on its cron schedule.
"""

import os

from tracker_guard.main.config import get_settings
from tracker_guard.shared import (
    configure_logging,
    get_logger,
    update_logging_from_settings,
)

# Configure logging with basic settings first
configure_logging()

# Load settings
settings = get_settings()

# Update logging with complete settings
update_logging_from_settings(settings)

logger = get_logger(__name__)


def create_worker():
    """
    Configure and return the Celery application used by the worker.

    The settings are exported to the environment first so the module-level
    Celery app and the task see the same broker and schedule.
    """
    settings = get_settings()

    os.environ.setdefault("CELERY_BROKER_URL", settings.celery.broker_url)
    os.environ.setdefault("CELERY_RESULT_BACKEND", settings.celery.result_backend_url)
    os.environ.setdefault("AUTOMATION_SCHEDULE", settings.automation.schedule)

    from tracker_guard.infrastructure.services.celery_config import create_celery_app

    worker_app = create_celery_app(
        broker_url=settings.celery.broker_url,
        backend_url=settings.celery.result_backend_url,
        schedule=settings.automation.schedule,
    )

    logger.info(
        "worker.configured",
        broker_url=settings.celery.broker_url,
        backend_url=settings.celery.result_backend_url,
        schedule=settings.automation.schedule,
        app_name=worker_app.main,
    )

    return worker_app


def main():
    """Main entry point for Celery worker."""

    logger.info("worker.starting")

    worker_app = create_worker()

    worker_app.worker_main(
        [
            "worker",
            "--beat",
            "--loglevel=info",
            "--queues=automation",
            "--concurrency=1",
        ]
    )


if __name__ == "__main__":
    main()
