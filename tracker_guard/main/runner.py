"""
One-shot Entry Point - Main Layer

Runs the automation once for every configured account, without Celery.
Useful from cron or for a manual catch-up run.
"""

import asyncio

from tracker_guard.infrastructure.services.tasks.automation import run_automation
from tracker_guard.main.config import get_settings
from tracker_guard.shared import (
    configure_logging,
    get_logger,
    update_logging_from_settings,
)

logger = get_logger(__name__)


def main() -> int:
    """Run the automation and return a process exit code."""
    configure_logging()
    update_logging_from_settings(get_settings())

    logger.info("automation.runner.started")
    try:
        run = asyncio.run(run_automation())
    except Exception as e:
        logger.error("automation.runner.failed", error=str(e), exc_info=e)
        return 1

    logger.info("automation.runner.results", results=run.model_dump(mode="json"))
    return 1 if run.failed_accounts else 0


if __name__ == "__main__":
    raise SystemExit(main())
