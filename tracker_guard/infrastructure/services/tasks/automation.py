"""Celery task running the periodic device configuration automation."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict

from tracker_guard.application.dtos.automation_dto import (
    AccountRunSummaryDTO,
    AutomationRunDTO,
)
from tracker_guard.infrastructure.services.celery_config import (
    AUTOMATION_TASK_NAME,
    celery_app,
)
from tracker_guard.infrastructure.services.tasks.base import CallbackTask, logger


async def run_automation() -> AutomationRunDTO:
    """Run every configured account once through the container's use case."""
    from tracker_guard.main.config import get_settings
    from tracker_guard.main.container import init_container

    container = init_container(get_settings())
    use_case = container.run_automation_use_case()

    started_at = datetime.now(timezone.utc)
    summaries = await use_case.execute()
    return AutomationRunDTO(
        started_at=started_at,
        finished_at=datetime.now(timezone.utc),
        accounts=[AccountRunSummaryDTO.from_entity(item) for item in summaries],
    )


@celery_app.task(bind=True, base=CallbackTask, name=AUTOMATION_TASK_NAME)
def run_device_config_automation(self) -> Dict[str, Any]:
    """Detect configuration drift and queue corrective commands."""

    try:
        run = asyncio.run(run_automation())
    except Exception as exc:
        logger.error("automation.task.failed", error=str(exc), exc_info=exc)
        raise

    if run.failed_accounts:
        logger.warning("automation.task.accounts_failed", accounts=run.failed_accounts)
    return run.model_dump(mode="json")
