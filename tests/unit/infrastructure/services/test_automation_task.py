from __future__ import annotations

from datetime import datetime, timezone

import pytest

from tracker_guard.application.dtos.automation_dto import (
    AccountRunSummaryDTO,
    AutomationRunDTO,
)
from tracker_guard.domain.entities.automation import AccountRunSummary
from tracker_guard.infrastructure.services.tasks import automation


class _StubRunUseCase:
    async def execute(self):
        return [
            AccountRunSummary(account="A", total_devices=2, deviations=1),
            AccountRunSummary(account="B", error="boom"),
        ]


class _StubContainer:
    def run_automation_use_case(self):
        return _StubRunUseCase()


@pytest.mark.asyncio
async def test_run_automation_builds_dto(monkeypatch) -> None:
    monkeypatch.setattr("tracker_guard.main.config.get_settings", lambda: object())
    monkeypatch.setattr(
        "tracker_guard.main.container.init_container",
        lambda settings: _StubContainer(),
    )

    run = await automation.run_automation()

    assert [summary.account for summary in run.accounts] == ["A", "B"]
    assert run.accounts[0].deviations == 1
    assert run.failed_accounts == ["B"]
    assert run.started_at <= run.finished_at


def test_task_returns_json_ready_payload(monkeypatch) -> None:
    moment = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

    async def _fake_run() -> AutomationRunDTO:
        return AutomationRunDTO(
            started_at=moment,
            finished_at=moment,
            accounts=[AccountRunSummaryDTO(account="A", commands_sent=3)],
        )

    monkeypatch.setattr(automation, "run_automation", _fake_run)

    payload = automation.run_device_config_automation()

    assert payload["accounts"][0]["commands_sent"] == 3
    assert payload["started_at"].startswith("2024-03-01T12:00:00")


def test_task_propagates_failures(monkeypatch) -> None:
    async def _failing_run() -> AutomationRunDTO:
        raise RuntimeError("broker down")

    monkeypatch.setattr(automation, "run_automation", _failing_run)

    with pytest.raises(RuntimeError):
        automation.run_device_config_automation()
