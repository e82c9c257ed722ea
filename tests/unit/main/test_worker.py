from __future__ import annotations

import os
from unittest.mock import MagicMock

import pytest

from tracker_guard.main.worker import create_worker, main


class _StubCeleryApp:
    def __init__(self) -> None:
        self.main = "tracker_guard_worker"
        self.worker_main = MagicMock()


@pytest.fixture(autouse=True)
def patch_create_celery(monkeypatch):
    created = []

    def _create(**kwargs):
        created.append(kwargs)
        return _StubCeleryApp()

    monkeypatch.setattr(
        "tracker_guard.infrastructure.services.celery_config.create_celery_app",
        _create,
    )
    return created


def test_create_worker_sets_environment(monkeypatch, patch_create_celery) -> None:
    monkeypatch.delenv("CELERY_BROKER_URL", raising=False)
    monkeypatch.delenv("CELERY_RESULT_BACKEND", raising=False)
    monkeypatch.delenv("AUTOMATION_SCHEDULE", raising=False)

    worker_app = create_worker()

    assert worker_app.main == "tracker_guard_worker"
    assert os.environ["CELERY_BROKER_URL"].startswith("redis://")
    assert os.environ["CELERY_RESULT_BACKEND"].startswith("redis://")
    assert os.environ["AUTOMATION_SCHEDULE"] == "0 * * * *"
    assert patch_create_celery[0]["schedule"] == "0 * * * *"


def test_main_invokes_worker_with_beat(monkeypatch) -> None:
    stub_app = _StubCeleryApp()
    monkeypatch.setattr("tracker_guard.main.worker.create_worker", lambda: stub_app)

    main()

    stub_app.worker_main.assert_called_once()
    argv = stub_app.worker_main.call_args.args[0]
    assert "--beat" in argv
    assert "--queues=automation" in argv
