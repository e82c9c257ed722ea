"""Celery task implementations for infrastructure services."""

from .automation import run_automation, run_device_config_automation
from .base import CallbackTask, logger

__all__ = [
    "CallbackTask",
    "logger",
    "run_automation",
    "run_device_config_automation",
]
