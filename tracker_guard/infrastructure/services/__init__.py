"""Infrastructure services package."""

from . import tasks
from .celery_config import celery_app, create_celery_app, parse_cron

__all__ = ["celery_app", "create_celery_app", "parse_cron", "tasks"]
