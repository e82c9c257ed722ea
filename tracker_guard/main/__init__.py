"""
Main module - Composition Root Layer

Entry points of the automation (Celery worker with beat, one-shot runner)
and the wiring of settings and dependencies.
"""

from .config import AppSettings, get_settings
from .container import AppContainer, get_container, init_container

__all__ = [
    "AppSettings",
    "get_settings",
    "AppContainer",
    "init_container",
    "get_container",
]
