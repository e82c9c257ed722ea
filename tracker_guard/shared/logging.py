"""
Logging Configuration - Shared Layer

Structured logging for the automation worker. Our modules log through
structlog; Celery and httpx log through the standard library. Both end up in
the same root handlers, rendered by structlog.
"""

import logging
import os
import sys
from typing import Any, List, Optional

import structlog
from structlog.types import Processor

from tracker_guard.shared.consts import EnumEnvironment, EnumLogLevel

# Third-party loggers that are noisy at INFO
_QUIET_LOGGERS = ("httpx", "httpcore")


def _shared_processors() -> List[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def _renderer(environment: str) -> Processor:
    if str(environment).lower() == EnumEnvironment.PRODUCTION.value:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def _build_handlers(log_file: Optional[str]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    return handlers


def configure_logging(
    level: Optional[str] = None,
    file_path: Optional[str] = None,
    environment: str = EnumEnvironment.DEVELOPMENT.value,
) -> None:
    """
    Route stdlib logging and structlog into the same handlers.

    Called once at import time of the entry points (``LOG_LEVEL`` and
    ``LOG_FILE_PATH`` from the environment) and again once the settings are
    loaded.

    Args:
        level: Log level name; falls back to ``LOG_LEVEL`` then INFO.
        file_path: Optional log file; console output is always enabled.
        environment: ``production`` renders JSON lines, anything else uses
            the console renderer.
    """
    level_name = (level or os.environ.get("LOG_LEVEL") or EnumLogLevel.INFO.value).upper()
    numeric_level = getattr(logging, level_name, logging.INFO)
    log_file = file_path or os.environ.get("LOG_FILE_PATH")

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=_renderer(environment),
        foreign_pre_chain=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *_shared_processors(),
        ],
    )
    handlers = _build_handlers(log_file)
    for handler in handlers:
        handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.handlers = handlers
    root_logger.setLevel(numeric_level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    quiet_level = logging.WARNING if numeric_level > logging.DEBUG else logging.DEBUG
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)

    get_logger(__name__).debug(
        "logging.configured", level=level_name, file_path=log_file
    )


def update_logging_from_settings(settings: Any) -> None:
    """Re-apply the logging configuration from the loaded ``AppSettings``."""
    level = getattr(settings.logging.level, "value", settings.logging.level)
    environment = getattr(settings.environment, "value", settings.environment)
    try:
        configure_logging(
            level=level,
            file_path=settings.logging.file_path,
            environment=environment,
        )
    except OSError as e:
        # Unwritable log file: keep the console-only configuration
        logging.error(f"Failed to update logging from settings: {e}")


def bind_account_context(account_name: str) -> None:
    """Attach the account being processed to every subsequent log line."""
    structlog.contextvars.bind_contextvars(account=account_name)


def clear_account_context() -> None:
    structlog.contextvars.unbind_contextvars("account")


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger configured for the project."""
    return structlog.get_logger(name)
