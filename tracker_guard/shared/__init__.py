"""
Shared module - Cross-cutting concerns

Constants, enums, logging and environment helpers used by every layer.
Nothing in here may depend on Infrastructure or on the composition root.
"""

from .consts import EnumEnvironment, EnumLogLevel
from .logging import (
    bind_account_context,
    clear_account_context,
    configure_logging,
    get_logger,
    update_logging_from_settings,
)

__all__ = [
    "EnumEnvironment",
    "EnumLogLevel",
    "bind_account_context",
    "clear_account_context",
    "configure_logging",
    "get_logger",
    "update_logging_from_settings",
]
