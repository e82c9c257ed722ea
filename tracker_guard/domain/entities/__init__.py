"""
Domain Entities Package

This package contains the core domain entities and business logic.
"""

from .account import AccountProfile, build_account_profiles
from .automation import AccountRunSummary, CommandDispatchResult, DispatchStatus
from .command import (
    AnalysisResult,
    CommandAnalysis,
    CommandHistoryEntry,
    CommandState,
    Decision,
    PendingCommandRecord,
    Verdict,
)
from .device import ConfigStatus, DeviceStatus, normalize_device_id
from .errors import AccountProfileNotFoundError, DomainError, FleetApiError

__all__ = [
    "AccountProfile",
    "AccountProfileNotFoundError",
    "AccountRunSummary",
    "AnalysisResult",
    "CommandAnalysis",
    "CommandDispatchResult",
    "CommandHistoryEntry",
    "CommandState",
    "ConfigStatus",
    "Decision",
    "DeviceStatus",
    "DispatchStatus",
    "DomainError",
    "FleetApiError",
    "PendingCommandRecord",
    "Verdict",
    "build_account_profiles",
    "normalize_device_id",
]
