"""Domain entities produced by an automation run."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional


class DispatchStatus(str, Enum):
    SUCCESS = "Success"
    FAILED = "Failed"
    ERROR = "Error"


@dataclass(slots=True)
class CommandDispatchResult:
    """Outcome of queueing the profile command for one device."""

    imei: str
    command: str
    status: DispatchStatus
    response: str
    timestamp: str
    account: str


@dataclass(slots=True)
class AccountRunSummary:
    """What happened to one account during an automation run."""

    account: str
    total_devices: int = 0
    deviations: int = 0
    commands_sent: int = 0
    report_path: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}
