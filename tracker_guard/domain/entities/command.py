"""
Domain Entities - Commands

Pending command records as returned by the command-status API and the
per-device analysis built from them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Dict, Iterable, List, Optional, Set

from tracker_guard.shared.consts import DEFAULT_PENDING_COMMAND_LIMIT

NO_PENDING_COMMANDS_REASON = "No pending commands found"
NO_COMMANDS_FORMATTED = "None"
UNKNOWN_DATE = "N/A"


class CommandState(IntEnum):
    """Queue state of a command on the fleet API."""

    PENDING = 0
    SENT = 1
    CANCELED = 5

    @property
    def label(self) -> str:
        return "Pending" if self is CommandState.PENDING else "Sent"

    @property
    def marker(self) -> str:
        return "⏳" if self is CommandState.PENDING else "✅"


IN_FLIGHT_STATES = frozenset({CommandState.PENDING, CommandState.SENT})


class Verdict(str, Enum):
    """Outcome of comparing an in-flight command with a candidate command."""

    EXACT_MATCH = "exact_match"
    EQUIVALENT_INTERVAL = "equivalent_interval"
    DIFFERENT_INTERVAL = "different_interval"
    DIFFERENT_COMMAND = "different_command"


class Decision(str, Enum):
    SEND_COMMAND = "Send Command"
    DO_NOT_SEND = "Do Not Send"


def epoch_to_iso(epoch_seconds: int) -> str:
    """Render an epoch timestamp as ``YYYY-MM-DDTHH:MM:SS.mmmZ``, or ``N/A``."""
    try:
        moment = datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError, TypeError):
        return UNKNOWN_DATE
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True, slots=True)
class PendingCommandRecord:
    """A command still queued (or sent but unacknowledged) for a device."""

    device_id: str
    original_frame: str
    decoded_command: str
    state: CommandState
    created_at: int

    @property
    def state_description(self) -> str:
        return self.state.label

    @property
    def created_at_iso(self) -> str:
        return epoch_to_iso(self.created_at)

    @property
    def formatted(self) -> str:
        return f"{self.state.marker} {self.decoded_command}"


@dataclass(frozen=True, slots=True)
class CommandHistoryEntry:
    command: str
    state: str
    created_date: str


@dataclass
class CommandAnalysis:
    """Pending-command picture and send decision for a single device."""

    has_pending_commands: bool = False
    command_count: int = 0
    commands: List[CommandHistoryEntry] = field(default_factory=list)
    decision: Decision = Decision.SEND_COMMAND
    reason: str = NO_PENDING_COMMANDS_REASON
    existing_commands_formatted: str = NO_COMMANDS_FORMATTED
    has_interval_command: bool = False
    verdicts: Set[Verdict] = field(default_factory=set)

    def record(self, record: PendingCommandRecord) -> None:
        self.has_pending_commands = True
        self.command_count += 1
        self.commands.append(
            CommandHistoryEntry(
                command=record.decoded_command,
                state=record.state_description,
                created_date=record.created_at_iso,
            )
        )
        if self.existing_commands_formatted == NO_COMMANDS_FORMATTED:
            self.existing_commands_formatted = record.formatted
        else:
            self.existing_commands_formatted += f"\n{record.formatted}"

    def suppress(self, reason: str) -> None:
        # Decisions only ever move towards DO_NOT_SEND within one pass
        self.decision = Decision.DO_NOT_SEND
        self.reason = reason

    @property
    def should_send(self) -> bool:
        return self.decision == Decision.SEND_COMMAND


@dataclass
class AnalysisResult:
    """Everything the send and report steps need from one analysis pass."""

    exact_duplicates: Set[str] = field(default_factory=set)
    equivalent_interval_duplicates: Set[str] = field(default_factory=set)
    interval_command_devices: Set[str] = field(default_factory=set)
    pending_counts_by_device: Dict[str, int] = field(default_factory=dict)
    per_device_details: Dict[str, List[PendingCommandRecord]] = field(
        default_factory=dict
    )
    command_analysis_by_device: Dict[str, CommandAnalysis] = field(
        default_factory=dict
    )
    pending_limit: int = DEFAULT_PENDING_COMMAND_LIMIT

    def is_eligible(self, device_id: str) -> bool:
        """Whether the candidate command may be sent to ``device_id``."""
        if (
            device_id in self.exact_duplicates
            or device_id in self.equivalent_interval_duplicates
            or device_id in self.interval_command_devices
        ):
            return False
        count: Optional[int] = self.pending_counts_by_device.get(device_id)
        return not count or count < self.pending_limit

    def eligible_devices(self, device_ids: Iterable[str]) -> List[str]:
        return [device_id for device_id in device_ids if self.is_eligible(device_id)]
