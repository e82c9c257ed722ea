"""
Pending Command Analyzer - Domain Service

Decides, per device, whether the profile command should be queued given the
commands already in flight for it.

Rows are first folded into one ``CommandAnalysis`` per device. The
suppression rules in ``SUPPRESSION_RULES`` are then evaluated, in order,
against each finished aggregate. Rules can only move a device to
``Do Not Send``; a rule flagged ``overrides`` also replaces the reason set by
an earlier rule.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, Tuple

from tracker_guard.domain.entities.command import (
    IN_FLIGHT_STATES,
    AnalysisResult,
    CommandAnalysis,
    CommandState,
    PendingCommandRecord,
    Verdict,
)
from tracker_guard.domain.entities.device import normalize_device_id
from tracker_guard.domain.services.command_classifier import (
    compare_commands,
    is_interval_command,
)
from tracker_guard.domain.services.device_filters import MILLISECONDS_THRESHOLD
from tracker_guard.domain.services.frame_decoder import decode_frame
from tracker_guard.shared import get_logger
from tracker_guard.shared.consts import DEFAULT_PENDING_COMMAND_LIMIT

logger = get_logger(__name__)


@dataclass(frozen=True)
class SuppressionRule:
    name: str
    applies: Callable[[CommandAnalysis, int], bool]
    reason: Callable[[CommandAnalysis], str]
    overrides: bool = True


SUPPRESSION_RULES: Tuple[SuppressionRule, ...] = (
    SuppressionRule(
        name="exact_duplicate",
        applies=lambda analysis, limit: Verdict.EXACT_MATCH in analysis.verdicts,
        reason=lambda analysis: "Exact duplicate command found",
    ),
    SuppressionRule(
        name="equivalent_interval",
        applies=lambda analysis, limit: Verdict.EQUIVALENT_INTERVAL
        in analysis.verdicts,
        reason=lambda analysis: "Equivalent interval command found",
    ),
    SuppressionRule(
        name="interval_present",
        applies=lambda analysis, limit: analysis.has_interval_command,
        reason=lambda analysis: "Interval command found in system",
        overrides=False,
    ),
    SuppressionRule(
        name="too_many_pending",
        applies=lambda analysis, limit: analysis.command_count >= limit,
        reason=lambda analysis: f"Too many pending commands ({analysis.command_count})",
    ),
)


def _created_epoch(value: Any) -> int:
    """``created_date`` in epoch seconds; 0 when missing or unparseable."""
    try:
        timestamp = float(value or 0)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(timestamp):
        return 0
    if timestamp > MILLISECONDS_THRESHOLD:
        timestamp //= 1000
    return int(timestamp)


def _to_record(device_id: str, row: Mapping[str, Any]) -> PendingCommandRecord:
    frame = row.get("msg")
    if not isinstance(frame, str):
        frame = ""
    decoded = decode_frame(frame) or frame
    return PendingCommandRecord(
        device_id=device_id,
        original_frame=frame,
        decoded_command=decoded,
        state=CommandState(row["state"]),
        created_at=_created_epoch(row.get("created_date")),
    )


class PendingCommandAnalyzer:
    """Builds an ``AnalysisResult`` from raw command-status rows."""

    def __init__(
        self,
        pending_limit: int = DEFAULT_PENDING_COMMAND_LIMIT,
        rules: Sequence[SuppressionRule] = SUPPRESSION_RULES,
    ) -> None:
        self.pending_limit = pending_limit
        self.rules = tuple(rules)

    def analyze(
        self,
        device_ids: Iterable[str],
        pending_rows: Iterable[Mapping[str, Any]],
        candidate_command: Optional[str] = None,
    ) -> AnalysisResult:
        result = AnalysisResult(pending_limit=self.pending_limit)
        analyses = result.command_analysis_by_device
        for device_id in device_ids:
            analyses[device_id] = CommandAnalysis()

        for row in pending_rows:
            if not isinstance(row, Mapping):
                continue
            device_id = normalize_device_id(row.get("imei"))
            if device_id is None or device_id not in analyses:
                continue
            if row.get("state") not in IN_FLIGHT_STATES:
                continue

            record = _to_record(device_id, row)
            analysis = analyses[device_id]
            analysis.record(record)
            result.pending_counts_by_device[device_id] = analysis.command_count
            result.per_device_details.setdefault(device_id, []).append(record)

            if is_interval_command(record.decoded_command):
                analysis.has_interval_command = True
                result.interval_command_devices.add(device_id)

            if candidate_command and record.decoded_command:
                verdict = compare_commands(record.decoded_command, candidate_command)
                analysis.verdicts.add(verdict)
                if verdict is Verdict.EXACT_MATCH:
                    result.exact_duplicates.add(device_id)
                elif verdict is Verdict.EQUIVALENT_INTERVAL:
                    result.equivalent_interval_duplicates.add(device_id)

        for device_id, analysis in analyses.items():
            self._apply_rules(device_id, analysis)

        return result

    def _apply_rules(self, device_id: str, analysis: CommandAnalysis) -> None:
        for rule in self.rules:
            if not rule.applies(analysis, self.pending_limit):
                continue
            if not rule.overrides and not analysis.should_send:
                continue
            analysis.suppress(rule.reason(analysis))
            logger.debug(
                "pending_commands.rule_applied",
                device_id=device_id,
                rule=rule.name,
                reason=analysis.reason,
            )
