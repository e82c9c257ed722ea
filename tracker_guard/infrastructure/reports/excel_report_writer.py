"""
Excel Report Writer - Infrastructure Layer

Writes the per-account workbook with three sheets: device status, command
analysis and the raw pending-command audit trail.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import pandas as pd
from openpyxl.styles import Alignment, Font, PatternFill

from tracker_guard.domain.entities.automation import CommandDispatchResult
from tracker_guard.domain.entities.command import AnalysisResult
from tracker_guard.domain.entities.device import DeviceStatus
from tracker_guard.shared import get_logger

logger = get_logger(__name__)

STATUS_SHEET = "Device Status Report"
ANALYSIS_SHEET = "Command Analysis Details"
PENDING_SHEET = "Pending Commands Details"

# (header, width) per column, in sheet order
STATUS_COLUMNS: List[Tuple[str, int]] = [
    ("IMEI", 20),
    ("Device Type", 15),
    ("Last Reported", 20),
    ("Hours Since Last Report", 20),
    ("Current Ping Frequency", 20),
    ("Expected Frequency", 20),
    ("Status", 15),
    ("Command Decision", 20),
    ("Decision Reason", 30),
    ("Pending Command Count", 20),
    ("Existing Commands", 50),
    ("Command Sent", 25),
    ("Command Status", 15),
]
ANALYSIS_COLUMNS: List[Tuple[str, int]] = [
    ("IMEI", 20),
    ("Command Decision", 20),
    ("Decision Reason", 30),
    ("Total Pending Commands", 20),
    ("Existing Commands", 50),
    ("Command States", 30),
    ("Command Dates", 30),
]
PENDING_COLUMNS: List[Tuple[str, int]] = [
    ("IMEI", 20),
    ("Command Index", 15),
    ("Command State", 15),
    ("Command Content", 50),
    ("Created Date", 25),
    ("Raw Protocol Frame", 50),
]

HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill(fill_type="solid", fgColor="FFE0E0E0")


def _default_clock() -> datetime:
    return datetime.now(timezone.utc)


class ExcelReportWriter:
    """Writes ``device_report_<account>_<timestamp>.xlsx`` files."""

    def __init__(
        self,
        reports_dir: str = "reports",
        clock: Callable[[], datetime] = _default_clock,
    ) -> None:
        self.reports_dir = Path(reports_dir)
        self._clock = clock

    def write(
        self,
        account_name: str,
        all_devices: Sequence[DeviceStatus] = (),
        command_results: Sequence[CommandDispatchResult] = (),
        analysis: Optional[AnalysisResult] = None,
    ) -> str:
        self.reports_dir.mkdir(parents=True, exist_ok=True)
        timestamp = self._clock().isoformat().replace(":", "-").replace(".", "-")
        path = self.reports_dir / f"device_report_{account_name}_{timestamp}.xlsx"

        sheets = {
            STATUS_SHEET: (
                self._status_rows(all_devices, command_results, analysis),
                STATUS_COLUMNS,
            ),
            ANALYSIS_SHEET: (self._analysis_rows(analysis), ANALYSIS_COLUMNS),
            PENDING_SHEET: (self._pending_rows(analysis), PENDING_COLUMNS),
        }

        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            for sheet_name, (rows, columns) in sheets.items():
                headers = [header for header, _ in columns]
                frame = pd.DataFrame(rows, columns=headers)
                frame.to_excel(writer, sheet_name=sheet_name, index=False)
                self._style_sheet(writer.sheets[sheet_name], columns)

        logger.info(
            "report.generated",
            path=str(path),
            devices=len(all_devices),
            command_results=len(command_results),
        )
        return str(path)

    def _status_rows(
        self,
        all_devices: Sequence[DeviceStatus],
        command_results: Sequence[CommandDispatchResult],
        analysis: Optional[AnalysisResult],
    ) -> List[List[object]]:
        results_by_imei: Dict[str, CommandDispatchResult] = {}
        for result in command_results:
            results_by_imei.setdefault(result.imei, result)
        analyses = analysis.command_analysis_by_device if analysis else {}

        rows = []
        for device in all_devices:
            result = results_by_imei.get(device.imei)
            device_analysis = analyses.get(device.imei)
            if device_analysis is not None:
                decision = device_analysis.decision.value
                reason = device_analysis.reason
                count = device_analysis.command_count
                existing = device_analysis.existing_commands_formatted
            else:
                decision, reason, count, existing = "N/A", "Not analyzed", 0, "None"

            rows.append(
                [
                    device.imei,
                    device.device_type,
                    device.last_reported,
                    device.hours_since_last_report,
                    device.current_ping_frequency,
                    device.expected_frequency,
                    device.status.value,
                    decision,
                    reason,
                    count,
                    existing,
                    result.command if result else "N/A",
                    result.status.value if result else "N/A",
                ]
            )
        return rows

    def _analysis_rows(self, analysis: Optional[AnalysisResult]) -> List[List[object]]:
        if analysis is None:
            return []
        rows = []
        for imei, device_analysis in analysis.command_analysis_by_device.items():
            history = device_analysis.commands
            rows.append(
                [
                    imei,
                    device_analysis.decision.value,
                    device_analysis.reason,
                    device_analysis.command_count,
                    "; ".join(entry.command for entry in history) or "None",
                    "; ".join(entry.state for entry in history) or "None",
                    "; ".join(entry.created_date for entry in history) or "None",
                ]
            )
        return rows

    def _pending_rows(self, analysis: Optional[AnalysisResult]) -> List[List[object]]:
        if analysis is None:
            return []
        rows = []
        for imei, records in analysis.per_device_details.items():
            for index, record in enumerate(records, start=1):
                rows.append(
                    [
                        imei,
                        index,
                        record.state_description,
                        record.decoded_command or "Cannot extract",
                        record.created_at_iso,
                        record.original_frame,
                    ]
                )
        return rows

    @staticmethod
    def _style_sheet(worksheet, columns: List[Tuple[str, int]]) -> None:
        for cell in worksheet[1]:
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL

        for index, (header, width) in enumerate(columns, start=1):
            letter = worksheet.cell(row=1, column=index).column_letter
            worksheet.column_dimensions[letter].width = width
            if header == "Existing Commands":
                for (cell,) in worksheet.iter_rows(
                    min_row=2, min_col=index, max_col=index
                ):
                    cell.alignment = Alignment(wrap_text=True)
