"""Domain port for writing the per-account device report."""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from tracker_guard.domain.entities.automation import CommandDispatchResult
from tracker_guard.domain.entities.command import AnalysisResult
from tracker_guard.domain.entities.device import DeviceStatus


class IReportWriter(Protocol):
    """Interface for persisting the outcome of processing one account."""

    def write(
        self,
        account_name: str,
        all_devices: Sequence[DeviceStatus] = (),
        command_results: Sequence[CommandDispatchResult] = (),
        analysis: Optional[AnalysisResult] = None,
    ) -> str:
        """Write the report and return its location."""
        ...
