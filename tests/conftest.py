from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tracker_guard.domain.entities.account import AccountProfile  # noqa: E402
from tracker_guard.domain.entities.automation import (  # noqa: E402
    CommandDispatchResult,
)
from tracker_guard.domain.entities.command import AnalysisResult  # noqa: E402
from tracker_guard.domain.entities.device import DeviceStatus  # noqa: E402
from tracker_guard.domain.gateways.fleet_gateway import IFleetGateway  # noqa: E402

PROFILE_COMMAND = "AT+TIMEGAP=0,600,1,600 & AT+SAMPLEMODE=0,0"
HEADER = "7E" + "8300" + "0" * 32  # 38 characters including the start marker


def build_envelope(command: str, checksum: str = "00AB") -> str:
    """Wrap ``command`` the way the command-status API returns queued frames."""
    return HEADER + command.encode("ascii").hex().upper() + checksum + "7E"


def command_row(
    imei: str,
    msg: str,
    state: int = 0,
    created_date: int = 1_700_000_000,
) -> Dict[str, Any]:
    return {"imei": imei, "msg": msg, "state": state, "created_date": created_date}


class StubFleetGateway(IFleetGateway):
    def __init__(
        self,
        devices: Optional[List[Dict[str, Any]]] = None,
        pending_rows: Optional[List[Dict[str, Any]]] = None,
        send_status: int = 200,
    ) -> None:
        self.devices = devices or []
        self.pending_rows = pending_rows or []
        self.send_status = send_status
        self.devices_error: Optional[Exception] = None
        self.pending_error: Optional[Exception] = None
        self.send_errors: List[Optional[Exception]] = []
        self.pending_calls: List[Tuple[List[str], int, int]] = []
        self.sent: List[Tuple[List[str], str]] = []

    async def get_devices(self, profile: AccountProfile) -> List[Dict[str, Any]]:
        if self.devices_error:
            raise self.devices_error
        return self.devices

    async def get_pending_commands(
        self, imeis: Sequence[str], start_epoch: int, end_epoch: int
    ) -> List[Dict[str, Any]]:
        self.pending_calls.append((list(imeis), start_epoch, end_epoch))
        if self.pending_error:
            raise self.pending_error
        return self.pending_rows

    async def send_commands(
        self, imeis: Sequence[str], command: str
    ) -> Tuple[int, Any]:
        self.sent.append((list(imeis), command))
        if self.send_errors:
            error = self.send_errors.pop(0)
            if error is not None:
                raise error
        return self.send_status, {"status": "ok"}


class RecordingReportWriter:
    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []

    def write(
        self,
        account_name: str,
        all_devices: Sequence[DeviceStatus] = (),
        command_results: Sequence[CommandDispatchResult] = (),
        analysis: Optional[AnalysisResult] = None,
    ) -> str:
        self.calls.append(
            {
                "account_name": account_name,
                "all_devices": list(all_devices),
                "command_results": list(command_results),
                "analysis": analysis,
            }
        )
        return f"reports/device_report_{account_name}.xlsx"


@pytest.fixture()
def sample_profile() -> AccountProfile:
    return AccountProfile(
        account_name="PQE_Testing",
        device_type="BSFlex",
        ping_frequency=600,
        profile_command=PROFILE_COMMAND,
    )


@pytest.fixture()
def fixed_now() -> datetime:
    return datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
