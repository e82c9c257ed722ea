"""
Command Dispatch Use Case - Application Layer

Queues the account profile command for the devices that passed the
pending-command analysis, in rate-limited batches.
"""

import asyncio
import json
from datetime import datetime, timezone
from typing import Callable, List, Sequence

from tracker_guard.domain.entities.account import AccountProfile
from tracker_guard.domain.entities.automation import (
    CommandDispatchResult,
    DispatchStatus,
)
from tracker_guard.domain.gateways.fleet_gateway import IFleetGateway
from tracker_guard.domain.services.device_filters import format_report_time
from tracker_guard.shared import get_logger

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SendConfigurationCommandsUseCase:
    """Send the profile command to devices, ``batch_size`` at a time."""

    def __init__(
        self,
        fleet_gateway: IFleetGateway,
        batch_size: int = 400,
        batch_delay_seconds: float = 0.1,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.fleet_gateway = fleet_gateway
        self.batch_size = max(1, batch_size)
        self.batch_delay_seconds = batch_delay_seconds
        self._clock = clock

    async def execute(
        self, imeis: Sequence[str], profile: AccountProfile
    ) -> List[CommandDispatchResult]:
        """
        Queue ``profile.profile_command`` for every device in ``imeis``.

        Returns:
            One result per device. A batch whose request fails yields
            ``Error`` results for its devices; later batches still run.
        """
        results: List[CommandDispatchResult] = []
        command = profile.profile_command
        batches = [
            list(imeis[start : start + self.batch_size])
            for start in range(0, len(imeis), self.batch_size)
        ]

        for batch_number, batch in enumerate(batches, start=1):
            logger.info(
                "dispatch.batch.started",
                batch=batch_number,
                total_batches=len(batches),
                device_count=len(batch),
            )
            try:
                status_code, body = await self.fleet_gateway.send_commands(
                    batch, command
                )
                if status_code == 200:
                    status = DispatchStatus.SUCCESS
                    detail = "Command queued successfully"
                else:
                    status = DispatchStatus.FAILED
                    rendered = body if isinstance(body, str) else json.dumps(body)
                    detail = f"API Error {status_code}: {rendered}"
                results.extend(
                    self._results(batch, command, status, detail, profile)
                )
                await asyncio.sleep(self.batch_delay_seconds)

            except Exception as e:
                error_message = f"Request failed: {str(e)}"
                logger.error(
                    "dispatch.batch.failed",
                    batch=batch_number,
                    error=str(e),
                    exc_info=e,
                )
                results.extend(
                    self._results(
                        batch, "N/A", DispatchStatus.ERROR, error_message, profile
                    )
                )

        return results

    def _results(
        self,
        batch: Sequence[str],
        command: str,
        status: DispatchStatus,
        detail: str,
        profile: AccountProfile,
    ) -> List[CommandDispatchResult]:
        return [
            CommandDispatchResult(
                imei=imei,
                command=command,
                status=status,
                response=detail,
                timestamp=format_report_time(self._clock()),
                account=profile.account_name,
            )
            for imei in batch
        ]
