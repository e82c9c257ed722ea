"""
Account Automation Use Cases - Application Layer

Orchestrates one automation pass for an account: fetch the devices that
reported recently, find the ones whose reporting interval drifted from the
account profile, check what is already queued for them, queue the profile
command where it is still needed and write the report.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Sequence

from dependency_injector.wiring import Provide, inject

from tracker_guard.application.use_cases.command_dispatch_use_case import (
    SendConfigurationCommandsUseCase,
)
from tracker_guard.domain.entities.account import AccountProfile
from tracker_guard.domain.entities.automation import (
    AccountRunSummary,
    CommandDispatchResult,
)
from tracker_guard.domain.entities.command import AnalysisResult
from tracker_guard.domain.entities.errors import (
    AccountProfileNotFoundError,
    FleetApiError,
)
from tracker_guard.domain.gateways.fleet_gateway import IFleetGateway
from tracker_guard.domain.ports.report_writer import IReportWriter
from tracker_guard.domain.services.device_filters import (
    check_config_deviations,
    filter_recently_reported,
)
from tracker_guard.domain.services.pending_command_analyzer import (
    PendingCommandAnalyzer,
)
from tracker_guard.shared import (
    bind_account_context,
    clear_account_context,
    get_logger,
)

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProcessAccountUseCase:
    """Run the drift detection and correction flow for a single account."""

    @inject
    def __init__(
        self,
        fleet_gateway: IFleetGateway = Provide["fleet_gateway"],
        report_writer: IReportWriter = Provide["report_writer"],
        command_dispatcher: SendConfigurationCommandsUseCase = Provide[
            "send_configuration_commands_use_case"
        ],
        account_profiles: Dict[str, AccountProfile] = Provide["account_profiles"],
        analyzer: Optional[PendingCommandAnalyzer] = None,
        device_window_hours: float = 48,
        pending_window_hours: float = 24,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize the use case with its dependencies.

        Args:
            fleet_gateway: Gateway for the fleet-management API
            report_writer: Destination of the per-account report
            command_dispatcher: Batched sender for the profile command
            account_profiles: Expected configuration per account name
            analyzer: Pending command analyzer (a default one is built if omitted)
            device_window_hours: Devices silent for longer are ignored
            pending_window_hours: Age limit of the queued commands considered
        """
        self.fleet_gateway = fleet_gateway
        self.report_writer = report_writer
        self.command_dispatcher = command_dispatcher
        self.account_profiles = account_profiles
        self.analyzer = analyzer or PendingCommandAnalyzer()
        self.device_window_hours = device_window_hours
        self.pending_window_hours = pending_window_hours
        self._clock = clock

    async def execute(self, account_name: str) -> AccountRunSummary:
        """
        Process ``account_name`` end to end.

        Raises:
            AccountProfileNotFoundError: If the account has no profile.
        """
        profile = self.account_profiles.get(account_name)
        if profile is None:
            logger.error("automation.account.profile_missing", account=account_name)
            raise AccountProfileNotFoundError(account_name)

        bind_account_context(account_name)
        logger.info("automation.account.started")
        try:
            return await self._process(profile)
        except Exception as e:
            logger.error("automation.account.failed", error=str(e), exc_info=e)
            report_path = self.report_writer.write(account_name)
            return AccountRunSummary(
                account=account_name, report_path=report_path, error=str(e)
            )
        finally:
            clear_account_context()

    async def _process(self, profile: AccountProfile) -> AccountRunSummary:
        now = self._clock()
        account_name = profile.account_name

        try:
            devices = await self.fleet_gateway.get_devices(profile)
        except FleetApiError as e:
            logger.error("automation.devices.fetch_failed", error=str(e))
            report_path = self.report_writer.write(account_name)
            return AccountRunSummary(account=account_name, report_path=report_path)

        recent = filter_recently_reported(devices, now, self.device_window_hours)
        logger.info(
            "automation.devices.recent",
            fetched=len(devices),
            recent=len(recent),
            window_hours=self.device_window_hours,
        )

        deviations, all_devices = check_config_deviations(recent, profile, now)
        logger.info("automation.devices.deviations", count=len(deviations))

        analysis: Optional[AnalysisResult] = None
        command_results: List[CommandDispatchResult] = []

        if deviations:
            imeis = [device.imei for device in deviations]
            analysis = await self._analyze_pending(imeis, profile.profile_command, now)
            self._log_pending_history(analysis)

            eligible = analysis.eligible_devices(imeis)
            with_interval = [
                imei for imei in imeis if imei in analysis.interval_command_devices
            ]
            if with_interval:
                logger.info(
                    "automation.devices.interval_pending",
                    count=len(with_interval),
                )
            logger.info("automation.dispatch.eligible", count=len(eligible))

            if eligible:
                command_results = await self.command_dispatcher.execute(
                    eligible, profile
                )
            else:
                logger.info("automation.dispatch.nothing_to_send")

        report_path = self.report_writer.write(
            account_name, all_devices, command_results, analysis
        )

        summary = AccountRunSummary(
            account=account_name,
            total_devices=len(recent),
            deviations=len(deviations),
            commands_sent=len(command_results),
            report_path=report_path,
        )
        logger.info("automation.account.completed", **summary.to_dict())
        return summary

    async def _analyze_pending(
        self, imeis: Sequence[str], candidate_command: str, now: datetime
    ) -> AnalysisResult:
        start = now - timedelta(hours=self.pending_window_hours)
        try:
            rows = await self.fleet_gateway.get_pending_commands(
                imeis, int(start.timestamp()), int(now.timestamp())
            )
        except FleetApiError as e:
            # Without the queue we cannot prove a duplicate; analyse as empty
            logger.error("automation.pending_commands.fetch_failed", error=str(e))
            rows = []
        return self.analyzer.analyze(imeis, rows, candidate_command)

    @staticmethod
    def _log_pending_history(analysis: AnalysisResult) -> None:
        for imei, records in analysis.per_device_details.items():
            logger.debug(
                "automation.pending_commands.device",
                imei=imei,
                count=len(records),
                commands=[
                    f"{record.state_description}: {record.decoded_command}"
                    for record in records
                ],
            )


class RunAutomationUseCase:
    """Process every configured account, one after the other."""

    def __init__(
        self,
        process_account: ProcessAccountUseCase,
        account_names: Sequence[str],
        account_pause_seconds: float = 5.0,
    ):
        self.process_account = process_account
        self.account_names = list(account_names)
        self.account_pause_seconds = account_pause_seconds

    async def execute(self) -> List[AccountRunSummary]:
        logger.info("automation.run.started", accounts=self.account_names)
        summaries: List[AccountRunSummary] = []

        for account_name in self.account_names:
            try:
                summary = await self.process_account.execute(account_name)
            except AccountProfileNotFoundError as e:
                summary = AccountRunSummary(account=account_name, error=e.message)
            summaries.append(summary)
            await asyncio.sleep(self.account_pause_seconds)

        logger.info("automation.run.completed", accounts=len(summaries))
        return summaries
