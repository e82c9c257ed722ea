"""
Dependency container injection module - Main Layer

This module implements the dependency injection container that wires the
fleet API gateway, the report writer and the automation use cases.
"""

from dependency_injector import containers, providers

from tracker_guard.application.use_cases.account_automation_use_case import (
    ProcessAccountUseCase,
    RunAutomationUseCase,
)
from tracker_guard.application.use_cases.command_dispatch_use_case import (
    SendConfigurationCommandsUseCase,
)
from tracker_guard.domain.entities.account import build_account_profiles
from tracker_guard.domain.services.pending_command_analyzer import (
    PendingCommandAnalyzer,
)
from tracker_guard.infrastructure.gateways.fleet_api_gateway import FleetApiGateway
from tracker_guard.infrastructure.reports.excel_report_writer import (
    ExcelReportWriter,
)
from tracker_guard.shared import get_logger

from .config import AppSettings, batch_delay_seconds

logger = get_logger(__name__)


class AppContainer(containers.DeclarativeContainer):
    """Composition Root using dependency-injector."""

    wiring_config = containers.WiringConfiguration(packages=["..application"])

    # Settings
    config = providers.Configuration()

    account_profiles = providers.Singleton(build_account_profiles, config.accounts)

    # Infrastructure
    fleet_gateway = providers.Singleton(
        FleetApiGateway,
        api_key=config.fleet_api.api_key,
        devices_url=config.fleet_api.devices_url,
        command_status_url=config.fleet_api.command_status_url,
        send_commands_url=config.fleet_api.send_commands_url,
        timeout=config.fleet_api.timeout,
        max_retries=config.fleet_api.max_retries,
        retry_backoff_seconds=config.fleet_api.retry_backoff_seconds,
        device_page_size=config.fleet_api.device_page_size,
        command_page_size=config.fleet_api.command_page_size,
    )

    report_writer = providers.Singleton(
        ExcelReportWriter,
        reports_dir=config.automation.reports_dir,
    )

    # Domain services
    pending_command_analyzer = providers.Factory(
        PendingCommandAnalyzer,
        pending_limit=config.automation.pending_command_limit,
    )

    # Application (use cases)
    send_configuration_commands_use_case = providers.Factory(
        SendConfigurationCommandsUseCase,
        fleet_gateway=fleet_gateway,
        batch_size=config.fleet_api.batch_size,
        batch_delay_seconds=providers.Callable(
            batch_delay_seconds,
            config.fleet_api.batch_size,
            config.fleet_api.request_rate,
        ),
    )

    process_account_use_case = providers.Factory(
        ProcessAccountUseCase,
        fleet_gateway=fleet_gateway,
        report_writer=report_writer,
        command_dispatcher=send_configuration_commands_use_case,
        account_profiles=account_profiles,
        analyzer=pending_command_analyzer,
        device_window_hours=config.automation.device_window_hours,
        pending_window_hours=config.automation.pending_window_hours,
    )

    run_automation_use_case = providers.Factory(
        RunAutomationUseCase,
        process_account=process_account_use_case,
        account_names=providers.Callable(list, account_profiles),
        account_pause_seconds=config.automation.account_pause_seconds,
    )


# -------------------------
# Global Container Instance
# -------------------------
_app_container: AppContainer | None = None


def init_container(settings: AppSettings) -> AppContainer:
    """Initialize global container with application settings."""

    global _app_container

    container = AppContainer()
    container.config.from_pydantic(settings)
    _app_container = container
    logger.info(
        "container.initialized",
        accounts=sorted(settings.accounts),
        environment=settings.environment.value,
    )
    return container


def get_container() -> AppContainer:
    """Get the initialized global container."""

    if _app_container is None:
        raise RuntimeError("Container has not been initialized yet")

    return _app_container
