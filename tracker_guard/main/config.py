"""
Application Settings - Main Layer

Use Pydantic Settings for configuration management.
Values come from environment variables, a ``.env`` file and the
defaults below.
"""

from typing import Dict, Optional

from pydantic import AliasChoices, BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from tracker_guard.shared import EnumEnvironment, EnumLogLevel
from tracker_guard.shared.env import load_secret_file_variables  # noqa: F401


class CelerySettings(BaseSettings):
    """Celery configuration settings."""

    broker_url: str = Field(
        default="redis://redis:6379/0",
        description="Message broker URL",
        alias="CELERY_BROKER_URL",
    )
    result_backend_url: str = Field(
        default="redis://redis:6379/1",
        description="Result backend URL",
        alias="CELERY_RESULT_BACKEND",
    )

    model_config = SettingsConfigDict(
        env_prefix="CELERY_", case_sensitive=False, extra="ignore"
    )


class FleetApiSettings(BaseSettings):
    """Fleet-management API configuration settings."""

    api_key: str = Field(
        default="",
        description="API key sent in the apikey header",
        validation_alias=AliasChoices("FLEET_API_KEY", "API_KEY"),
    )
    devices_url: str = Field(
        default="https://view-staging.decklar.com/services/v2/bees",
        description="Devices (bees) endpoint",
    )
    command_status_url: str = Field(
        default="https://view-staging.decklar.com/services/v2/autocrud/bee_commands",
        description="Command status endpoint",
    )
    send_commands_url: str = Field(
        default="https://view-staging.decklar.com/services/command/send_commands",
        description="Command sending endpoint",
    )
    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    max_retries: int = Field(default=3, description="Attempts per request")
    retry_backoff_seconds: float = Field(
        default=1.0, description="Base delay between attempts (linear backoff)"
    )
    batch_size: int = Field(default=400, description="Devices per send request")
    request_rate: int = Field(
        default=4, description="Send requests per second budget"
    )
    device_page_size: int = Field(default=1000, description="Devices per query")
    command_page_size: int = Field(
        default=100, description="Command rows per status query"
    )

    model_config = SettingsConfigDict(
        env_prefix="FLEET_", case_sensitive=False, extra="ignore"
    )

    @property
    def batch_delay_seconds(self) -> float:
        return batch_delay_seconds(self.batch_size, self.request_rate)


def batch_delay_seconds(batch_size: int, request_rate: int) -> float:
    """Pause between send batches: ``batch_size / request_rate`` milliseconds."""
    return batch_size / max(request_rate, 1) / 1000


class AutomationSettings(BaseSettings):
    """Automation behaviour settings."""

    device_window_hours: float = Field(
        default=48, description="Only devices that reported within this window"
    )
    pending_window_hours: float = Field(
        default=24, description="Age limit of queued commands taken into account"
    )
    pending_command_limit: int = Field(
        default=4, description="Queued commands at which a device is skipped"
    )
    account_pause_seconds: float = Field(
        default=5.0, description="Pause between two accounts"
    )
    reports_dir: str = Field(default="reports", description="Report output folder")
    schedule: str = Field(
        default="0 * * * *",
        description="Cron expression (min hour dom month dow) for the beat schedule",
    )

    model_config = SettingsConfigDict(
        env_prefix="AUTOMATION_", case_sensitive=False, extra="ignore"
    )


class AccountProfileSettings(BaseModel):
    """Expected configuration for the devices of one account."""

    device_type: str
    ping_frequency: int
    account_name: str
    profile_command: str


def _default_accounts() -> Dict[str, AccountProfileSettings]:
    return {
        "PQE_Testing": AccountProfileSettings(
            device_type="BSFlex",
            ping_frequency=600,
            account_name="PQE_Testing",
            profile_command="AT+TIMEGAP=0,600,1,600 & AT+SAMPLEMODE=0,0",
        )
    }


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    level: EnumLogLevel = Field(default=EnumLogLevel.INFO, description="Logging level")
    file_path: Optional[str] = Field(
        default=None, description="Log file path (if None, logs to console)"
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_", case_sensitive=False, extra="ignore"
    )


class AppSettings(BaseSettings):
    """Main application settings, aggregating all sub-settings."""

    environment: EnumEnvironment = Field(
        default=EnumEnvironment.DEVELOPMENT, description="Application environment"
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    celery: CelerySettings = Field(default_factory=CelerySettings)
    fleet_api: FleetApiSettings = Field(default_factory=FleetApiSettings)
    automation: AutomationSettings = Field(default_factory=AutomationSettings)
    accounts: Dict[str, AccountProfileSettings] = Field(
        default_factory=_default_accounts,
        description="Account profiles keyed by account name (JSON in ACCOUNTS)",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
    )


def get_settings() -> AppSettings:
    """
    Get application settings instance Factory.

    Kept as a function so tests can patch it.
    """
    return AppSettings()
