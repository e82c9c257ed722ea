"""
Automation DTOs - Application Layer

Serializable views of an automation run, returned by the Celery task and
logged by the one-shot runner.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from tracker_guard.domain.entities.automation import AccountRunSummary


class AccountRunSummaryDTO(BaseModel):
    """DTO for the outcome of processing one account."""

    account: str = Field(description="Account name")
    total_devices: int = Field(default=0, description="Devices reported recently")
    deviations: int = Field(default=0, description="Devices with wrong config")
    commands_sent: int = Field(default=0, description="Dispatch results produced")
    report_path: Optional[str] = Field(default=None, description="Generated report")
    error: Optional[str] = Field(default=None, description="Failure message, if any")

    model_config = {
        "json_schema_extra": {
            "example": {
                "account": "PQE_Testing",
                "total_devices": 120,
                "deviations": 7,
                "commands_sent": 5,
                "report_path": "reports/device_report_PQE_Testing_2024.xlsx",
            }
        }
    }

    @classmethod
    def from_entity(cls, summary: AccountRunSummary) -> "AccountRunSummaryDTO":
        return cls(
            account=summary.account,
            total_devices=summary.total_devices,
            deviations=summary.deviations,
            commands_sent=summary.commands_sent,
            report_path=summary.report_path,
            error=summary.error,
        )


class AutomationRunDTO(BaseModel):
    """DTO for a complete automation run over every configured account."""

    started_at: datetime = Field(description="Run start (UTC)")
    finished_at: datetime = Field(description="Run end (UTC)")
    accounts: List[AccountRunSummaryDTO] = Field(
        default_factory=list, description="Per-account summaries"
    )

    @property
    def failed_accounts(self) -> List[str]:
        return [summary.account for summary in self.accounts if summary.error]
