"""
Use Cases Package - Application Layer

Use cases orchestrate the gateways, the domain services and the report
writer to carry out one automation pass.
"""

from .account_automation_use_case import ProcessAccountUseCase, RunAutomationUseCase
from .command_dispatch_use_case import SendConfigurationCommandsUseCase

__all__ = [
    "ProcessAccountUseCase",
    "RunAutomationUseCase",
    "SendConfigurationCommandsUseCase",
]
