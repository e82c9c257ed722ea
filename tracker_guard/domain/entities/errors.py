"""
Domain Errors

This module defines custom error classes for domain-specific exceptions.
"""

from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base class for domain errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class AccountProfileNotFoundError(DomainError):
    """Raised when no configuration profile exists for an account."""

    def __init__(self, account_name: str, details: Optional[Dict[str, Any]] = None):
        message = f"No profile found for account: {account_name}"
        super().__init__(message, details)


class FleetApiError(DomainError):
    """Raised when the fleet-management API cannot be reached or rejects a call."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.status_code = status_code
        super().__init__(message, details)
