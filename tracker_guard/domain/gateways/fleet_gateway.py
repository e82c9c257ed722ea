"""
Fleet Gateway Interface - Domain Layer

This module defines the interface for communicating with the
fleet-management API (devices, command status and command sending).
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence, Tuple

from tracker_guard.domain.entities.account import AccountProfile


class IFleetGateway(ABC):
    """Interface for the fleet-management API."""

    @abstractmethod
    async def get_devices(self, profile: AccountProfile) -> List[Dict[str, Any]]:
        """
        Retrieve the active devices of an account.

        Args:
            profile: Account whose device type and name scope the query

        Returns:
            Raw device documents as returned by the API

        Raises:
            FleetApiError: If communication with the API fails
        """
        pass

    @abstractmethod
    async def get_pending_commands(
        self,
        imeis: Sequence[str],
        start_epoch: int,
        end_epoch: int,
    ) -> List[Dict[str, Any]]:
        """
        Retrieve in-flight command rows for the given devices.

        Rows are ordered by last update, most recent first.
        """
        pass

    @abstractmethod
    async def send_commands(
        self, imeis: Sequence[str], command: str
    ) -> Tuple[int, Any]:
        """Queue ``command`` for every device in ``imeis``; return status and body."""
        pass
