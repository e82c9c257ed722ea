"""Fleet-management API gateway implementation - Infrastructure layer."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, List, Sequence, Tuple

import httpx

from tracker_guard.domain.entities.account import AccountProfile
from tracker_guard.domain.entities.command import CommandState
from tracker_guard.domain.entities.errors import FleetApiError
from tracker_guard.domain.gateways.fleet_gateway import IFleetGateway
from tracker_guard.shared import get_logger

logger = get_logger(__name__)

# Elasticsearch-style aggregations the devices endpoint expects alongside the filter
_DEVICE_AGGREGATIONS: Dict[str, Any] = {
    "query": {"bool": {"must": [], "must_not": []}},
    "aggs": {
        "zoom1": {"geohash_grid": {"field": "last_known_geo", "precision": 1}},
        "on_asset": {
            "filter": {
                "bool": {
                    "must_not": [{"terms": {"asset_name.keyword": ["unallocated"]}}],
                    "must": [{"exists": {"field": "asset_uuid"}}],
                }
            }
        },
        "on_shipment": {
            "filter": {
                "bool": {
                    "must_not": [
                        {"terms": {"shipment_name.keyword": ["unallocated"]}}
                    ],
                    "must": [{"exists": {"field": "shipment_name"}}],
                }
            }
        },
        "nocomm": {"filter": {"terms": {"communication.keyword": ["NONTWK", "NOCOMM"]}}},
        "battery_status_low": {
            "filter": {"terms": {"battery_state.keyword": ["Low", "Drained"]}}
        },
    },
}


class FleetApiGateway(IFleetGateway):
    """HTTP client for the fleet-management API."""

    def __init__(
        self,
        api_key: str,
        devices_url: str,
        command_status_url: str,
        send_commands_url: str,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_backoff_seconds: float = 1.0,
        device_page_size: int = 1000,
        command_page_size: int = 100,
    ):
        """
        Initialize the fleet API gateway.

        Args:
            api_key: Value of the ``apikey`` header
            devices_url: Endpoint listing devices ("bees")
            command_status_url: Endpoint exposing queued commands
            send_commands_url: Endpoint queueing new commands
            timeout: Request timeout in seconds
            max_retries: Attempts per request before giving up
            retry_backoff_seconds: Base delay, multiplied by the attempt number
        """
        self.api_key = api_key
        self.devices_url = devices_url.rstrip("/")
        self.command_status_url = command_status_url.rstrip("/")
        self.send_commands_url = send_commands_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.retry_backoff_seconds = retry_backoff_seconds
        self.device_page_size = device_page_size
        self.command_page_size = command_page_size

    @property
    def _headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json", "apikey": self.api_key}

    async def get_devices(self, profile: AccountProfile) -> List[Dict[str, Any]]:
        params = {
            "$raw": json.dumps(_DEVICE_AGGREGATIONS),
            "$filter": (
                f"device_type eq '{profile.device_type}' and active eq '1' "
                f"and account_name eq '{profile.account_name}'"
            ),
            "$offset": 0,
            "$size": self.device_page_size,
            "$fields": "all",
        }

        logger.info(
            "fleet_api.devices.request",
            url=self.devices_url,
            account=profile.account_name,
            device_type=profile.device_type,
        )

        response = await self._request(
            "GET", self.devices_url, event="fleet_api.devices", params=params
        )
        devices = self._data(response)
        logger.info(
            "fleet_api.devices.response",
            count=len(devices),
            status_code=response.status_code,
        )
        return devices

    async def get_pending_commands(
        self,
        imeis: Sequence[str],
        start_epoch: int,
        end_epoch: int,
    ) -> List[Dict[str, Any]]:
        rbql = self._pending_commands_query(list(imeis), start_epoch, end_epoch)
        params = {"rbql": json.dumps(rbql), "isResellerAdmin": "true"}

        logger.info(
            "fleet_api.pending_commands.request",
            url=self.command_status_url,
            device_count=len(imeis),
            start_epoch=start_epoch,
            end_epoch=end_epoch,
        )

        response = await self._request(
            "GET",
            self.command_status_url,
            event="fleet_api.pending_commands",
            params=params,
        )
        rows = self._data(response)
        logger.info(
            "fleet_api.pending_commands.response",
            count=len(rows),
            status_code=response.status_code,
        )
        return rows

    async def send_commands(
        self, imeis: Sequence[str], command: str
    ) -> Tuple[int, Any]:
        command_data = {
            "protocol": "WIRE",
            "imeis": list(imeis),
            "commands": [command],
            "password": None,
        }
        payload = {"data": json.dumps(command_data)}

        logger.info(
            "fleet_api.send_commands.request",
            url=self.send_commands_url,
            device_count=len(imeis),
            command=command,
        )

        response = await self._request(
            "POST", self.send_commands_url, event="fleet_api.send_commands", json=payload
        )
        try:
            body = response.json()
        except ValueError:
            body = response.text
        return response.status_code, body

    def _pending_commands_query(
        self, imeis: List[str], start_epoch: int, end_epoch: int
    ) -> Dict[str, Any]:
        in_flight = [int(CommandState.PENDING), int(CommandState.SENT)]
        return {
            "pagination": {"page_size": self.command_page_size, "page_num": 1},
            "filters": [
                {"name": "state", "values": in_flight, "op": "in"},
                {"name": "imei", "values": imeis, "op": "in"},
                {"name": "created_date", "op": "gte", "value": start_epoch},
                {"name": "created_date", "op": "lte", "value": end_epoch},
                {"name": "imei", "isNull": False},
                {"name": "imei", "value": " ", "op": "ne"},
                {"name": "state", "values": [int(CommandState.CANCELED)], "op": "ne"},
            ],
            "sort": [{"name": "updated_date", "order": "desc"}],
            "joins": [
                {
                    "join_type": "left_join",
                    "table_name": "bees",
                    "left_table_attribute": "imei",
                    "right_table_attribute": "imei",
                    "fields": [
                        {"name": "bee_number", "readable_key": "Bee Number"},
                        {"name": "device_type", "readable_key": "Device Type"},
                        {"name": "uuid", "readable_key": "Bee UUID"},
                    ],
                    "filters": [{"value": 1, "name": "active", "table_name": "bees"}],
                }
            ],
        }

    async def _request(
        self, method: str, url: str, *, event: str, **kwargs: Any
    ) -> httpx.Response:
        """Send a request, retrying with a linear backoff on failure."""
        last_error = FleetApiError("Fleet API request was not attempted")

        for attempt in range(1, self.max_retries + 1):
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(
                        method, url, headers=self._headers, **kwargs
                    )
                    response.raise_for_status()
                    return response

            except httpx.HTTPStatusError as e:
                logger.error(
                    f"{event}.http_error",
                    attempt=attempt,
                    status_code=e.response.status_code,
                    response_text=e.response.text,
                    url=url,
                )
                last_error = FleetApiError(
                    f"Fleet API returned HTTP {e.response.status_code}: "
                    f"{e.response.text}",
                    status_code=e.response.status_code,
                )

            except httpx.RequestError as e:
                logger.error(
                    f"{event}.request_error", attempt=attempt, error=str(e), url=url
                )
                last_error = FleetApiError(
                    f"Failed to communicate with fleet API: {str(e)}"
                )

            if attempt < self.max_retries:
                await asyncio.sleep(self.retry_backoff_seconds * attempt)

        raise last_error

    @staticmethod
    def _data(response: httpx.Response) -> List[Dict[str, Any]]:
        try:
            payload = response.json()
        except ValueError as e:
            raise FleetApiError(f"Fleet API returned invalid JSON: {str(e)}") from e
        if not isinstance(payload, dict):
            return []
        data = payload.get("data") or []
        return [item for item in data if isinstance(item, dict)]
