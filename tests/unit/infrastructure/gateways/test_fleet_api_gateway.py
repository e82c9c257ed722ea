from __future__ import annotations

import json
from typing import Any, List, Optional

import httpx
import pytest

from tracker_guard.domain.entities.account import AccountProfile
from tracker_guard.domain.entities.errors import FleetApiError
from tracker_guard.infrastructure.gateways.fleet_api_gateway import FleetApiGateway

_MISSING = object()


class _StubResponse:
    def __init__(self, status_code: int, json_data: Any = _MISSING, text: str = ""):
        self.status_code = status_code
        self._json = json_data
        self.text = text

    def json(self) -> Any:
        if self._json is _MISSING:
            raise ValueError("no json")
        return self._json

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            request = httpx.Request("GET", "http://fleet/api")
            response = httpx.Response(self.status_code, request=request, text="error")
            raise httpx.HTTPStatusError("error", request=request, response=response)


class _StubAsyncClient:
    """Replays ``outcomes`` in order: responses are returned, exceptions raised."""

    def __init__(self, outcomes: List[Any]):
        self._outcomes = outcomes
        self.calls: List[dict] = []

    async def __aenter__(self) -> "_StubAsyncClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def request(self, method: str, url: str, headers: dict, **kwargs):
        self.calls.append({"method": method, "url": url, "headers": headers, **kwargs})
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _gateway(max_retries: int = 3) -> FleetApiGateway:
    return FleetApiGateway(
        api_key="secret",
        devices_url="http://fleet/bees/",
        command_status_url="http://fleet/commands/status",
        send_commands_url="http://fleet/commands/send",
        max_retries=max_retries,
        retry_backoff_seconds=0,
    )


def _install(monkeypatch, outcomes: List[Any]) -> _StubAsyncClient:
    client = _StubAsyncClient(outcomes)
    monkeypatch.setattr("httpx.AsyncClient", lambda timeout: client)
    return client


@pytest.fixture()
def profile() -> AccountProfile:
    return AccountProfile("PQE_Testing", "BSFlex", 600, "AT+TIMEGAP=0,600,1,600")


@pytest.mark.asyncio
async def test_get_devices_success(monkeypatch, profile: AccountProfile) -> None:
    client = _install(
        monkeypatch,
        [_StubResponse(200, {"data": [{"imei": "358000000000001"}, "junk"]})],
    )

    devices = await _gateway().get_devices(profile)

    assert devices == [{"imei": "358000000000001"}]
    call = client.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "http://fleet/bees"
    assert call["headers"] == {"Content-Type": "application/json", "apikey": "secret"}
    params = call["params"]
    assert params["$size"] == 1000
    assert "device_type eq 'BSFlex'" in params["$filter"]
    assert "account_name eq 'PQE_Testing'" in params["$filter"]
    assert "aggs" in json.loads(params["$raw"])


@pytest.mark.asyncio
async def test_get_devices_without_data_returns_empty(
    monkeypatch, profile: AccountProfile
) -> None:
    _install(monkeypatch, [_StubResponse(200, {"total": 0})])

    assert await _gateway().get_devices(profile) == []


@pytest.mark.asyncio
async def test_get_devices_invalid_json(monkeypatch, profile: AccountProfile) -> None:
    _install(monkeypatch, [_StubResponse(200)])

    with pytest.raises(FleetApiError) as exc:
        await _gateway().get_devices(profile)

    assert "invalid JSON" in str(exc.value)


@pytest.mark.asyncio
async def test_get_pending_commands_builds_query(monkeypatch) -> None:
    client = _install(
        monkeypatch,
        [_StubResponse(200, {"data": [{"imei": "358000000000001", "state": 0}]})],
    )

    rows = await _gateway().get_pending_commands(["358000000000001"], 100, 200)

    assert rows == [{"imei": "358000000000001", "state": 0}]
    params = client.calls[0]["params"]
    assert params["isResellerAdmin"] == "true"
    query = json.loads(params["rbql"])
    filters = {(f["name"], f.get("op")): f for f in query["filters"]}
    assert filters[("state", "in")]["values"] == [0, 1]
    assert filters[("imei", "in")]["values"] == ["358000000000001"]
    assert filters[("created_date", "gte")]["value"] == 100
    assert filters[("created_date", "lte")]["value"] == 200
    assert query["pagination"] == {"page_size": 100, "page_num": 1}


@pytest.mark.asyncio
async def test_send_commands_payload(monkeypatch) -> None:
    client = _install(monkeypatch, [_StubResponse(200, {"status": "queued"})])

    status, body = await _gateway().send_commands(["1", "2"], "AT+X")

    assert (status, body) == (200, {"status": "queued"})
    call = client.calls[0]
    assert call["method"] == "POST"
    assert json.loads(call["json"]["data"]) == {
        "protocol": "WIRE",
        "imeis": ["1", "2"],
        "commands": ["AT+X"],
        "password": None,
    }


@pytest.mark.asyncio
async def test_send_commands_text_body(monkeypatch) -> None:
    _install(monkeypatch, [_StubResponse(202, text="accepted")])

    assert await _gateway().send_commands(["1"], "AT+X") == (202, "accepted")


@pytest.mark.asyncio
async def test_retries_then_succeeds(monkeypatch, profile: AccountProfile) -> None:
    client = _install(
        monkeypatch,
        [
            httpx.RequestError("boom"),
            _StubResponse(503),
            _StubResponse(200, {"data": []}),
        ],
    )

    assert await _gateway().get_devices(profile) == []
    assert len(client.calls) == 3


@pytest.mark.asyncio
async def test_http_error_after_retries(monkeypatch, profile: AccountProfile) -> None:
    client = _install(monkeypatch, [_StubResponse(500)] * 2)

    with pytest.raises(FleetApiError) as exc:
        await _gateway(max_retries=2).get_devices(profile)

    assert "HTTP 500" in str(exc.value)
    assert exc.value.status_code == 500
    assert len(client.calls) == 2


@pytest.mark.asyncio
async def test_request_error_after_retries(monkeypatch) -> None:
    _install(monkeypatch, [httpx.RequestError("boom")])

    with pytest.raises(FleetApiError) as exc:
        await _gateway(max_retries=1).send_commands(["1"], "AT+X")

    assert "Failed to communicate" in str(exc.value)


@pytest.mark.asyncio
async def test_backoff_grows_with_attempts(monkeypatch, profile: AccountProfile) -> None:
    delays: List[Optional[float]] = []

    async def _sleep(seconds: float) -> None:
        delays.append(seconds)

    monkeypatch.setattr("asyncio.sleep", _sleep)
    _install(monkeypatch, [httpx.RequestError("boom")] * 3)
    gateway = _gateway()
    gateway.retry_backoff_seconds = 1.5

    with pytest.raises(FleetApiError):
        await gateway.get_devices(profile)

    assert delays == [1.5, 3.0]


@pytest.mark.asyncio
async def test_last_failure_is_raised(monkeypatch, profile: AccountProfile) -> None:
    client = _install(monkeypatch, [httpx.RequestError("boom"), _StubResponse(502)])

    with pytest.raises(FleetApiError) as exc:
        await _gateway(max_retries=2).get_devices(profile)

    assert exc.value.status_code == 502
    assert len(client.calls) == 2


@pytest.mark.asyncio
async def test_non_positive_retry_count_still_attempts_once(
    monkeypatch, profile: AccountProfile
) -> None:
    client = _install(monkeypatch, [_StubResponse(500)])

    with pytest.raises(FleetApiError) as exc:
        await _gateway(max_retries=0).get_devices(profile)

    assert "HTTP 500" in str(exc.value)
    assert len(client.calls) == 1
