from __future__ import annotations

from datetime import datetime, timedelta

from tracker_guard.domain.entities.device import ConfigStatus
from tracker_guard.domain.services.device_filters import (
    check_config_deviations,
    filter_recently_reported,
    format_report_time,
    last_report_epoch,
)


def _epoch(moment: datetime) -> int:
    return int(moment.timestamp())


def test_last_report_epoch_converts_milliseconds(fixed_now: datetime) -> None:
    seconds = _epoch(fixed_now)

    assert last_report_epoch({"last_message_timestamp": seconds * 1000}) == seconds
    assert last_report_epoch({"last_message_timestamp": seconds}) == seconds


def test_last_report_epoch_falls_back_to_known_timestamp() -> None:
    assert last_report_epoch({"last_known_timestamp": "1700000000"}) == 1_700_000_000


def test_last_report_epoch_rejects_missing_or_invalid() -> None:
    assert last_report_epoch({}) is None
    assert last_report_epoch({"last_message_timestamp": "not-a-time"}) is None


def test_filter_recently_reported(fixed_now: datetime) -> None:
    recent = _epoch(fixed_now - timedelta(hours=1))
    devices = [
        {"imei": "a", "last_message_timestamp": recent},
        {"imei": "b", "last_message_timestamp": recent * 1000},
        {"imei": "c", "last_message_timestamp": _epoch(fixed_now - timedelta(hours=49))},
        {"imei": "d"},
        {"imei": "e", "last_message_timestamp": 5_000},
        {"imei": "f", "last_known_timestamp": recent},
    ]

    kept = filter_recently_reported(devices, fixed_now)

    assert [device["imei"] for device in kept] == ["a", "b", "f"]


def test_filter_window_is_configurable(fixed_now: datetime) -> None:
    devices = [{"imei": "a", "last_message_timestamp": _epoch(fixed_now - timedelta(hours=3))}]

    assert filter_recently_reported(devices, fixed_now, window_hours=2) == []
    assert filter_recently_reported(devices, fixed_now, window_hours=4) == devices


def test_check_config_deviations(sample_profile, fixed_now: datetime) -> None:
    reported = _epoch(fixed_now - timedelta(hours=1))
    devices = [
        {
            "imei": "358000000000001",
            "device_type": "BSFlex",
            "ping_frequency": 600,
            "last_message_timestamp": reported,
        },
        {
            "imei": "358000000000002",
            "device_type": "BSFlex",
            "ping_frequency": 300,
            "last_message_timestamp": reported * 1000,
        },
        {"imei": "12345", "ping_frequency": 300},
        {"imei": "358000000000003"},
    ]

    deviations, all_devices = check_config_deviations(devices, sample_profile, fixed_now)

    assert [d.imei for d in all_devices] == [
        "358000000000001",
        "358000000000002",
        "358000000000003",
    ]
    assert [d.imei for d in deviations] == ["358000000000002", "358000000000003"]

    normal = all_devices[0]
    assert normal.status is ConfigStatus.NORMAL
    assert normal.last_reported == "2024-03-01 11:00:00"
    assert normal.hours_since_last_report == "1.00"
    assert normal.expected_frequency == 600
    assert normal.account == "PQE_Testing"

    never = all_devices[2]
    assert never.last_reported == "Never"
    assert never.hours_since_last_report == "N/A"
    assert never.current_ping_frequency == "N/A"
    assert never.has_wrong_config


def test_format_report_time(fixed_now: datetime) -> None:
    assert format_report_time(fixed_now) == "2024-03-01 12:00:00"
