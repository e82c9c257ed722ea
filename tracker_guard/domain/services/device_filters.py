"""Filtering of fleet devices: recent reporters and configuration drift."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from tracker_guard.domain.entities.account import AccountProfile
from tracker_guard.domain.entities.device import (
    ConfigStatus,
    DeviceStatus,
    normalize_device_id,
)

MILLISECONDS_THRESHOLD = 1_000_000_000_000
MIN_VALID_EPOCH = 1_000_000_000
REPORT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_report_time(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime(REPORT_TIME_FORMAT)


def last_report_epoch(device: Mapping[str, Any]) -> Optional[int]:
    """Latest report time of ``device`` in epoch seconds, if usable."""
    timestamp = device.get("last_message_timestamp") or device.get(
        "last_known_timestamp"
    )
    if not timestamp:
        return None
    try:
        timestamp = float(timestamp)
    except (TypeError, ValueError):
        return None
    if timestamp > MILLISECONDS_THRESHOLD:
        timestamp = timestamp // 1000
    return int(timestamp)


def filter_recently_reported(
    devices: Iterable[Mapping[str, Any]],
    now: datetime,
    window_hours: float = 48,
) -> List[Mapping[str, Any]]:
    """Keep devices that reported within the last ``window_hours``."""
    cutoff = int((now - timedelta(hours=window_hours)).timestamp())
    recent = []
    for device in devices:
        timestamp = last_report_epoch(device)
        if timestamp is None or timestamp < MIN_VALID_EPOCH:
            continue
        if timestamp >= cutoff:
            recent.append(device)
    return recent


def check_config_deviations(
    devices: Iterable[Mapping[str, Any]],
    profile: AccountProfile,
    now: datetime,
) -> Tuple[List[DeviceStatus], List[DeviceStatus]]:
    """
    Compare each device's ping frequency with the account profile.

    Returns:
        ``(deviations, all_devices)``; devices without a valid IMEI are
        left out of both lists.
    """
    deviations: List[DeviceStatus] = []
    all_devices: List[DeviceStatus] = []

    for device in devices:
        imei = normalize_device_id(device.get("imei"))
        if not imei:
            continue

        last_reported = "Never"
        hours_since = "N/A"
        timestamp = last_report_epoch(device)
        reported_at: Optional[datetime] = None
        if timestamp and timestamp > 0:
            try:
                reported_at = datetime.fromtimestamp(timestamp, tz=timezone.utc)
            except (OverflowError, OSError, ValueError):
                reported_at = None
        if reported_at is not None:
            hours = (now - reported_at).total_seconds() / 3600
            last_reported = format_report_time(reported_at)
            if hours:
                hours_since = f"{hours:.2f}"

        current = device.get("ping_frequency")
        status = (
            ConfigStatus.WRONG_CONFIG
            if current != profile.ping_frequency
            else ConfigStatus.NORMAL
        )

        entry = DeviceStatus(
            imei=imei,
            device_type=device.get("device_type"),
            last_reported=last_reported,
            hours_since_last_report=hours_since,
            current_ping_frequency=current or "N/A",
            expected_frequency=profile.ping_frequency,
            account=profile.account_name,
            status=status,
        )
        all_devices.append(entry)
        if entry.has_wrong_config:
            deviations.append(entry)

    return deviations, all_devices
