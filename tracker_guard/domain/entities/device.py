"""Domain entities for tracker devices reported by the fleet API."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from tracker_guard.shared.consts import MIN_DEVICE_ID_DIGITS

_NON_DIGITS = re.compile(r"\D")


def normalize_device_id(raw: Any) -> Optional[str]:
    """
    Reduce a raw IMEI to its digits.

    Returns:
        The digits-only identifier, or None when fewer than
        ``MIN_DEVICE_ID_DIGITS`` digits remain.
    """
    if not isinstance(raw, str):
        raw = str(raw)
    digits = _NON_DIGITS.sub("", raw)
    return digits if len(digits) >= MIN_DEVICE_ID_DIGITS else None


class ConfigStatus(str, Enum):
    """Configuration state of a device compared to its account profile."""

    NORMAL = "Normal"
    WRONG_CONFIG = "Wrong Config"


@dataclass(slots=True)
class DeviceStatus:
    """One line of the device status report."""

    imei: str
    device_type: Optional[str]
    last_reported: str
    hours_since_last_report: str
    current_ping_frequency: Union[int, str]
    expected_frequency: int
    account: str
    status: ConfigStatus

    @property
    def has_wrong_config(self) -> bool:
        return self.status == ConfigStatus.WRONG_CONFIG
