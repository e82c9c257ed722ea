"""Domain entities for account configuration profiles."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping


@dataclass(frozen=True, slots=True)
class AccountProfile:
    """Expected reporting configuration for every device of an account."""

    account_name: str
    device_type: str
    ping_frequency: int
    profile_command: str

    @classmethod
    def from_mapping(cls, name: str, data: Mapping[str, Any]) -> "AccountProfile":
        return cls(
            account_name=str(data.get("account_name") or name),
            device_type=str(data.get("device_type", "")),
            ping_frequency=int(data.get("ping_frequency", 0)),
            profile_command=str(data.get("profile_command", "")),
        )


def build_account_profiles(
    accounts: Mapping[str, Mapping[str, Any]] | None,
) -> Dict[str, AccountProfile]:
    """Turn the ``accounts`` settings section into domain profiles."""
    if not accounts:
        return {}
    return {
        name: AccountProfile.from_mapping(name, data) for name, data in accounts.items()
    }
