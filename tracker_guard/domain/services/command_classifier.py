"""
Command classification and comparison.

Interval commands (``AT+TIMEGAP=...``) set the reporting cadence of a
tracker. Two of them are equivalent when their parameter lists are the same
strings, in the same order; no numeric normalisation is applied.
"""

from __future__ import annotations

import re
from typing import Any, List, Optional

from tracker_guard.domain.entities.command import Verdict
from tracker_guard.shared.consts import INTERVAL_DIRECTIVE

_INTERVAL_PARAMS = re.compile(re.escape(INTERVAL_DIRECTIVE) + r"=([^&]+)", re.IGNORECASE)


def is_interval_command(command: Any) -> bool:
    if not isinstance(command, str) or not command:
        return False
    return INTERVAL_DIRECTIVE in command.strip().upper()


def extract_interval_params(command: str) -> Optional[List[str]]:
    """Parameters between ``AT+TIMEGAP=`` and the next ``&``, trimmed."""
    match = _INTERVAL_PARAMS.search(command)
    if not match or not match.group(1):
        return None
    return [param.strip() for param in match.group(1).split(",")]


def are_interval_commands_equivalent(first: Any, second: Any) -> bool:
    if not is_interval_command(first) or not is_interval_command(second):
        return False

    first_params = extract_interval_params(first)
    second_params = extract_interval_params(second)
    if first_params is None or second_params is None:
        return False
    return first_params == second_params


def compare_commands(existing: Any, candidate: Any) -> Verdict:
    """Classify ``existing`` against ``candidate``; first matching rule wins."""
    if existing == candidate:
        return Verdict.EXACT_MATCH

    if is_interval_command(existing) and is_interval_command(candidate):
        if are_interval_commands_equivalent(existing, candidate):
            return Verdict.EQUIVALENT_INTERVAL
        return Verdict.DIFFERENT_INTERVAL

    return Verdict.DIFFERENT_COMMAND
