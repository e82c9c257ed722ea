"""
Domain Services Package

Pure, synchronous business rules: frame decoding, command comparison,
pending-command analysis and device filtering.
"""

from .command_classifier import (
    are_interval_commands_equivalent,
    compare_commands,
    extract_interval_params,
    is_interval_command,
)
from .device_filters import check_config_deviations, filter_recently_reported
from .frame_decoder import DECODING_STRATEGIES, decode_frame
from .pending_command_analyzer import (
    SUPPRESSION_RULES,
    PendingCommandAnalyzer,
    SuppressionRule,
)

__all__ = [
    "DECODING_STRATEGIES",
    "SUPPRESSION_RULES",
    "PendingCommandAnalyzer",
    "SuppressionRule",
    "are_interval_commands_equivalent",
    "check_config_deviations",
    "compare_commands",
    "decode_frame",
    "extract_interval_params",
    "filter_recently_reported",
    "is_interval_command",
]
