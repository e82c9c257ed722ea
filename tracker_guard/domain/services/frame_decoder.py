"""
Frame Decoder - Domain Service

Recovers the ASCII command carried by a command-queue entry. Entries are
either plain commands or hex-encoded protocol frames wrapped in ``7E``
markers. Decoding is best effort: when nothing can be extracted the input is
returned untouched.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Tuple

from tracker_guard.shared import get_logger
from tracker_guard.shared.consts import ENVELOPE_MARKER

logger = get_logger(__name__)

HEADER_LENGTH = 38
TRAILER_LENGTH = 4
MIN_ENVELOPE_LENGTH = HEADER_LENGTH + TRAILER_LENGTH
FALLBACK_MARKER = "F0302"
FALLBACK_SUBHEADER_LENGTH = 6

_PRINTABLE_MIN = 32
_PRINTABLE_MAX = 126

DecodingStrategy = Callable[[str], Optional[str]]


def _byte_values(hex_text: str):
    for index in range(0, len(hex_text), 2):
        pair = hex_text[index : index + 2]
        try:
            yield int(pair, 16)
        except ValueError:
            # Garbage pairs carry no character
            continue


def hex_to_ascii(hex_text: str, null_as_space: bool = False) -> str:
    """
    Decode hex pairs, keeping printable ASCII only.

    Args:
        hex_text: Hex digits, two per byte.
        null_as_space: Render ``00`` bytes as spaces instead of dropping them.
    """
    chars = []
    for value in _byte_values(hex_text):
        if _PRINTABLE_MIN <= value <= _PRINTABLE_MAX:
            chars.append(chr(value))
        elif value == 0 and null_as_space:
            chars.append(" ")
    return "".join(chars).strip()


def is_envelope(frame: str) -> bool:
    return frame.startswith(ENVELOPE_MARKER) and frame.endswith(ENVELOPE_MARKER)


def decode_envelope_payload(frame: str) -> Optional[str]:
    """Fixed layout: 38 header characters, payload, checksum and end marker."""
    if not is_envelope(frame) or len(frame) <= MIN_ENVELOPE_LENGTH:
        return None
    payload = frame[HEADER_LENGTH:-TRAILER_LENGTH]
    return hex_to_ascii(payload, null_as_space=True) or None


def decode_after_marker(frame: str) -> Optional[str]:
    """Locate the command through the ``F0302`` sub-header."""
    if not is_envelope(frame):
        return None
    marker_index = frame.find(FALLBACK_MARKER)
    if marker_index == -1:
        return None
    start = marker_index + FALLBACK_SUBHEADER_LENGTH
    end = len(frame) - TRAILER_LENGTH
    if end <= start:
        return None
    return hex_to_ascii(frame[start:end]) or None


DECODING_STRATEGIES: Tuple[DecodingStrategy, ...] = (
    decode_envelope_payload,
    decode_after_marker,
)


def decode_frame(
    frame: Any,
    strategies: Tuple[DecodingStrategy, ...] = DECODING_STRATEGIES,
) -> Any:
    """
    Return the command carried by ``frame``.

    Strategies are tried in order and the first non-empty result wins.
    Non-string or empty input, and frames no strategy understands, are
    returned unchanged. Never raises.
    """
    if not isinstance(frame, str) or not frame:
        return frame

    for strategy in strategies:
        try:
            command = strategy(frame)
        except Exception as exc:
            logger.debug(
                "frame_decoder.strategy_failed",
                strategy=getattr(strategy, "__name__", repr(strategy)),
                frame=frame,
                error=str(exc),
            )
            continue
        if command:
            logger.debug(
                "frame_decoder.decoded",
                strategy=getattr(strategy, "__name__", repr(strategy)),
                command=command,
            )
            return command

    return frame
