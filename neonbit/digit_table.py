# neonbit/digit_table.py
"""
Digit table and bit-pattern helpers.

Segment patterns are 7-character strings of '0'/'1' labelled a..g from left
to right. Their numeric value is the MSB-first binary interpretation, so the
leftmost segment ('a') carries 2**6 and the rightmost ('g') carries 2**0.
"""
from typing import Any, Dict, List, Optional

from . import constants as const
from .exceptions import OutOfRangeError

_VALID_BITS = frozenset("01")

# Reverse index, built once; the forward table lives in constants.
_PATTERN_TO_DIGIT: Dict[str, int] = {
    pattern: digit for digit, pattern in const.DIGIT_MAPS.items()
}


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_pattern(pattern: str) -> str:
    """
    Checks that `pattern` is a 7-character string over {'0', '1'}.

    Returns:
        The pattern unchanged, for chaining.

    Raises:
        OutOfRangeError: If the length or alphabet is wrong.
    """
    if not isinstance(pattern, str) or len(pattern) != const.SEGMENT_COUNT:
        raise OutOfRangeError(
            f"Segment pattern must be {const.SEGMENT_COUNT} characters long",
            value=pattern,
        )
    if not set(pattern) <= _VALID_BITS:
        raise OutOfRangeError(
            "Segment pattern may only contain '0' and '1'", value=pattern
        )
    return pattern


def lookup(digit: int) -> str:
    """Returns the canonical segment pattern for a decimal digit 0-9."""
    if not _is_int(digit) or not 0 <= digit <= const.MAX_DIGIT:
        raise OutOfRangeError(
            f"Digit must be between 0 and {const.MAX_DIGIT}", value=digit
        )
    return const.DIGIT_MAPS[digit]


def reverse_lookup(pattern: str) -> Optional[int]:
    """Returns the digit drawn by `pattern`, or None if it is not a digit."""
    return _PATTERN_TO_DIGIT.get(pattern)


def to_value(pattern: str) -> int:
    """MSB-first decimal value of a segment pattern (0-127)."""
    return int(validate_pattern(pattern), 2)


def to_pattern(value: int) -> str:
    """7-bit, zero-padded, MSB-first pattern for a register value 0-127."""
    if not _is_int(value) or not 0 <= value <= const.MAX_REGISTER_VALUE:
        raise OutOfRangeError(
            f"Register value must be between 0 and {const.MAX_REGISTER_VALUE}",
            value=value,
        )
    return format(value, f"0{const.SEGMENT_COUNT}b")


def sanitize_bits(raw: str) -> str:
    """
    Normalizes free-form operator text into a segment pattern.

    Every character that is not '0' or '1' is dropped, the remainder is
    truncated to the first 7 characters and right-padded with '0'.

    >>> sanitize_bits("10xx1")
    '1010000'
    """
    cleaned = "".join(ch for ch in raw if ch in _VALID_BITS)
    return cleaned[: const.SEGMENT_COUNT].ljust(const.SEGMENT_COUNT, "0")


def truth_table() -> List[Dict[str, Any]]:
    """Rows of the 0-9 truth table: digit, binary pattern and raw hex value."""
    return [
        {
            "digit": digit,
            "binary": pattern,
            "raw": f"0x{int(pattern, 2):X}",
        }
        for digit, pattern in sorted(const.DIGIT_MAPS.items())
    ]
