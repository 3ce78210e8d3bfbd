from __future__ import annotations
import math

FOURTEEN_BIT_MAX = 16383


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _is_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def normalize_unit_value(value, use_raw: bool = False, default: float = 0.5) -> int:
    """Return a 7-bit value for an optional expressive parameter (velocity, pressure).

    With ``use_raw`` the input is an integer 0-127, otherwise a float 0-1 scaled
    by 127. Invalid input never raises: it falls back to ``default`` (a unit
    value, so 0.5 gives 64).
    """
    if _is_number(value):
        if use_raw:
            if 0 <= value <= 127:
                return int(math.floor(value))
        elif 0 <= value <= 1:
            return round_half_up(value * 127)
    return round_half_up(default * 127)


def validate_byte(value, name: str, low: int = 0, high: int = 127) -> int:
    """Floor a mandatory numeric argument and check it against [low, high]."""
    if not _is_number(value) or math.isinf(value):
        raise ValueError(f"{name} must be a number between {low} and {high}, got {value!r}")
    value = int(math.floor(value))
    if not (low <= value <= high):
        raise ValueError(f"{name} must be between {low} and {high}, got {value}")
    return value


def split_fourteen_bit(value: float) -> tuple[int, int]:
    """Map a value in [-1, 1] onto 0-16383 and return (msb, lsb)."""
    if not _is_number(value) or not (-1 <= value <= 1):
        raise ValueError(f"14-bit value must be between -1.0 and 1.0, got {value!r}")
    level = round_half_up((value + 1) / 2 * FOURTEEN_BIT_MAX)
    return (level >> 7) & 0x7F, level & 0x7F


def merge_fourteen_bit(msb: int, lsb: int) -> int:
    return ((msb & 0x7F) << 7) | (lsb & 0x7F)
