"""
Time slots: discrete integer buckets of wall-clock time.

    slot = floor(timestamp_seconds / slot_duration)

Inputs are already in seconds. Converting from milliseconds or other
units is the caller's job (see saferoute.client).
"""

from __future__ import annotations
import math

from saferoute.core.errors import InvalidWindowError


# Seconds per slot. With 1s slots, 5s-15s maps to slots [5, 15).
TIME_SLOT_DURATION = 1


def to_slot(timestamp, slot_duration: int = TIME_SLOT_DURATION) -> int:
    """
    Convert a timestamp in seconds to its slot.

    Raises:
        InvalidWindowError: timestamp is negative (slots are non-negative)
            or not finite
        ValueError: slot_duration is not positive
    """
    if slot_duration <= 0:
        raise ValueError(f"slot_duration must be positive, got {slot_duration}")
    if isinstance(timestamp, float) and not math.isfinite(timestamp):
        raise InvalidWindowError(message=f"Timestamp must be finite, got {timestamp}")
    if timestamp < 0:
        raise InvalidWindowError(message=f"Timestamp must be non-negative, got {timestamp}")
    return int(timestamp // slot_duration)


def slot_window(start_time, end_time, slot_duration: int = TIME_SLOT_DURATION) -> tuple[int, int]:
    """
    Convert a [start_time, end_time) window to (start_slot, end_slot).

    Raises:
        InvalidWindowError: end_slot <= start_slot after conversion
    """
    start_slot = to_slot(start_time, slot_duration)
    end_slot = to_slot(end_time, slot_duration)
    if end_slot <= start_slot:
        raise InvalidWindowError(start_slot, end_slot)
    return start_slot, end_slot


def windows_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """
    Half-open overlap test for [start_a, end_a) and [start_b, end_b).

    Touching windows ([0, 5) and [5, 10)) do not overlap.
    """
    return start_a < end_b and start_b < end_a
