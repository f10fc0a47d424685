"""Unit tests for time slots."""

import pytest

from saferoute.core.errors import InvalidWindowError
from saferoute.core.time_slots import TIME_SLOT_DURATION, slot_window, to_slot, windows_overlap


class TestToSlot:
    """Tests for timestamp → slot conversion."""

    def test_default_duration(self):
        assert TIME_SLOT_DURATION == 1
        assert to_slot(5) == 5
        assert to_slot(15) == 15

    def test_floor_division(self):
        assert to_slot(59, 60) == 0
        assert to_slot(60, 60) == 1
        assert to_slot(119, 60) == 1

    def test_float_timestamps_floor(self):
        assert to_slot(9.99) == 9

    def test_negative_timestamp_raises(self):
        with pytest.raises(InvalidWindowError):
            to_slot(-1)

    @pytest.mark.parametrize("timestamp", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_timestamp_raises(self, timestamp):
        with pytest.raises(InvalidWindowError):
            to_slot(timestamp)

    def test_non_finite_window_raises(self):
        with pytest.raises(InvalidWindowError):
            slot_window(0, float("inf"))

    def test_bad_duration_raises(self):
        with pytest.raises(ValueError):
            to_slot(10, 0)


class TestSlotWindow:
    """Tests for window conversion and validation."""

    def test_valid_window(self):
        assert slot_window(0, 10) == (0, 10)
        assert slot_window(5, 15) == (5, 15)

    def test_equal_slots_raise(self):
        with pytest.raises(InvalidWindowError):
            slot_window(10, 10)

    def test_reversed_window_raises(self):
        with pytest.raises(InvalidWindowError) as exc:
            slot_window(20, 10)
        assert exc.value.start_slot == 20
        assert exc.value.end_slot == 10

    def test_window_collapsing_into_one_slot_raises(self):
        # Distinct seconds, same 60s slot
        with pytest.raises(InvalidWindowError):
            slot_window(0, 59, 60)

    def test_invalid_window_is_value_error(self):
        with pytest.raises(ValueError):
            slot_window(3, 1)


class TestWindowsOverlap:
    """Tests for half-open overlap."""

    def test_touching_windows_do_not_overlap(self):
        assert windows_overlap(5, 10, 0, 5) is False
        assert windows_overlap(0, 5, 5, 10) is False

    def test_partial_overlap(self):
        assert windows_overlap(5, 15, 0, 10) is True

    def test_containment(self):
        assert windows_overlap(2, 3, 0, 10) is True
        assert windows_overlap(0, 10, 2, 3) is True

    def test_disjoint(self):
        assert windows_overlap(20, 30, 0, 10) is False
