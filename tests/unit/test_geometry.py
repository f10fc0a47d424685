"""Unit tests for fixed-point geometry."""

from decimal import Decimal
import math

import numpy as np
import pytest

from saferoute.core.geometry import (
    SCALE,
    Coordinate,
    as_fixed_array,
    distance,
    isqrt,
    pairwise_squared_distances,
    scale,
    unscale,
)


class TestScale:
    """Tests for decimal → fixed-point conversion."""

    def test_scale_simple(self):
        assert scale(40.0) == 40_000_000
        assert scale(-74.0) == -74_000_000
        assert scale(0) == 0

    def test_scale_uses_exact_decimal(self):
        # 40.001 * 1e6 in binary floating point is 40000999.99999999...
        assert scale(40.001) == 40_001_000
        assert scale(-74.001) == -74_001_000

    def test_ties_round_away_from_zero(self):
        assert scale(0.0000005) == 1
        assert scale(-0.0000005) == -1
        assert scale("40.0000015") == 40_000_002
        assert scale("-40.0000015") == -40_000_002

    def test_below_half_rounds_toward_zero(self):
        assert scale("0.0000004999") == 0
        assert scale("-0.0000004999") == 0

    def test_accepts_decimal_and_str(self):
        assert scale(Decimal("12.3456789")) == 12_345_679
        assert scale("12.3456784") == 12_345_678

    def test_integers_are_exact(self):
        assert scale(180) == 180 * SCALE

    def test_non_finite_raises(self):
        with pytest.raises(ValueError):
            scale(float("nan"))
        with pytest.raises(ValueError):
            scale(float("inf"))


class TestUnscale:
    """Tests for fixed-point → decimal conversion."""

    def test_unscale(self):
        assert unscale(40_000_000) == 40.0
        assert unscale(-74_001_000) == -74.001

    @pytest.mark.parametrize("value", [40.0, -74.001, 0.1234565, -0.0000005, 89.9999994, 179.123456789])
    def test_round_trip_within_half_unit(self, value):
        assert abs(unscale(scale(value)) - value) <= 0.5 / SCALE + 1e-12


class TestIsqrt:
    """Tests for the integer Newton square root."""

    def test_small_values(self):
        assert [isqrt(n) for n in range(10)] == [0, 1, 1, 1, 2, 2, 2, 2, 2, 3]

    def test_perfect_squares(self):
        for root in (10, 100, 12345, 10 ** 9):
            assert isqrt(root * root) == root
            assert isqrt(root * root - 1) == root - 1

    def test_matches_floor_sqrt(self):
        rng = np.random.default_rng(seed=42)
        for n in rng.integers(0, 2 ** 62, size=200):
            assert isqrt(int(n)) == math.isqrt(int(n))

    def test_large_values(self):
        n = 2 ** 200 + 12345
        assert isqrt(n) == math.isqrt(n)

    def test_negative_raises(self):
        with pytest.raises(ValueError):
            isqrt(-1)


class TestDistance:
    """Tests for fixed-point Euclidean distance."""

    def test_zero_distance(self):
        a = Coordinate(40_000_000, -74_000_000)
        assert distance(a, a) == 0

    def test_pythagorean(self):
        a = Coordinate(0, 0)
        b = Coordinate(60, 80)
        assert distance(a, b) == 100
        assert distance(b, a) == 100

    def test_floors_result(self):
        a = Coordinate(0, 0)
        b = Coordinate(1, 1)  # sqrt(2)
        assert distance(a, b) == 1

    def test_no_overflow_for_extreme_coordinates(self):
        a = Coordinate(scale(90), scale(180))
        b = Coordinate(scale(-90), scale(-180))
        expected = math.isqrt((180 * SCALE) ** 2 + (360 * SCALE) ** 2)
        assert distance(a, b) == expected


class TestCoordinate:
    """Tests for the Coordinate value type."""

    def test_from_degrees(self):
        c = Coordinate.from_degrees(40.001, -74.001)
        assert c == Coordinate(40_001_000, -74_001_000)

    def test_to_degrees(self):
        assert Coordinate(40_001_000, -74_001_000).to_degrees() == (40.001, -74.001)

    def test_immutable(self):
        c = Coordinate(1, 2)
        with pytest.raises(AttributeError):
            c.latitude = 5


class TestArrays:
    """Tests for the vectorised helpers."""

    def test_as_fixed_array_int64(self):
        arr = as_fixed_array([Coordinate(1, 2), Coordinate(3, 4)])
        assert arr.dtype == np.int64
        assert arr.shape == (2, 2)

    def test_as_fixed_array_empty(self):
        assert as_fixed_array([]).shape == (0, 2)

    def test_as_fixed_array_falls_back_for_huge_values(self):
        arr = as_fixed_array([Coordinate(2 ** 40, 0)])
        assert arr.dtype == object
        assert arr[0, 0] == 2 ** 40

    def test_pairwise_squared_distances(self):
        a = as_fixed_array([Coordinate(0, 0), Coordinate(3, 4)])
        b = as_fixed_array([Coordinate(0, 0), Coordinate(6, 8), Coordinate(0, 1)])
        d2 = pairwise_squared_distances(a, b)
        assert d2.shape == (2, 3)
        assert d2.tolist() == [[0, 100, 1], [25, 25, 18]]

    def test_pairwise_huge_values_exact(self):
        big = 2 ** 40
        a = as_fixed_array([Coordinate(big, 0)])
        b = as_fixed_array([Coordinate(-big, 0)])
        assert pairwise_squared_distances(a, b)[0, 0] == (2 * big) ** 2
