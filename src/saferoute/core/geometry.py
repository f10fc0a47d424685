"""
Fixed-point geometry.

Coordinates are stored as integers: decimal degrees × SCALE. All
distance arithmetic is integer-only so that every implementation
reaches the same admit/reject decision, bit for bit.

Rounding rule for scale(): round half away from zero, applied to the
exact decimal value of the input (not to its binary float product).
    scale(0.0000005)  ==  1
    scale(-0.0000005) == -1
    scale(40.0000015) == 40000002

unscale() is a lossy inverse: unscale(scale(v)) is within 0.5 / SCALE
degrees of v. That loss is accepted.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, localcontext
from numbers import Integral
from typing import Sequence

import numpy as np


SCALE = 1_000_000

# |component| < 2**30 keeps dx*dx + dy*dy below 2**63, i.e. safe in int64.
# That is ~1073 degrees, far beyond any real latitude/longitude.
INT64_SAFE_LIMIT = 2 ** 30

_SCALE_DECIMAL = Decimal(SCALE)


@dataclass(frozen=True)
class Coordinate:
    """A (latitude, longitude) pair in fixed-point units."""

    latitude: int
    longitude: int

    @classmethod
    def from_degrees(cls, latitude, longitude) -> Coordinate:
        """Build a coordinate from decimal degrees."""
        return cls(scale(latitude), scale(longitude))

    def to_degrees(self) -> tuple[float, float]:
        """Return (latitude, longitude) in decimal degrees."""
        return unscale(self.latitude), unscale(self.longitude)


def scale(value) -> int:
    """
    Convert decimal degrees to fixed-point units.

    Accepts int, float, str or Decimal. Floats are converted through
    their shortest repr, so 40.001 scales to exactly 40001000.

    Raises:
        ValueError: for NaN or infinite input
    """
    if isinstance(value, Integral):
        return int(value) * SCALE
    if isinstance(value, Decimal):
        exact = value
    else:
        exact = Decimal(str(value))
    if not exact.is_finite():
        raise ValueError(f"Cannot scale non-finite value {value!r}")
    with localcontext() as ctx:
        # Enough digits to hold every integer digit of the scaled value
        ctx.prec = max(ctx.prec, exact.adjusted() + 16)
        return int((exact * _SCALE_DECIMAL).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def unscale(value: int) -> float:
    """Convert fixed-point units back to decimal degrees (lossy)."""
    return int(value) / SCALE


def isqrt(n: int) -> int:
    """
    floor(sqrt(n)) using integer Newton iteration.

    Starts from x = n and iterates x' = (x + n // x) // 2. The sequence
    decreases strictly until it reaches floor(sqrt(n)), so the loop
    stops the first time an iterate fails to decrease.
    """
    n = int(n)
    if n < 0:
        raise ValueError("isqrt() argument must be non-negative")
    if n < 2:
        return n

    x = n
    y = (x + 1) // 2
    while y < x:
        x = y
        y = (x + n // x) // 2
    return x


def squared_distance(a: Coordinate, b: Coordinate) -> int:
    """dx² + dy² in fixed-point units squared."""
    dx = a.latitude - b.latitude
    dy = a.longitude - b.longitude
    return dx * dx + dy * dy


def distance(a: Coordinate, b: Coordinate) -> int:
    """Euclidean distance in fixed-point units, floored."""
    return isqrt(squared_distance(a, b))


def as_fixed_array(coords: Sequence[Coordinate]) -> np.ndarray:
    """
    Stack coordinates into an [n, 2] integer array.

    Uses int64 when every component is below INT64_SAFE_LIMIT in
    magnitude, otherwise falls back to Python integers (dtype=object) so
    squared distances can never overflow.
    """
    rows = [(c.latitude, c.longitude) for c in coords]
    if all(abs(lat) < INT64_SAFE_LIMIT and abs(lon) < INT64_SAFE_LIMIT for lat, lon in rows):
        arr = np.array(rows, dtype=np.int64).reshape(-1, 2)
    else:
        arr = np.empty((len(rows), 2), dtype=object)
        for i, (lat, lon) in enumerate(rows):
            arr[i, 0] = int(lat)
            arr[i, 1] = int(lon)
    return arr


def pairwise_squared_distances(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """
    Squared distances between every row of a and every row of b.

    Args:
        a: [n, 2] fixed-point array
        b: [m, 2] fixed-point array

    Returns:
        [n, m] array of dx² + dy²
    """
    if a.dtype != b.dtype:
        a = a.astype(object)
        b = b.astype(object)
    dx = a[:, 0][:, None] - b[:, 0][None, :]
    dy = a[:, 1][:, None] - b[:, 1][None, :]
    return dx * dx + dy * dy
