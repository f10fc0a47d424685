"""
Caller-side adapters.

Helpers for code that collects submissions from people or other
systems: time-unit normalisation, car id parsing and path conversion
from decimal degrees to fixed-point coordinates.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from numbers import Integral, Real
import math
from typing import Any, Iterable, Mapping

from saferoute.core.errors import InvalidCarIdError
from saferoute.core.geometry import Coordinate, scale, unscale

# Timestamps above this are taken to be milliseconds.
MILLISECOND_THRESHOLD = 1e12


@dataclass(frozen=True)
class GeoPoint:
    """A (latitude, longitude) pair in decimal degrees."""

    latitude: float
    longitude: float

    @classmethod
    def from_coordinate(cls, coordinate: Coordinate) -> GeoPoint:
        return cls(unscale(coordinate.latitude), unscale(coordinate.longitude))

    def to_coordinate(self) -> Coordinate:
        return Coordinate(scale(self.latitude), scale(self.longitude))


def timestamp_to_seconds(timestamp) -> int:
    """
    Normalise a timestamp to whole seconds.

    Values above 1e12 are milliseconds (epoch ms passed 1e12 in 2001,
    epoch seconds will not reach it for millennia).
    """
    if isinstance(timestamp, bool) or not isinstance(timestamp, (Real, Decimal)):
        raise TypeError(f"Timestamp must be a number, got {type(timestamp).__name__}")
    if timestamp > MILLISECOND_THRESHOLD:
        return math.floor(timestamp / 1000)
    return math.floor(timestamp)


def parse_car_id(value) -> int:
    """
    Parse a car id from an int or a decimal string.

    Raises:
        InvalidCarIdError: not a non-negative integer
    """
    if isinstance(value, bool):
        raise InvalidCarIdError(value)
    if isinstance(value, Integral):
        car_id = int(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text.isdigit():
            raise InvalidCarIdError(value)
        car_id = int(text, 10)
    else:
        raise InvalidCarIdError(value)
    if car_id < 0:
        raise InvalidCarIdError(value)
    return car_id


def to_geo_point(point: Any) -> GeoPoint:
    """
    Accept a GeoPoint, a Coordinate, a (lat, lon) pair or a mapping with
    "latitude" / "longitude" keys.
    """
    if isinstance(point, GeoPoint):
        return point
    if isinstance(point, Coordinate):
        return GeoPoint.from_coordinate(point)
    if isinstance(point, Mapping):
        try:
            return GeoPoint(point["latitude"], point["longitude"])
        except KeyError as e:
            raise ValueError(f"Point mapping is missing {e.args[0]!r}") from e
    try:
        latitude, longitude = point
    except (TypeError, ValueError) as e:
        raise ValueError(f"Cannot interpret {point!r} as a (latitude, longitude) point") from e
    return GeoPoint(latitude, longitude)


def format_path(points: Iterable[Any]) -> tuple[Coordinate, ...]:
    """Convert decimal-degree points to fixed-point coordinates, keeping order."""
    path = []
    for point in points:
        if isinstance(point, Coordinate):
            path.append(point)
        else:
            path.append(to_geo_point(point).to_coordinate())
    return tuple(path)
