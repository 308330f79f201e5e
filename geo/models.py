"""
Purpose: The coordinate type used across the navigation engine.
What it does:
- Defines Point (lat, lng in WGS84 degrees).
- Defines the "no data" sentinel rule: (0, 0) is never a real position.
- Provides require_valid() so callers reject bad input before any network call.

Rule: No distance math here. Models and validation only.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple


class InvalidCoordinateError(ValueError):
    """Raised when a coordinate is the (0, 0) sentinel, non-finite or out of range."""
    pass


@dataclass(frozen=True)
class Point:
    """
    Immutable WGS84 coordinate in decimal degrees.
    """
    lat: float
    lng: float

    @property
    def is_sentinel(self) -> bool:
        # GPS sources report (0, 0) when they have no fix yet
        return self.lat == 0 and self.lng == 0

    def as_lnglat(self) -> Tuple[float, float]:
        """(lng, lat) order, as OSRM and GeoJSON expect."""
        return (self.lng, self.lat)

    @classmethod
    def from_lnglat(cls, pair) -> Point:
        return cls(lat=float(pair[1]), lng=float(pair[0]))


def require_valid(point: Point, label: str = "point") -> Point:
    """
    Reject the sentinel and anything a routing service could not use.

    Returns the point unchanged so it can be used inline.
    """
    if point is None:
        raise InvalidCoordinateError(f"{label} is missing")
    if not (math.isfinite(point.lat) and math.isfinite(point.lng)):
        raise InvalidCoordinateError(f"{label} has non-finite coordinates: {point}")
    if point.is_sentinel:
        raise InvalidCoordinateError(f"{label} is the (0, 0) no-data sentinel")
    if not (-90.0 <= point.lat <= 90.0) or not (-180.0 <= point.lng <= 180.0):
        raise InvalidCoordinateError(f"{label} is out of range: {point}")
    return point
