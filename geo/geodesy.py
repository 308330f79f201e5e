"""
Purpose: Pure spherical-earth helpers.
What it does:
- haversine_distance: great-circle distance in metres
- initial_bearing: forward azimuth in [0, 360)
- destination_point: point reached by travelling a distance along a bearing
- interpolate_linear: evenly spaced lat/lng blend (fallback paths + animation)
- path_length: total length of a polyline

Rule: No side effects, no imports from routing/tracking.
"""
from __future__ import annotations

import math
from typing import List, Sequence

from .models import Point

EARTH_RADIUS_M = 6_371_000.0


def _wrap_longitude(lng: float) -> float:
    """Normalise a longitude into [-180, 180)."""
    return (lng + 540.0) % 360.0 - 180.0


def haversine_distance(a: Point, b: Point) -> float:
    """
    Great-circle distance between two points in metres.

    Symmetric, and exactly 0.0 for identical points.
    """
    d_lat = math.radians(b.lat - a.lat)
    d_lng = math.radians(_wrap_longitude(b.lng - a.lng))
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(a.lat))
        * math.cos(math.radians(b.lat))
        * math.sin(d_lng / 2) ** 2
    )
    # rounding can push h a hair above 1 for antipodal points
    h = min(1.0, max(0.0, h))
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def initial_bearing(a: Point, b: Point) -> float:
    """
    Forward azimuth from a to b in degrees [0, 360).

    Coincident points (and the poles) give a finite, deterministic answer:
    atan2(0, 0) is 0.0 in Python, so no NaN can leak out.
    """
    rlat1 = math.radians(a.lat)
    rlat2 = math.radians(b.lat)
    d_lng = math.radians(_wrap_longitude(b.lng - a.lng))
    y = math.sin(d_lng) * math.cos(rlat2)
    x = math.cos(rlat1) * math.sin(rlat2) - math.sin(rlat1) * math.cos(rlat2) * math.cos(d_lng)
    bearing = (math.degrees(math.atan2(y, x)) + 360.0) % 360.0
    # -0.0 and 360.0 both collapse to 0.0
    return 0.0 if bearing >= 360.0 or bearing == 0.0 else bearing


def destination_point(origin: Point, distance_m: float, bearing_deg: float) -> Point:
    """
    Great-circle destination reached from origin after distance_m on bearing_deg.
    """
    if distance_m == 0:
        return origin

    delta = distance_m / EARTH_RADIUS_M
    theta = math.radians(bearing_deg)
    phi1 = math.radians(origin.lat)
    lambda1 = math.radians(origin.lng)

    sin_phi2 = math.sin(phi1) * math.cos(delta) + math.cos(phi1) * math.sin(delta) * math.cos(theta)
    phi2 = math.asin(min(1.0, max(-1.0, sin_phi2)))
    lambda2 = lambda1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(phi1),
        math.cos(delta) - math.sin(phi1) * math.sin(phi2),
    )
    return Point(lat=math.degrees(phi2), lng=_wrap_longitude(math.degrees(lambda2)))


def interpolate_linear(start: Point, end: Point, steps: int) -> List[Point]:
    """
    steps + 1 evenly spaced points from start to end (both included).

    Linear blending of lat/lng, not geodesic. Good enough for short segments;
    used for straight-line fallback routes and display animation.
    """
    if steps < 1:
        raise ValueError("steps must be >= 1")

    points: List[Point] = []
    for i in range(steps + 1):
        ratio = i / steps
        points.append(
            Point(
                lat=start.lat + (end.lat - start.lat) * ratio,
                lng=start.lng + (end.lng - start.lng) * ratio,
            )
        )
    # pin the last point so callers can compare it to `end` exactly
    points[-1] = end
    return points


def path_length(points: Sequence[Point]) -> float:
    """Sum of consecutive great-circle distances in metres."""
    total = 0.0
    for i in range(len(points) - 1):
        total += haversine_distance(points[i], points[i + 1])
    return total
