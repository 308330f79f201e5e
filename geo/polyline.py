"""
Purpose: Map-matching primitives on a route polyline.
What it does:
- project_onto_polyline: closest point on a polyline to a position (O(n), no index)
- distance_along: metres travelled along the polyline between two projections
- distance_to_end: metres left from a projection to the last vertex

Each segment is flattened into a local equirectangular frame centred on the
query point. At route scale (a few km) the error is far below GPS noise.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from .geodesy import EARTH_RADIUS_M, _wrap_longitude, haversine_distance
from .models import Point


@dataclass(frozen=True)
class Projection:
    """
    Result of snapping a position onto a polyline.

    segment_index is the index of the segment's first vertex; fraction is the
    position inside that segment in [0, 1].
    """
    point: Point
    distance_m: float
    segment_index: int
    fraction: float


def project_onto_polyline(point: Point, polyline: Sequence[Point]) -> Projection:
    """
    Closest point on the polyline and the perpendicular distance to it.

    Ties keep the earliest segment so results are stable along the route.
    """
    if not polyline:
        raise ValueError("cannot project onto an empty polyline")

    if len(polyline) == 1:
        only = polyline[0]
        return Projection(point=only, distance_m=haversine_distance(point, only), segment_index=0, fraction=0.0)

    metres_per_rad = EARTH_RADIUS_M
    cos_lat = math.cos(math.radians(point.lat))

    best: Projection = None
    for index in range(len(polyline) - 1):
        a = polyline[index]
        b = polyline[index + 1]

        # offsets in degrees relative to the query point
        a_dlat = a.lat - point.lat
        a_dlng = _wrap_longitude(a.lng - point.lng)
        b_dlat = b.lat - point.lat
        b_dlng = _wrap_longitude(b.lng - point.lng)

        ax = math.radians(a_dlng) * cos_lat * metres_per_rad
        ay = math.radians(a_dlat) * metres_per_rad
        bx = math.radians(b_dlng) * cos_lat * metres_per_rad
        by = math.radians(b_dlat) * metres_per_rad

        seg_x = bx - ax
        seg_y = by - ay
        seg_len_sq = seg_x * seg_x + seg_y * seg_y

        if seg_len_sq == 0.0:
            fraction = 0.0
        else:
            fraction = -(ax * seg_x + ay * seg_y) / seg_len_sq
            fraction = min(1.0, max(0.0, fraction))

        if fraction == 0.0:
            snapped = a
        elif fraction == 1.0:
            snapped = b
        else:
            snapped = Point(
                lat=point.lat + a_dlat + (b_dlat - a_dlat) * fraction,
                lng=_wrap_longitude(point.lng + a_dlng + (b_dlng - a_dlng) * fraction),
            )

        distance = haversine_distance(point, snapped)
        if best is None or distance < best.distance_m:
            best = Projection(point=snapped, distance_m=distance, segment_index=index, fraction=fraction)

    return best


def distance_along(polyline: Sequence[Point], start: Projection, end: Projection) -> float:
    """
    Metres along the polyline from start to end.

    Returns 0.0 when end lies behind start.
    """
    if (end.segment_index, end.fraction) <= (start.segment_index, start.fraction):
        return 0.0

    if end.segment_index == start.segment_index:
        return haversine_distance(start.point, end.point)

    total = haversine_distance(start.point, polyline[start.segment_index + 1])
    for index in range(start.segment_index + 1, end.segment_index):
        total += haversine_distance(polyline[index], polyline[index + 1])
    total += haversine_distance(polyline[end.segment_index], end.point)
    return total


def distance_to_end(polyline: Sequence[Point], start: Projection) -> float:
    """Metres left from a projection to the final vertex."""
    if len(polyline) < 2:
        return haversine_distance(start.point, polyline[-1]) if polyline else 0.0

    last = Projection(
        point=polyline[-1],
        distance_m=0.0,
        segment_index=len(polyline) - 2,
        fraction=1.0,
    )
    return distance_along(polyline, start, last)
