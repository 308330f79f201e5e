"""
Purpose: Decide whether a candidate path runs through a hazard, and where to push it.
What it does:
- first_conflict: earliest hazard hit along a path, scanning in path order
- detour_anchor: a crude "go around this point" waypoint hint

Typical use (routing/detour.py):
    conflict = first_conflict(path, obstacles, zones, detection_radius_m=100)
    if conflict:
        anchor = detour_anchor(conflict.center, delta_deg=0.003)
        # re-query the routing provider with [start, anchor, goal]

Rule: Deterministic. Same inputs always give the same conflict and anchor.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from geo import Point, haversine_distance
from .models import CongestionZone, Obstacle

Hazard = Union[Obstacle, CongestionZone]

# attempt -> (lat sign, lng sign)
_ANCHOR_QUADRANTS: List[Tuple[int, int]] = [(1, 1), (1, -1), (-1, 1), (-1, -1)]


@dataclass(frozen=True)
class Conflict:
    """
    The first hazard a path runs into.
    sample_index is the index into the path of the sample that hit it.
    """
    hazard: Hazard
    sample_index: int
    sample_point: Point

    @property
    def center(self) -> Point:
        return self.hazard.point

    @property
    def is_obstacle(self) -> bool:
        return isinstance(self.hazard, Obstacle)


def _sample_indices(path_length: int, stride: int) -> List[int]:
    indices = list(range(0, path_length, stride))
    # always test the final point so short tails are not skipped
    if path_length and indices[-1] != path_length - 1:
        indices.append(path_length - 1)
    return indices


def first_conflict(
        path: Sequence[Point],
        obstacles: Sequence[Obstacle],
        congestion_zones: Sequence[CongestionZone],
        detection_radius_m: float,
        *,
        stride: int = 5,
) -> Optional[Conflict]:
    """
    Scan a path every `stride` points and return the first hazard hit.

    Containment rules:
      - obstacle: distance < max(detection_radius_m, obstacle.influence_radius_m)
      - congestion zone: distance < detection_radius_m + zone.radius_m

    At each sample obstacles are tested before zones, and within each set the
    caller's order is kept, so the result is stable for identical input.
    """
    if stride < 1:
        raise ValueError("stride must be >= 1")
    if not path or (not obstacles and not congestion_zones):
        return None

    for index in _sample_indices(len(path), stride):
        sample = path[index]

        for obstacle in obstacles:
            limit = max(detection_radius_m, obstacle.influence_radius_m)
            if haversine_distance(sample, obstacle.point) < limit:
                return Conflict(hazard=obstacle, sample_index=index, sample_point=sample)

        for zone in congestion_zones:
            if haversine_distance(sample, zone.point) < detection_radius_m + zone.radius_m:
                return Conflict(hazard=zone, sample_index=index, sample_point=sample)

    return None


def detour_anchor(center: Point, delta_deg: float = 0.003, attempt: int = 0) -> Point:
    """
    Waypoint offset from a hazard centre by a fixed lat/lng delta (~300 m at 0.003).

    `attempt` rotates through the four diagonal quadrants so a caller whose
    first anchor did not clear the hazard can try the next side. The anchor
    itself is not checked against other hazards.
    """
    lat_sign, lng_sign = _ANCHOR_QUADRANTS[attempt % len(_ANCHOR_QUADRANTS)]
    return Point(
        lat=center.lat + lat_sign * delta_deg,
        lng=center.lng + lng_sign * delta_deg,
    )


def anchor_attempts() -> int:
    """How many distinct anchors detour_anchor can produce for one hazard."""
    return len(_ANCHOR_QUADRANTS)
