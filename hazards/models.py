"""
Purpose: Domain models for the things a route should steer around.
What it does:
- Obstacle: a fixed nuisance source (e.g. a smoking area) with an influence radius
- CongestionZone: a crowded area with a radius and an ordered Severity
- HazardSnapshot: the read-only per-query set of both

Rule: No conflict detection here (see hazards/conflicts.py). Models only.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Tuple

from geo import Point


class Severity(int, Enum):
    """
    Crowd level of a congestion zone, ordered LIGHT < SEVERE.
    Only drives display and detour aggressiveness, never geometry.
    """
    LIGHT = 1
    MODERATE = 2
    HEAVY = 3
    SEVERE = 4

    @classmethod
    def from_occupancy(cls, percent: float) -> Severity:
        """Map a crowd occupancy percentage (can exceed 100) onto a level."""
        if percent > 100:
            return cls.SEVERE
        if percent >= 76:
            return cls.HEAVY
        if percent >= 51:
            return cls.MODERATE
        return cls.LIGHT

    @property
    def default_radius_m(self) -> float:
        return _DEFAULT_RADIUS_M[self]


_DEFAULT_RADIUS_M = {
    Severity.LIGHT: 100.0,
    Severity.MODERATE: 150.0,
    Severity.HEAVY: 200.0,
    Severity.SEVERE: 300.0,
}


@dataclass(frozen=True)
class Obstacle:
    """A point nuisance source the route should keep clear of."""
    point: Point
    influence_radius_m: float = 50.0


@dataclass(frozen=True)
class CongestionZone:
    """A crowded circular area."""
    point: Point
    radius_m: float
    severity: Severity = Severity.MODERATE

    @classmethod
    def from_severity(cls, point: Point, severity: Severity) -> CongestionZone:
        return cls(point=point, radius_m=severity.default_radius_m, severity=severity)


@dataclass(frozen=True)
class HazardSnapshot:
    """
    Immutable view of the obstacles and congestion zones for one query.
    The caller owns the live data; this module never mutates or fetches it.
    """
    obstacles: Tuple[Obstacle, ...] = field(default_factory=tuple)
    congestion_zones: Tuple[CongestionZone, ...] = field(default_factory=tuple)

    @classmethod
    def of(cls, obstacles: Iterable[Obstacle] = (), congestion_zones: Iterable[CongestionZone] = ()) -> HazardSnapshot:
        return cls(obstacles=tuple(obstacles or ()), congestion_zones=tuple(congestion_zones or ()))

    def obstacles_only(self) -> HazardSnapshot:
        return HazardSnapshot(obstacles=self.obstacles)

    def congestion_only(self) -> HazardSnapshot:
        return HazardSnapshot(congestion_zones=self.congestion_zones)

    @property
    def is_empty(self) -> bool:
        return not self.obstacles and not self.congestion_zones
