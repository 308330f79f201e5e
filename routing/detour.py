"""
Purpose: Iterative detour injection around hazards.
What it does:

Given a base route and a hazard set, repeatedly:

- finds the first conflict along the current path (hazards.first_conflict)

- turns it into a detour anchor (hazards.detour_anchor)

- re-queries the routing provider with [start, anchors..., goal]

until the path is clear or the iteration budget runs out.

Anchor rules:

- anchors for different hazards accumulate, ordered by distance from start

- if the new path still hits the same hazard, that hazard's anchor moves to the
  next diagonal quadrant instead of piling up

Rule: Detour planning decides waypoints; it does not name or rank candidates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from geo import Point, haversine_distance
from hazards import CongestionZone, Hazard, Obstacle, anchor_attempts, detour_anchor, first_conflict
from .models import ProviderRoute, TravelMode
from .policy import SynthesisPolicy
from .route_service import RouteService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetourResult:
    """
    Output of a detour search.

    route is the base route when no conflict was found or the provider failed.
    """
    route: ProviderRoute
    anchors: List[Point] = field(default_factory=list)
    cleared: bool = True
    provider_failed: bool = False
    queries: int = 0

    @property
    def detoured(self) -> bool:
        return bool(self.anchors)


class DetourPlanner:
    """
    Pushes a route off the hazards it runs through by injecting waypoints.
    """

    def __init__(self, route_service: RouteService, policy: SynthesisPolicy):
        self.route_service = route_service
        self.policy = policy

    def _conflict(self, path, obstacles, congestion_zones, radius_m):
        return first_conflict(
            path,
            obstacles,
            congestion_zones,
            radius_m,
            stride=self.policy.conflict_sample_stride,
        )

    def avoid(
            self,
            start: Point,
            goal: Point,
            base: ProviderRoute,
            obstacles: Sequence[Obstacle],
            congestion_zones: Sequence[CongestionZone],
            detection_radius_m: float,
            mode: TravelMode,
    ) -> DetourResult:
        """
        Detour `base` around the given hazards.

        Returns:
            DetourResult with the best route found. cleared=False means the
            budget ran out with a conflict still on the path.
        """
        conflict = self._conflict(base.path, obstacles, congestion_zones, detection_radius_m)
        if conflict is None:
            return DetourResult(route=base)

        delta = self.policy.anchor_delta_for(mode)
        anchors: Dict[Hazard, Point] = {}
        tried: Dict[Hazard, int] = {}
        best: Optional[ProviderRoute] = None
        queries = 0

        for _ in range(self.policy.max_detour_iterations):
            hazard = conflict.hazard
            attempt = tried.get(hazard, 0)
            if attempt >= anchor_attempts():
                logger.warning(f"All detour anchors around {hazard.point} still conflict; giving up")
                break
            tried[hazard] = attempt + 1
            anchors[hazard] = detour_anchor(hazard.point, delta_deg=delta, attempt=attempt)

            # keep the anchors in travel order so the route does not zig-zag
            ordered = sorted(anchors.values(), key=lambda p: haversine_distance(start, p))
            routed = self.route_service.try_route([start, *ordered, goal], mode)
            queries += 1

            if routed is None:
                if best is None:
                    return DetourResult(route=base, cleared=False, provider_failed=True, queries=queries)
                break

            best = routed
            conflict = self._conflict(routed.path, obstacles, congestion_zones, detection_radius_m)
            if conflict is None:
                return DetourResult(route=routed, anchors=ordered, cleared=True, queries=queries)

        logger.warning(f"Detour budget exhausted after {queries} queries; route still crosses a hazard")
        return DetourResult(
            route=best or base,
            anchors=sorted(anchors.values(), key=lambda p: haversine_distance(start, p)),
            cleared=False,
            queries=queries,
        )
