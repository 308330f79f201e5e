"""
Purpose: Highway candidate for driving routes.
What it does:

- asks an EntranceFinder for expressway entrances near the start
- picks the entrance with the lowest weighted score
      score = approach_weight * d(start, e) + d(e, goal)
  (approaching is penalised so an entrance behind the driver loses)
- skips entrances that end up further from the goal than the start plus slack
- routes [start, entrance, goal] and drops the result if it is much longer than FASTEST
- estimates the toll from the distance driven after the entrance

Rule: a missing finder, an empty search or a failed query means "no highway candidate",
never an error.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Sequence

from geo import Point, haversine_distance
from .eta_service import estimate_toll_fare
from .models import CandidateKind, RouteCandidate, RoutingError, TravelMode
from .policy import SynthesisPolicy
from .route_service import RouteService

logger = logging.getLogger(__name__)


class EntranceFinder(Protocol):
    def find_entrances(self, near: Point, radius_m: float) -> List[Point]:
        ...


def best_highway_entrance(
        start: Point,
        goal: Point,
        entrances: Sequence[Point],
        approach_weight: float = 1.8,
        slack_m: float = 2000.0,
) -> Optional[Point]:
    """
    Lowest-score entrance, or None if every entrance leads away from the goal.
    Ties keep the first entrance in the given order.
    """
    direct = haversine_distance(start, goal)
    best: Optional[Point] = None
    best_score = float("inf")

    for e in entrances:
        to_goal = haversine_distance(e, goal)
        if to_goal > direct + slack_m:
            continue
        score = approach_weight * haversine_distance(start, e) + to_goal
        if score < best_score:
            best, best_score = e, score
    return best


class HighwayPlanner:
    """
    Builds the optional HIGHWAY candidate.

    Usage:
        planner = HighwayPlanner(route_service, KakaoEntranceFinder(), policy)
        candidate = planner.plan(start, goal, fastest)
    """

    def __init__(self, route_service: RouteService, finder: Optional[EntranceFinder], policy: SynthesisPolicy):
        self.route_service = route_service
        self.finder = finder
        self.policy = policy

    def plan(self, start: Point, goal: Point, fastest: RouteCandidate) -> Optional[RouteCandidate]:
        if self.finder is None:
            return None

        try:
            entrances = self.finder.find_entrances(start, self.policy.highway_search_radius_m)
        except RoutingError as e:
            logger.warning(f"Highway entrance search failed: {e}")
            return None

        entrance = best_highway_entrance(
            start,
            goal,
            entrances,
            approach_weight=self.policy.highway_approach_weight,
            slack_m=self.policy.highway_entrance_slack_m,
        )
        if entrance is None:
            logger.debug(f"No usable highway entrance among {len(entrances)} found")
            return None

        routed = self.route_service.try_route([start, entrance, goal], TravelMode.DRIVING)
        if routed is None:
            logger.warning(f"Highway route via {entrance} unavailable")
            return None

        candidate = self.route_service.build_candidate(CandidateKind.HIGHWAY, routed, TravelMode.DRIVING)
        limit = fastest.distance_m * self.policy.highway_max_distance_ratio
        if candidate.distance_m > limit:
            logger.info(f"Highway route discarded: {candidate.distance_m:.0f} m > {limit:.0f} m")
            return None

        highway_m = max(0.0, candidate.distance_m - haversine_distance(start, entrance))
        candidate.toll_fare = estimate_toll_fare(highway_m, self.policy)
        return candidate
