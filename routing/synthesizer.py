"""
Purpose: Route synthesis: turn (start, goal, hazards, mode) into ranked route candidates.
What it does:

- validates the endpoints (the only error the caller ever sees)
- TRANSIT: asks the transit provider; nothing usable -> walking candidates tagged as fallback
- otherwise: one direct query gives FASTEST and RECOMMENDED, then
    COMFORTABLE      detour around every hazard at the mode's comfort radius
    AVOID_OBSTACLE   pedestrian modes, obstacles only
    AVOID_CONGESTION pedestrian modes, congestion zones only
    AVOID_BOTH       pedestrian modes, both sets
    HIGHWAY          driving only, when an expressway entrance is found
- orders the candidates by a fixed per-mode kind order

Rule: provider failures degrade a candidate (is_fallback), they never raise.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Protocol, Sequence

from geo import Point, path_length, require_valid
from hazards import CongestionZone, Obstacle
from .detour import DetourPlanner
from .highway import EntranceFinder, HighwayPlanner
from .models import CandidateKind, ProviderRoute, RouteCandidate, RoutingError, TransitItinerary, TravelMode
from .policy import SynthesisPolicy, default_synthesis_policy
from .route_service import RouteService, RoutingProvider

logger = logging.getLogger(__name__)


class TransitProvider(Protocol):
    def find_itineraries(self, start: Point, goal: Point) -> List[TransitItinerary]:
        ...


PEDESTRIAN_ORDER = (
    CandidateKind.AVOID_BOTH,
    CandidateKind.AVOID_OBSTACLE,
    CandidateKind.AVOID_CONGESTION,
    CandidateKind.RECOMMENDED,
    CandidateKind.COMFORTABLE,
    CandidateKind.FASTEST,
)

VEHICULAR_ORDER = (
    CandidateKind.RECOMMENDED,
    CandidateKind.FASTEST,
    CandidateKind.COMFORTABLE,
    CandidateKind.HIGHWAY,
)


class RouteSynthesizer:
    """
    Produces the candidate list a user picks a route from.

    Usage:
        synth = RouteSynthesizer(OSRMClient(), transit_provider=ODsayTransitClient())
        candidates = synth.synthesize(start, goal, obstacles, zones, TravelMode.WALKING)
    """

    def __init__(
            self,
            provider: RoutingProvider,
            transit_provider: Optional[TransitProvider] = None,
            entrance_finder: Optional[EntranceFinder] = None,
            policy: Optional[SynthesisPolicy] = None,
    ):
        self.policy = policy or default_synthesis_policy()
        self.route_service = RouteService(provider, self.policy)
        self.transit_provider = transit_provider
        self.detours = DetourPlanner(self.route_service, self.policy)
        self.highway = HighwayPlanner(self.route_service, entrance_finder, self.policy)

    def synthesize(
            self,
            start: Point,
            goal: Point,
            obstacles: Sequence[Obstacle] = (),
            congestion_zones: Sequence[CongestionZone] = (),
            mode: TravelMode = TravelMode.WALKING,
    ) -> List[RouteCandidate]:
        """
        Ranked candidates from start to goal.

        Raises:
            InvalidCoordinateError: start or goal is the (0, 0) sentinel or out of range.
        """
        require_valid(start, "start")
        require_valid(goal, "goal")
        obstacles = tuple(obstacles)
        congestion_zones = tuple(congestion_zones)

        if mode.is_transit:
            return self._synthesize_transit(start, goal, obstacles, congestion_zones)

        direct, direct_fallback = self.route_service.route([start, goal], mode)
        if direct_fallback:
            logger.warning(f"Direct {mode.value} route unavailable; using straight-line fallback")

        build = self.route_service.build_candidate
        found: Dict[CandidateKind, RouteCandidate] = {
            CandidateKind.FASTEST: build(CandidateKind.FASTEST, direct, mode, is_fallback=direct_fallback),
            CandidateKind.RECOMMENDED: build(CandidateKind.RECOMMENDED, direct, mode, is_fallback=direct_fallback),
        }

        comfortable = self._detour_candidate(
            CandidateKind.COMFORTABLE, start, goal, mode, direct, direct_fallback,
            obstacles, congestion_zones, self.policy.comfortable_radius_for(mode),
        )
        if mode is TravelMode.DRIVING:
            comfortable.toll_fare = 0.0
        found[CandidateKind.COMFORTABLE] = comfortable

        if mode.is_pedestrian:
            variants = (
                (CandidateKind.AVOID_OBSTACLE, obstacles, (), self.policy.avoid_obstacle_radius_m),
                (CandidateKind.AVOID_CONGESTION, (), congestion_zones, self.policy.avoid_congestion_radius_m),
                (CandidateKind.AVOID_BOTH, obstacles, congestion_zones, self.policy.avoid_both_radius_m),
            )
            for kind, obs, zones, radius in variants:
                found[kind] = self._detour_candidate(kind, start, goal, mode, direct, direct_fallback, obs, zones, radius)

        if mode is TravelMode.DRIVING:
            highway = self.highway.plan(start, goal, found[CandidateKind.FASTEST])
            if highway is not None:
                found[CandidateKind.HIGHWAY] = highway

        order = PEDESTRIAN_ORDER if mode.is_pedestrian else VEHICULAR_ORDER
        return [found[kind] for kind in order if kind in found]

    def _detour_candidate(
            self,
            kind: CandidateKind,
            start: Point,
            goal: Point,
            mode: TravelMode,
            direct: ProviderRoute,
            direct_fallback: bool,
            obstacles: Sequence[Obstacle],
            congestion_zones: Sequence[CongestionZone],
            radius_m: float,
    ) -> RouteCandidate:
        result = self.detours.avoid(start, goal, direct, obstacles, congestion_zones, radius_m, mode)

        if result.queries == 0:
            is_fallback = direct_fallback
        else:
            is_fallback = result.provider_failed
        if result.provider_failed:
            logger.warning(f"{kind.value}: detour query failed; reusing the direct path")
        elif not result.cleared:
            logger.warning(f"{kind.value}: could not clear every hazard within {self.policy.max_detour_iterations} queries")

        return self.route_service.build_candidate(kind, result.route, mode, is_fallback=is_fallback)

    def _synthesize_transit(
            self,
            start: Point,
            goal: Point,
            obstacles: Sequence[Obstacle],
            congestion_zones: Sequence[CongestionZone],
    ) -> List[RouteCandidate]:
        itineraries: List[TransitItinerary] = []
        if self.transit_provider is None:
            logger.warning("No transit provider configured")
        else:
            try:
                itineraries = self.transit_provider.find_itineraries(start, goal)
            except RoutingError as e:
                logger.warning(f"Transit provider failed: {e}")

        if not itineraries:
            logger.info("No transit itinerary; falling back to walking")
            walking = self.synthesize(start, goal, obstacles, congestion_zones, TravelMode.WALKING)
            for candidate in walking:
                candidate.is_fallback = True
            return walking

        return [self._transit_candidate(start, goal, it) for it in itineraries[: self.policy.max_transit_candidates]]

    def _transit_candidate(self, start: Point, goal: Point, itinerary: TransitItinerary) -> RouteCandidate:
        points = list(itinerary.path) or [start, goal]

        distance = itinerary.total_distance_m
        if not distance:
            distance = sum(leg.distance_m for leg in itinerary.legs) or path_length(points)

        return RouteCandidate(
            kind=CandidateKind.TRANSIT,
            points=points,
            distance_m=float(distance),
            eta_minutes=itinerary.total_time_minutes,
            mode=TravelMode.TRANSIT,
            fare=itinerary.fare,
            transfer_count=itinerary.transfer_count,
            transit_legs=list(itinerary.legs),
        )
