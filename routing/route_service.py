#Purpose: Route computation for downstream use.
#Returns one actual route (geometry + steps) needed by:
#route synthesis (direct path, detour re-queries)
#rerouting while navigating (a lighter single-path query)
#Wraps whichever RoutingProvider is injected (OSRMClient by default) and owns the
#degradation rule: a failed or empty provider answer becomes a straight-line fallback.
#It's the "I need an actual route" module, while synthesizer.py is "I need ranked options".

import logging
from typing import List, Optional, Protocol, Sequence, Tuple

from geo import Point, interpolate_linear, path_length
from .eta_service import estimate_eta_minutes
from .models import CandidateKind, ProviderRoute, RouteCandidate, RoutingError, TravelMode
from .policy import SynthesisPolicy, default_synthesis_policy

logger = logging.getLogger(__name__)


class RoutingProvider(Protocol):
    """
    Anything that can route through an ordered list of waypoints.
    Must raise RoutingError (or a subclass) on failure.
    """
    def route(self, waypoints: Sequence[Point], profile: str) -> ProviderRoute:
        ...


class RouteService:
    """
    Single-path routing with graceful degradation.

    Usage:
        service = RouteService(OSRMClient())
        route, is_fallback = service.route([start, goal], TravelMode.WALKING)
    """

    def __init__(self, provider: RoutingProvider, policy: Optional[SynthesisPolicy] = None):
        self.provider = provider
        self.policy = policy or default_synthesis_policy()

    def try_route(self, waypoints: Sequence[Point], mode: TravelMode) -> Optional[ProviderRoute]:
        """
        Ask the provider once (twice for cycling) and return None instead of raising.
        """
        result = self._query(waypoints, self.policy.profile_for(mode))
        if result is None and mode is TravelMode.CYCLING:
            # bike profiles are missing on many OSRM deployments; the road network is close enough
            logger.info("Cycling route unavailable, retrying with the driving profile")
            result = self._query(waypoints, self.policy.profile_for(TravelMode.DRIVING))
        return result

    def _query(self, waypoints: Sequence[Point], profile: str) -> Optional[ProviderRoute]:
        try:
            result = self.provider.route(list(waypoints), profile)
        except RoutingError as e:
            logger.warning(f"Routing provider failed ({profile}, {len(waypoints)} waypoints): {e}")
            return None

        if not result.path:
            logger.warning(f"Routing provider returned an empty path ({profile})")
            return None
        return result

    def fallback_route(self, start: Point, goal: Point) -> ProviderRoute:
        """Straight-line interpolation used when the provider cannot help."""
        return ProviderRoute(path=interpolate_linear(start, goal, self.policy.fallback_interpolation_steps))

    def route(self, waypoints: Sequence[Point], mode: TravelMode) -> Tuple[ProviderRoute, bool]:
        """
        Route through the waypoints, degrading to a straight start→goal line.

        Returns:
            (route, is_fallback)
        """
        result = self.try_route(waypoints, mode)
        if result is not None:
            return result, False
        return self.fallback_route(waypoints[0], waypoints[-1]), True

    def build_candidate(
            self,
            kind: CandidateKind,
            route: ProviderRoute,
            mode: TravelMode,
            *,
            is_fallback: bool = False,
            toll_fare: Optional[float] = None,
    ) -> RouteCandidate:
        """
        Wrap a provider route as a RouteCandidate with distance and ETA filled in.
        """
        points: List[Point] = list(route.path)
        distance = path_length(points)
        return RouteCandidate(
            kind=kind,
            points=points,
            distance_m=distance,
            eta_minutes=estimate_eta_minutes(distance, mode, self.policy),
            mode=mode,
            is_fallback=is_fallback,
            steps=list(route.steps),
            toll_fare=toll_fare,
        )

    def route_candidate(
            self,
            start: Point,
            goal: Point,
            mode: TravelMode,
            kind: CandidateKind = CandidateKind.RECOMMENDED,
    ) -> RouteCandidate:
        """
        One direct candidate from start to goal. Used for rerouting.

        The road provider cannot plan transit, so a transit request gets a
        walking candidate tagged as fallback, like synthesis does.
        """
        if mode.is_transit:
            route, _ = self.route([start, goal], TravelMode.WALKING)
            return self.build_candidate(kind, route, TravelMode.WALKING, is_fallback=True)

        route, is_fallback = self.route([start, goal], mode)
        return self.build_candidate(kind, route, mode, is_fallback=is_fallback)
