import math
from typing import List, Sequence

import pytest

from geo import Point, haversine_distance, interpolate_linear, path_length
from hazards import Obstacle
from routing import CandidateKind, ProviderRoute, RouteCandidate, RoutingError, TransitError, TravelMode


class FakeRoutingProvider:
    """
    Deterministic stand-in for OSRM: straight legs between waypoints,
    one vertex roughly every 25 m. Records every call.
    """
    def __init__(self, failing_profiles: Sequence[str] = ()):
        self.failing_profiles = set(failing_profiles)
        self.calls: List[tuple] = []

    def route(self, waypoints: Sequence[Point], profile: str) -> ProviderRoute:
        self.calls.append((list(waypoints), profile))
        if profile in self.failing_profiles:
            raise RoutingError(f"profile {profile} unavailable")

        path: List[Point] = [waypoints[0]]
        for a, b in zip(waypoints, waypoints[1:]):
            steps = max(1, math.ceil(haversine_distance(a, b) / 25.0))
            path.extend(interpolate_linear(a, b, steps)[1:])
        return ProviderRoute(path=path)

    @property
    def profiles(self) -> List[str]:
        return [profile for _, profile in self.calls]


class DownRoutingProvider:
    """Every query fails, like an unreachable OSRM."""
    def __init__(self):
        self.calls = 0

    def route(self, waypoints, profile):
        self.calls += 1
        raise RoutingError("connection refused")


class FakeTransitProvider:
    def __init__(self, itineraries=None, error: bool = False):
        self.itineraries = itineraries or []
        self.error = error
        self.calls = 0

    def find_itineraries(self, start, goal):
        self.calls += 1
        if self.error:
            raise TransitError("transit service timed out")
        return list(self.itineraries)


class FakeEntranceFinder:
    def __init__(self, entrances):
        self.entrances = list(entrances)

    def find_entrances(self, near, radius_m):
        return list(self.entrances)


class RecordingRequester:
    """Collects reroute requests instead of routing them."""
    def __init__(self):
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    def raise_for_status(self):
        return None


def min_distance_to(points, center: Point) -> float:
    return min(haversine_distance(p, center) for p in points)


@pytest.fixture
def start():
    return Point(37.50, 127.00)


@pytest.fixture
def goal():
    return Point(37.51, 127.01)


@pytest.fixture
def midpoint_obstacle():
    return Obstacle(Point(37.505, 127.005), influence_radius_m=100.0)


@pytest.fixture
def provider():
    return FakeRoutingProvider()


@pytest.fixture
def east_route():
    """Straight walking route along lat 37.5, about 1.76 km long."""
    points = interpolate_linear(Point(37.5, 127.00), Point(37.5, 127.02), 40)
    distance = path_length(points)
    return RouteCandidate(
        kind=CandidateKind.RECOMMENDED,
        points=points,
        distance_m=distance,
        eta_minutes=distance / 67.0,
        mode=TravelMode.WALKING,
    )
