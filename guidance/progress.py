#Purpose: Progress numbers shown during navigation (distance left, minutes left, arrival clock time).

from datetime import datetime, timedelta

from geo import Projection, distance_to_end
from routing import RouteCandidate, estimate_remaining_minutes


def remaining_distance(route: RouteCandidate, projection: Projection) -> float:
    return distance_to_end(route.points, projection)


def remaining_minutes(route: RouteCandidate, remaining_m: float) -> int:
    """Route ETA scaled by the share of the route still ahead, rounded up."""
    return estimate_remaining_minutes(route.eta_minutes, route.distance_m, remaining_m)


def arrival_time(now: datetime, minutes: float) -> datetime:
    return now + timedelta(minutes=minutes)
