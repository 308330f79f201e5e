from enum import Enum
from typing import Optional, Tuple

from geo import haversine_distance
from .policy import TrackingPolicy


class TrackingState(str, Enum):
    ON_ROUTE = "on_route"
    OFF_ROUTE_PENDING = "off_route_pending"
    OFF_ROUTE_CONFIRMED = "off_route_confirmed"


class TrackingStateError(Exception):
    """Raised when a tracking transition is attempted without an active session."""
    pass


def smoothed_speed(previous_estimate: float, previous_fix, fix, policy: TrackingPolicy) -> float:
    """
    Blend the speed implied by two consecutive fixes into the running estimate.
    A non-positive time delta leaves the estimate unchanged.
    """
    if previous_fix is None:
        return previous_estimate

    dt_s = (fix.timestamp_ms - previous_fix.timestamp_ms) / 1000.0
    if dt_s <= 0:
        return previous_estimate

    raw = haversine_distance(previous_fix.point, fix.point) / dt_s
    w = policy.speed_smoothing
    return w * previous_estimate + (1.0 - w) * raw


def off_route_threshold(speed_mps: float, policy: TrackingPolicy) -> float:
    """
    max(30, speed * 3) with the default policy.
    """
    return max(policy.min_off_route_threshold_m, speed_mps * policy.threshold_speed_factor_s)


def evaluate_breach(
        breaches: int,
        distance_m: float,
        threshold_m: float,
        policy: TrackingPolicy,
) -> Tuple[int, Optional[bool]]:
    """
    Advance the consecutive-breach counter for one fix.

    Returns (new_breach_count, off_route_update):
    - (0, False)   within threshold: back on route
    - (n, None)    breach n of debounce_count: off_route unchanged
    - (0, True)    debounce reached: departure confirmed, counter reset
    """
    if distance_m <= threshold_m:
        return 0, False

    breaches += 1
    if breaches >= policy.debounce_count:
        return 0, True
    return breaches, None
