#Purpose: ETA and fare estimation policy.
#Converts routing outputs into the numbers shown next to each candidate:
#route ETA: distance / fixed per-mode average speed
#remaining ETA while navigating: scale the route ETA by the share of distance left
#toll estimate for highway candidates when the provider does not price them
#Keeps ETA logic separate from route computation.

import math

from .models import TravelMode
from .policy import SynthesisPolicy, default_synthesis_policy


def estimate_eta_minutes(distance_m: float, mode: TravelMode, policy: SynthesisPolicy = None) -> float:
    """
    Minutes to cover distance_m at the mode's average speed (m/min).
    """
    policy = policy or default_synthesis_policy()
    return max(0.0, distance_m) / policy.speed_for(mode)


def estimate_remaining_minutes(eta_minutes: float, total_distance_m: float, remaining_distance_m: float) -> int:
    """
    Whole minutes left on a route, assuming progress is linear in distance.
    A route with no length counts as fully remaining.
    """
    total = total_distance_m if total_distance_m > 0 else 1.0
    progress = max(0.0, min(1.0, 1.0 - remaining_distance_m / total))
    return max(0, math.ceil(eta_minutes * (1.0 - progress)))


def estimate_toll_fare(highway_distance_m: float, policy: SynthesisPolicy = None) -> float:
    """
    Base fare plus a per-km rate, rounded down to the fare unit.
    Falls back to the flat minimum fare if the estimate is not positive.
    """
    policy = policy or default_synthesis_policy()
    km = max(0.0, highway_distance_m) / 1000.0
    raw = policy.toll_base_fare + km * policy.toll_per_km
    rounded = math.floor(raw / policy.toll_rounding) * policy.toll_rounding
    return rounded if rounded > 0 else policy.toll_minimum
