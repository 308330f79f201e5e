"""
Purpose: Central configuration for route synthesis (single source of truth).
What it does:

Stores all tunable thresholds/constants:

MODE_SPEEDS (m/min) = walking 67, stroll 50, cycling 250, driving 400

COMFORTABLE detection radius = walking/stroll 60 m, cycling 100 m, driving 200 m

AVOID_* detection radius = obstacles 100 m, congestion 150 m, both 150 m

HIGHWAY entrance score = 1.8 * d(start, entrance) + d(entrance, goal)

HIGHWAY prune ratio = 1.35 x FASTEST distance

Rule: No logic here, just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from .models import TravelMode


@dataclass(frozen=True)
class SynthesisPolicy:
    """
    Central configuration for RouteSynthesizer.

    Notes:
    - Speeds are fixed per-mode averages; transit ETA comes from the provider,
      the transit speed here only prices walking substitutes.
    - Detection radii are how close a sampled path point may get to a hazard
      before a detour is attempted.
    """

    # --- ETA ---
    mode_speeds_m_per_min: Dict[TravelMode, float] = field(default_factory=lambda: {
        TravelMode.WALKING: 67.0,   # ~4 km/h
        TravelMode.STROLL: 50.0,    # ~3 km/h, relaxed pace
        TravelMode.CYCLING: 250.0,  # ~15 km/h
        TravelMode.DRIVING: 400.0,  # ~24 km/h city traffic
    }) # transit ETA comes from the transit provider

    # --- Routing profiles sent to the road-routing provider ---
    # Stroll and transit share the walking profile (see DESIGN.md open question).
    mode_profiles: Dict[TravelMode, str] = field(default_factory=lambda: {
        TravelMode.WALKING: "walking",
        TravelMode.STROLL: "walking",
        TravelMode.CYCLING: "cycling",
        TravelMode.DRIVING: "driving",
        TravelMode.TRANSIT: "walking",
    })

    # --- Conflict detection ---
    comfortable_radius_m: Dict[TravelMode, float] = field(default_factory=lambda: {
        TravelMode.WALKING: 60.0,
        TravelMode.STROLL: 60.0,
        TravelMode.CYCLING: 100.0,
        TravelMode.DRIVING: 200.0,
        TravelMode.TRANSIT: 60.0,
    })
    avoid_obstacle_radius_m: float = 100.0
    avoid_congestion_radius_m: float = 150.0
    avoid_both_radius_m: float = 150.0

    # Test every Nth path point, not all of them.
    conflict_sample_stride: int = 5

    # --- Detour anchors ---
    # Lat/lng offset of the injected waypoint from the hazard centre.
    # 0.003 deg is roughly 300 m; leisure walks push further out.
    anchor_delta_deg: Dict[TravelMode, float] = field(default_factory=lambda: {
        TravelMode.WALKING: 0.003,
        TravelMode.STROLL: 0.006,
        TravelMode.CYCLING: 0.005,
        TravelMode.DRIVING: 0.01,
        TravelMode.TRANSIT: 0.003,
    })

    # Upper bound on provider re-queries for one detour candidate.
    max_detour_iterations: int = 6

    # --- Fallback ---
    # Straight-line interpolation used when the provider fails.
    fallback_interpolation_steps: int = 20

    # --- Highway variant (driving only) ---
    highway_search_radius_m: float = 15000.0
    highway_approach_weight: float = 1.8
    # An entrance may be at most this much further from the goal than the start is.
    highway_entrance_slack_m: float = 2000.0
    highway_max_distance_ratio: float = 1.35

    # Toll estimate when the provider does not price the route.
    toll_base_fare: float = 900.0
    toll_per_km: float = 44.3
    toll_rounding: float = 100.0
    toll_minimum: float = 1200.0

    # --- Transit ---
    max_transit_candidates: int = 3

    def speed_for(self, mode: TravelMode) -> float:
        return self.mode_speeds_m_per_min[mode]

    def profile_for(self, mode: TravelMode) -> str:
        return self.mode_profiles[mode]

    def comfortable_radius_for(self, mode: TravelMode) -> float:
        return self.comfortable_radius_m[mode]

    def anchor_delta_for(self, mode: TravelMode) -> float:
        return self.anchor_delta_deg[mode]

    def validate(self) -> None:
        """
        Basic sanity checks. Call once at startup if you want.
        """
        for mode in TravelMode:
            if not mode.is_transit and self.mode_speeds_m_per_min.get(mode, 0) <= 0:
                raise ValueError(f"speed for {mode.value} must be > 0")
            if mode not in self.mode_profiles:
                raise ValueError(f"missing routing profile for {mode.value}")
            if self.comfortable_radius_m.get(mode, 0) <= 0:
                raise ValueError(f"comfortable radius for {mode.value} must be > 0")
            if self.anchor_delta_deg.get(mode, 0) <= 0:
                raise ValueError(f"anchor delta for {mode.value} must be > 0")

        if min(self.avoid_obstacle_radius_m, self.avoid_congestion_radius_m, self.avoid_both_radius_m) <= 0:
            raise ValueError("avoidance radii must be > 0")

        if self.conflict_sample_stride < 1:
            raise ValueError("conflict_sample_stride must be >= 1")

        if self.max_detour_iterations < 1:
            raise ValueError("max_detour_iterations must be >= 1")

        if self.fallback_interpolation_steps < 1:
            raise ValueError("fallback_interpolation_steps must be >= 1")

        if self.highway_max_distance_ratio < 1.0:
            raise ValueError("highway_max_distance_ratio must be >= 1.0")

        if self.highway_approach_weight < 1.0:
            raise ValueError("highway_approach_weight must be >= 1.0")

        if self.max_transit_candidates < 1:
            raise ValueError("max_transit_candidates must be >= 1")


def default_synthesis_policy() -> SynthesisPolicy:
    """
    Convenience factory for the default policy.
    """
    p = SynthesisPolicy()
    p.validate()
    return p
