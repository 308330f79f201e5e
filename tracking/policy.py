"""
Purpose: Central configuration for live tracking (single source of truth).
What it does:

Stores all tunable thresholds for map-matching, off-route detection and display:

OFF_ROUTE threshold = max(30 m, speed * 3 s)
DEBOUNCE = 3 consecutive breaches before a reroute
SPEED smoothing = 0.7 * previous + 0.3 * raw
LOOKAHEAD = 3 s of travel when faster than 2 m/s
ANIMATION = 1000 ms per fix, 60 frames per second

Rule: No logic here, just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TrackingPolicy:
    """
    Central configuration for the Tracker.
    """

    # --- Off-route detection ---
    # Floor protects slow or stationary users from GPS noise.
    min_off_route_threshold_m: float = 30.0
    # Faster travel tolerates proportionally larger deviation.
    threshold_speed_factor_s: float = 3.0
    # Consecutive breaches required to confirm departure.
    debounce_count: int = 3

    # --- Speed estimate ---
    # Weight kept from the previous estimate (EMA).
    speed_smoothing: float = 0.7

    # --- Look-ahead rerouting ---
    lookahead_seconds: float = 3.0
    lookahead_min_speed_mps: float = 2.0

    # If the new route starts further than this from the request origin,
    # the origin is prepended as an approach segment.
    approach_gap_m: float = 10.0

    # --- Display ---
    animation_duration_ms: float = 1000.0
    frame_rate_hz: float = 60.0

    def validate(self) -> None:
        """
        Basic sanity checks.
        """
        if self.min_off_route_threshold_m <= 0:
            raise ValueError("min_off_route_threshold_m must be > 0")

        if self.threshold_speed_factor_s < 0:
            raise ValueError("threshold_speed_factor_s must be >= 0")

        if self.debounce_count < 1:
            raise ValueError("debounce_count must be >= 1")

        if not (0.0 <= self.speed_smoothing < 1.0):
            raise ValueError("speed_smoothing must be in [0, 1)")

        if self.lookahead_seconds < 0 or self.lookahead_min_speed_mps < 0:
            raise ValueError("look-ahead settings must be >= 0")

        if self.approach_gap_m < 0:
            raise ValueError("approach_gap_m must be >= 0")

        if self.animation_duration_ms <= 0:
            raise ValueError("animation_duration_ms must be > 0")

        if self.frame_rate_hz <= 0:
            raise ValueError("frame_rate_hz must be > 0")


def default_tracking_policy() -> TrackingPolicy:
    """
    Convenience factory for the default policy.
    """
    p = TrackingPolicy()
    p.validate()
    return p
