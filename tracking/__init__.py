"""
Tracking domain package: live map-matching, off-route detection and display animation.

Public API:
- Tracker (transition functions on_fix / on_animation_tick / on_reroute_result / stop)
- Models: PositionFix, DisplayState, NavigationSession, TrackingState
- Policy: TrackingPolicy, default_tracking_policy
- Rerouting: RerouteRequest, ThreadedRerouteRequester
- FrameScheduler, DisplayAnimation, look_ahead_origin
"""
from .policy import TrackingPolicy, default_tracking_policy
from .state_machine import (
    TrackingState,
    TrackingStateError,
    smoothed_speed,
    off_route_threshold,
    evaluate_breach,
)
from .animation import DisplayAnimation
from .lookahead import look_ahead_origin
from .session import PositionFix, DisplayState, NavigationSession
from .scheduler import FrameScheduler, monotonic_ms
from .reroute import RerouteRequest, RerouteRequester, ThreadedRerouteRequester
from .tracker import Tracker

__all__ = [
    "TrackingPolicy",
    "default_tracking_policy",
    "TrackingState",
    "TrackingStateError",
    "smoothed_speed",
    "off_route_threshold",
    "evaluate_breach",
    "DisplayAnimation",
    "look_ahead_origin",
    "PositionFix",
    "DisplayState",
    "NavigationSession",
    "FrameScheduler",
    "monotonic_ms",
    "RerouteRequest",
    "RerouteRequester",
    "ThreadedRerouteRequester",
    "Tracker",
]
