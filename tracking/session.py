"""
Purpose: Domain models for live tracking.
What it does:
- PositionFix: one raw fix from the position source
- DisplayState: what the renderer gets after every fix and frame
- NavigationSession: the mutable per-navigation record the Tracker updates

Rule: No transitions here. The Tracker owns every write to a NavigationSession.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from geo import Point, Projection
from routing import RouteCandidate, TravelMode
from .animation import DisplayAnimation
from .state_machine import TrackingState


@dataclass(frozen=True)
class PositionFix:
    lat: float
    lng: float
    timestamp_ms: float
    heading_hint: Optional[float] = None

    @property
    def point(self) -> Point:
        return Point(self.lat, self.lng)


@dataclass(frozen=True)
class DisplayState:
    """
    Snapshot handed to the display consumer.
    debug_metrics carries distance/threshold/speed/breaches of the last fix.
    """
    display_position: Optional[Point]
    heading: float
    off_route: bool
    active_route_id: Optional[str]
    tracking_state: TrackingState = TrackingState.ON_ROUTE
    debug_metrics: Dict[str, float] = field(default_factory=dict)


@dataclass
class NavigationSession:
    """
    Everything the Tracker knows about one navigation.

    display_position only moves by interpolating toward target_position,
    except for the first fix of the session.
    """
    active_route: RouteCandidate
    destination: Point
    mode: TravelMode
    reroute_generation: int

    raw_position: Optional[Point] = None
    projection: Optional[Projection] = None
    display_position: Optional[Point] = None
    target_position: Optional[Point] = None
    heading: float = 0.0

    speed_estimate_mps: float = 0.0
    last_fix: Optional[PositionFix] = None

    consecutive_breaches: int = 0
    off_route: bool = False

    animation: Optional[DisplayAnimation] = None
    last_metrics: Dict[str, float] = field(default_factory=dict)
    active: bool = True

    @property
    def matched_position(self) -> Optional[Point]:
        return self.projection.point if self.projection else None

    @property
    def matched_segment_index(self) -> Optional[int]:
        return self.projection.segment_index if self.projection else None

    @property
    def tracking_state(self) -> TrackingState:
        if self.off_route:
            return TrackingState.OFF_ROUTE_CONFIRMED
        if self.consecutive_breaches > 0:
            return TrackingState.OFF_ROUTE_PENDING
        return TrackingState.ON_ROUTE

    def snapshot(self) -> DisplayState:
        return DisplayState(
            display_position=self.display_position,
            heading=self.heading,
            off_route=self.off_route,
            active_route_id=self.active_route.route_id,
            tracking_state=self.tracking_state,
            debug_metrics=dict(self.last_metrics),
        )
