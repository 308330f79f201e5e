"""
Purpose: Domain models for the Routing capability.
What it does:
- Defines the data exchanged with routing providers:
  - ManeuverStep (maneuver type/modifier, distance, street name, location)
  - ProviderRoute (path + steps returned by a road-routing service)
  - TransitLeg / TransitItinerary (returned by a transit itinerary service)
- Defines the synthesis output:
  - RouteCandidate (kind, points, distance, ETA, mode, fallback flag, steps, fares)

Defines enums:
- TravelMode = WALKING | STROLL | CYCLING | DRIVING | TRANSIT
- CandidateKind = RECOMMENDED | FASTEST | COMFORTABLE | AVOID_* | HIGHWAY | TRANSIT

Defines the provider error hierarchy (RoutingError and friends).

Rule: No HTTP calls, no synthesis logic. Models only.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from geo import Point


class RoutingError(Exception):
    """Base class for any routing/transit/places provider failure."""
    pass


# What a well-formed JSON body with missing or mistyped fields raises while it is parsed.
# Adapters re-raise these as their RoutingError subclass.
MALFORMED_PAYLOAD_ERRORS = (KeyError, IndexError, TypeError, ValueError, AttributeError)


class TravelMode(str, Enum):
    WALKING = "walking"
    STROLL = "stroll"
    CYCLING = "cycling"
    DRIVING = "driving"
    TRANSIT = "transit"

    @property
    def is_pedestrian(self) -> bool:
        return self in (TravelMode.WALKING, TravelMode.STROLL)

    @property
    def is_vehicular(self) -> bool:
        return self in (TravelMode.CYCLING, TravelMode.DRIVING)

    @property
    def is_transit(self) -> bool:
        return self is TravelMode.TRANSIT


class CandidateKind(str, Enum):
    RECOMMENDED = "recommended"
    FASTEST = "fastest"
    COMFORTABLE = "comfortable"
    AVOID_OBSTACLE = "avoid_obstacle"
    AVOID_CONGESTION = "avoid_congestion"
    AVOID_BOTH = "avoid_both"
    HIGHWAY = "highway"
    TRANSIT = "transit"


@dataclass(frozen=True)
class ManeuverStep:
    """
    One maneuver as reported by the routing provider (OSRM step shape).
    """
    maneuver_type: str
    distance_m: float
    location: Point
    modifier: Optional[str] = None
    street_name: str = ""


@dataclass(frozen=True)
class ProviderRoute:
    """
    Raw answer of a road-routing provider: geometry + maneuvers.
    """
    path: List[Point]
    steps: List[ManeuverStep] = field(default_factory=list)


@dataclass(frozen=True)
class TransitLeg:
    """
    One leg of a transit itinerary. leg_type is "walk", "bus" or "subway".
    """
    leg_type: str
    instruction: str
    distance_m: float
    time_minutes: float
    line: Optional[str] = None
    color: Optional[str] = None
    start_name: Optional[str] = None
    end_name: Optional[str] = None
    station_count: Optional[int] = None


@dataclass(frozen=True)
class TransitItinerary:
    """
    One itinerary from the transit provider, best first.
    path is an approximation built from the stations passed.
    """
    total_time_minutes: float
    fare: Optional[float]
    transfer_count: int
    legs: List[TransitLeg]
    path: List[Point]
    total_distance_m: Optional[float] = None
    walking_distance_m: Optional[float] = None


@dataclass
class RouteCandidate:
    """
    One named route option offered to the user.

    points[0] is the start and points[-1] the goal (within provider snapping).
    is_fallback marks a degraded candidate (straight-line interpolation or a
    walking substitute for transit).
    """
    kind: CandidateKind
    points: List[Point]
    distance_m: float
    eta_minutes: float
    mode: TravelMode
    is_fallback: bool = False
    steps: List[ManeuverStep] = field(default_factory=list)

    # Optional pricing
    fare: Optional[float] = None
    toll_fare: Optional[float] = None
    transfer_count: Optional[int] = None
    transit_legs: List[TransitLeg] = field(default_factory=list)

    route_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def start(self) -> Point:
        return self.points[0]

    @property
    def goal(self) -> Point:
        return self.points[-1]
