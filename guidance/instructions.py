"""
Purpose: Turn-by-turn instruction for the current position on a route.
What it does:
- locates each provider maneuver along the active route
- picks the first one more than 30 m ahead of the matched position
  (closer ones are treated as already passed)
- maps maneuver type + modifier to a coarse instruction class
- falls back to "continue" / "approaching destination" when nothing is ahead

Rule: Read-only. Guidance never changes the route or the session.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from geo import Projection, distance_along, distance_to_end, project_onto_polyline
from routing import ManeuverStep, RouteCandidate


class InstructionKind(str, Enum):
    STRAIGHT = "straight"
    LEFT = "left"
    RIGHT = "right"
    SHARP_LEFT = "sharp_left"
    SHARP_RIGHT = "sharp_right"
    U_TURN = "u_turn"
    MERGE = "merge"
    ARRIVE = "arrive"
    CONTINUE = "continue"
    APPROACHING = "approaching"


_TEXT: Dict[InstructionKind, str] = {
    InstructionKind.STRAIGHT: "Go straight",
    InstructionKind.LEFT: "Turn left",
    InstructionKind.RIGHT: "Turn right",
    InstructionKind.SHARP_LEFT: "Turn sharp left",
    InstructionKind.SHARP_RIGHT: "Turn sharp right",
    InstructionKind.U_TURN: "Make a U-turn",
    InstructionKind.MERGE: "Merge",
    InstructionKind.ARRIVE: "Arrive",
    InstructionKind.CONTINUE: "Continue along the route",
    InstructionKind.APPROACHING: "You are near your destination",
}

_ICON: Dict[InstructionKind, str] = {
    InstructionKind.STRAIGHT: "↑",
    InstructionKind.LEFT: "↰",
    InstructionKind.RIGHT: "↱",
    InstructionKind.SHARP_LEFT: "↰",
    InstructionKind.SHARP_RIGHT: "↱",
    InstructionKind.U_TURN: "↶",
    InstructionKind.MERGE: "Y",
    InstructionKind.ARRIVE: "🏁",
    InstructionKind.CONTINUE: "↑",
    InstructionKind.APPROACHING: "🏁",
}


# OSRM maneuver types where a left/right modifier means an actual turn
_TURN_TYPES = frozenset({"turn", "end of road", "fork"})


@dataclass(frozen=True)
class GuidancePolicy:
    # Maneuvers closer than this are considered passed.
    min_maneuver_distance_m: float = 30.0
    # Below this remaining distance the fallback is "approaching".
    approaching_distance_m: float = 50.0

    def validate(self) -> None:
        if self.min_maneuver_distance_m < 0:
            raise ValueError("min_maneuver_distance_m must be >= 0")
        if self.approaching_distance_m < 0:
            raise ValueError("approaching_distance_m must be >= 0")


def default_guidance_policy() -> GuidancePolicy:
    p = GuidancePolicy()
    p.validate()
    return p


@dataclass(frozen=True)
class Instruction:
    kind: InstructionKind
    text: str
    icon: str
    distance_m: float
    street_name: str = ""


def classify_maneuver(maneuver_type: str, modifier: Optional[str] = None) -> InstructionKind:
    """
    OSRM maneuver type/modifier -> InstructionKind.
    Plain left/right only counts on maneuvers where the user has to turn.
    """
    maneuver_type = (maneuver_type or "").lower()
    modifier = (modifier or "").lower()

    if maneuver_type == "arrive":
        return InstructionKind.ARRIVE
    if maneuver_type == "merge":
        return InstructionKind.MERGE
    if modifier == "uturn":
        return InstructionKind.U_TURN
    if modifier == "sharp left":
        return InstructionKind.SHARP_LEFT
    if modifier == "sharp right":
        return InstructionKind.SHARP_RIGHT
    if maneuver_type in _TURN_TYPES:
        if "left" in modifier:
            return InstructionKind.LEFT
        if "right" in modifier:
            return InstructionKind.RIGHT
    # continue, new name, depart and the rest follow the road
    return InstructionKind.STRAIGHT


def _instruction(kind: InstructionKind, distance_m: float, street_name: str = "") -> Instruction:
    text = _TEXT[kind]
    if street_name:
        text = f"{text} ({street_name})"
    return Instruction(kind=kind, text=text, icon=_ICON[kind], distance_m=distance_m, street_name=street_name)


class InstructionMapper:
    """
    Usage:
        mapper = InstructionMapper()
        instruction = mapper.next_instruction(route, tracker.session.projection)
    """

    def __init__(self, policy: Optional[GuidancePolicy] = None):
        self.policy = policy or default_guidance_policy()

    def next_maneuver(self, route: RouteCandidate, projection: Projection) -> Optional[Tuple[ManeuverStep, float]]:
        """
        (step, distance along the route to it) for the first step far enough ahead.
        """
        for step in route.steps:
            located = project_onto_polyline(step.location, route.points)
            ahead = distance_along(route.points, projection, located)
            if ahead > self.policy.min_maneuver_distance_m:
                return step, ahead
        return None

    def next_instruction(self, route: RouteCandidate, projection: Projection) -> Instruction:
        found = self.next_maneuver(route, projection)
        if found is not None:
            step, ahead = found
            return _instruction(classify_maneuver(step.maneuver_type, step.modifier), ahead, step.street_name)

        remaining = distance_to_end(route.points, projection)
        if remaining < self.policy.approaching_distance_m:
            return _instruction(InstructionKind.APPROACHING, remaining)
        return _instruction(InstructionKind.CONTINUE, remaining)
