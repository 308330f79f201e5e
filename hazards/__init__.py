"""
Hazards domain package: nuisance obstacles and congestion zones.

Public API:
- Domain models: Obstacle, CongestionZone, Severity, HazardSnapshot
- Conflict detection: Conflict, first_conflict, detour_anchor
"""
from .models import Obstacle, CongestionZone, Severity, HazardSnapshot
from .conflicts import Conflict, Hazard, first_conflict, detour_anchor, anchor_attempts

__all__ = [
    "Obstacle",
    "CongestionZone",
    "Severity",
    "HazardSnapshot",
    "Conflict",
    "Hazard",
    "first_conflict",
    "detour_anchor",
    "anchor_attempts",
]
