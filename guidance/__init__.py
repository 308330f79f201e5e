"""
Guidance package: turn-by-turn instructions and trip progress.

Public API:
- InstructionMapper, Instruction, InstructionKind, GuidancePolicy, classify_maneuver
- remaining_distance, remaining_minutes, arrival_time
"""
from .instructions import (
    InstructionKind,
    Instruction,
    GuidancePolicy,
    default_guidance_policy,
    classify_maneuver,
    InstructionMapper,
)
from .progress import remaining_distance, remaining_minutes, arrival_time

__all__ = [
    "InstructionKind",
    "Instruction",
    "GuidancePolicy",
    "default_guidance_policy",
    "classify_maneuver",
    "InstructionMapper",
    "remaining_distance",
    "remaining_minutes",
    "arrival_time",
]
