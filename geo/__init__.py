"""
Geographic primitives shared by every other package.

Public API:
- Point, InvalidCoordinateError, require_valid
- haversine_distance, initial_bearing, destination_point, interpolate_linear, path_length
- Projection, project_onto_polyline, distance_along, distance_to_end

No routing, hazard or tracking logic lives here.
"""
from .models import Point, InvalidCoordinateError, require_valid
from .geodesy import (
    EARTH_RADIUS_M,
    haversine_distance,
    initial_bearing,
    destination_point,
    interpolate_linear,
    path_length,
)
from .polyline import Projection, project_onto_polyline, distance_along, distance_to_end

__all__ = [
    "Point",
    "InvalidCoordinateError",
    "require_valid",
    "EARTH_RADIUS_M",
    "haversine_distance",
    "initial_bearing",
    "destination_point",
    "interpolate_linear",
    "path_length",
    "Projection",
    "project_onto_polyline",
    "distance_along",
    "distance_to_end",
]
