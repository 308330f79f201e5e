#Purpose: Look-ahead origin for reroute queries.
#A fast user keeps moving while the routing query is in flight, so the new route
#starts where they will be after lookahead_seconds rather than where they were.

from geo import Point, destination_point
from .policy import TrackingPolicy


def look_ahead_origin(position: Point, speed_mps: float, heading_deg: float, policy: TrackingPolicy) -> Point:
    """
    position advanced speed * lookahead_seconds along heading_deg, or position
    itself when not faster than lookahead_min_speed_mps.
    """
    if speed_mps <= policy.lookahead_min_speed_mps:
        return position
    return destination_point(position, speed_mps * policy.lookahead_seconds, heading_deg)
