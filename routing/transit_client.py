#Purpose: The transit itinerary "adapter/client" (ODsay public transit API).
#Sole responsibility: ask the transit service for itineraries between two points
#and normalize them into TransitItinerary objects.
#Encapsulates ODsay-specific details:
#SX/SY/EX/EY parameter naming (x = lng, y = lat)
#trafficType codes (1 subway, 2 bus, 3 walk)
#approximate geometry from passStopList stations (ODsay gives no polyline here)
#line colours for display


from dotenv import load_dotenv
import logging
import os
from typing import Any, Dict, List, Optional

import requests

from geo import Point
from .models import MALFORMED_PAYLOAD_ERRORS, RoutingError, TransitItinerary, TransitLeg

# Example in .env:
# ODSAY_API_KEY=your-key
load_dotenv()
ODSAY_API_KEY = os.getenv("ODSAY_API_KEY", "")
ODSAY_BASE_URL = os.getenv("ODSAY_BASE_URL", "https://api.odsay.com/v1/api")

logger = logging.getLogger(__name__)

_WALK, _SUBWAY, _BUS = 3, 1, 2

_SUBWAY_COLORS: Dict[int, str] = {
    1: "#0052A4", 2: "#3CB44A", 3: "#EF7C1C", 4: "#00A5DE",
    5: "#996CAC", 6: "#CD7C2F", 7: "#747F00", 8: "#E6186C", 9: "#BDB092",
    100: "#F5A200",
    101: "#0090D2",
    104: "#81A914",
    109: "#D4003B",
}


class TransitError(RoutingError):
    """Raised when the transit service cannot be reached or reports an error."""
    pass


def subway_color(code: Optional[int]) -> str:
    return _SUBWAY_COLORS.get(code, "#555555")


def bus_color(bus_type: Optional[int]) -> str:
    if bus_type in (1, 11):
        return "#375899"
    if bus_type in (2, 12):
        return "#3D8E33"
    if bus_type == 3:
        return "#80C900"
    if bus_type in (4, 6, 14):
        return "#D62915"
    if bus_type == 5:
        return "#FFC600"
    return "#375899"


class ODsayTransitClient:
    """
    Transit itinerary provider backed by ODsay searchPubTransPathT.

    Satisfies the TransitProvider protocol used by RouteSynthesizer.
    Without an API key it returns no itineraries, which makes the synthesizer
    fall back to walking.
    """

    def __init__(self, api_key: str = None, base_url: str = None, timeout: float = 10, max_itineraries: int = 3):
        self.api_key = api_key if api_key is not None else ODSAY_API_KEY
        self.base_url = (base_url or ODSAY_BASE_URL).rstrip("/")
        self.timeout = timeout
        self.max_itineraries = max_itineraries

    def _parse_leg(self, sub: Dict[str, Any]) -> Optional[TransitLeg]:
        traffic_type = sub.get("trafficType")
        distance = float(sub.get("distance", 0) or 0)
        minutes = float(sub.get("sectionTime", 0) or 0)

        if traffic_type == _WALK:
            return TransitLeg(leg_type="walk", instruction="Walk", distance_m=distance, time_minutes=minutes)

        lanes = sub.get("lane") or [{}]
        lane = lanes[0]
        if traffic_type == _SUBWAY:
            name = lane.get("name", "")
            return TransitLeg(
                leg_type="subway",
                instruction=f"Board {name}",
                distance_m=distance,
                time_minutes=minutes,
                line=name,
                color=subway_color(lane.get("subwayCode")),
                start_name=sub.get("startName"),
                end_name=sub.get("endName"),
                station_count=sub.get("stationCount"),
            )
        if traffic_type == _BUS:
            bus_no = str(lane.get("busNo", ""))
            return TransitLeg(
                leg_type="bus",
                instruction=f"Board bus {bus_no}",
                distance_m=distance,
                time_minutes=minutes,
                line=bus_no,
                color=bus_color(lane.get("type")),
                start_name=sub.get("startName"),
                end_name=sub.get("endName"),
                station_count=sub.get("stationCount"),
            )
        return None

    def _parse_path(self, raw: Dict[str, Any], start: Point, goal: Point) -> TransitItinerary:
        info = raw.get("info", {})
        sub_paths = raw.get("subPath", []) or []

        legs = [leg for leg in (self._parse_leg(sub) for sub in sub_paths) if leg is not None]

        points: List[Point] = [start]
        for sub in sub_paths:
            stations = (sub.get("passStopList") or {}).get("stations") or []
            for station in stations:
                points.append(Point(lat=float(station["y"]), lng=float(station["x"])))
        points.append(goal)

        transfers = (info.get("busTransitCount", 0) or 0) + (info.get("subwayTransitCount", 0) or 0) - 1

        return TransitItinerary(
            total_time_minutes=float(info.get("totalTime", 0) or 0),
            fare=info.get("payment"),
            transfer_count=max(0, transfers),
            legs=legs,
            path=points,
            total_distance_m=info.get("totalDistance"),
            walking_distance_m=info.get("totalWalk", info.get("walkingDistance")),
        )

    def find_itineraries(self, start: Point, goal: Point) -> List[TransitItinerary]:
        """
        Best-first itineraries from start to goal, at most max_itineraries.

        Returns [] when the service has nothing (e.g. start and goal too close).
        Raises TransitError on transport or API errors.
        """
        if not self.api_key:
            logger.warning("ODSAY_API_KEY is missing; transit search disabled.")
            return []

        try:
            response = requests.get(
                f"{self.base_url}/searchPubTransPathT",
                params={
                    "lang": 0,
                    "SX": start.lng,
                    "SY": start.lat,
                    "EX": goal.lng,
                    "EY": goal.lat,
                    "apiKey": self.api_key,
                },
                timeout=self.timeout,
            )
            data = response.json()
        except requests.RequestException as e:
            raise TransitError(f"Transit request failed: {e}") from e
        except ValueError as e:
            raise TransitError("Transit service returned invalid JSON") from e

        try:
            error = data.get("error")
            if error:
                # ODsay reports "too close" and "no route" as errors too
                if isinstance(error, list):
                    error = error[0] if error else {}
                logger.warning(f"ODsay API error [{error.get('code')}]: {error.get('msg', error.get('message'))}")
                return []

            paths = (data.get("result") or {}).get("path") or []
            return [self._parse_path(p, start, goal) for p in paths[: self.max_itineraries]]
        except MALFORMED_PAYLOAD_ERRORS as e:
            raise TransitError(f"Transit service returned a malformed itinerary: {e!r}") from e
