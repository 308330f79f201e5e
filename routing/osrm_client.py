#Purpose: The OSRM "adapter/client", the default road-routing provider.
#Sole responsibility: talk to OSRM via HTTP and return normalized outputs.
#Encapsulates OSRM-specific details:
#coordinate formatting (lon,lat)
#URL construction (/route with waypoints)
#timeouts and error handling (every failure surfaces as OSRMError)
#parsing response JSON (GeoJSON geometry + steps of all legs) into ProviderRoute
#It should not contain detour rules or candidate ranking.


from dotenv import load_dotenv
import logging
import os
from typing import Any, Dict, List, Sequence

import requests

from geo import Point
from .models import MALFORMED_PAYLOAD_ERRORS, ManeuverStep, ProviderRoute, RoutingError

# Read OSRM base URL from environment
# Example in .env:
# OSRM_BASE_URL=https://router.project-osrm.org
load_dotenv()
BASE_URL = os.getenv("OSRM_BASE_URL", "https://router.project-osrm.org")

logger = logging.getLogger(__name__)


class OSRMError(RoutingError):
    """Custom exception for OSRM client errors."""
    pass


class OSRMClient:
    """
    OSRM Adapter / Client

    Sole responsibility:
    - Talk to OSRM via HTTP
    - Convert internal Point(lat, lng) → OSRM (lon,lat)
    - Return normalized ProviderRoute objects

    Satisfies the RoutingProvider protocol used by RouteService.
    """
    def __init__(self, base_url: str = None, timeout: float = 5, snap_radius_m: float = 100):
        self.base_url = (base_url or BASE_URL or "").rstrip("/")
        self.timeout = timeout #the time to wait for a response from OSRM before giving up
        self.snap_radius_m = snap_radius_m #how far OSRM may move each waypoint to snap it to a road

        if not self.base_url:
            raise ValueError("OSRM base URL not set. Please set OSRM_BASE_URL in the .env file.")

    #----------------
    # Internal helpers for coordinate formatting and response parsing
    #----------------
    def format_coordinates(self, coords: Sequence[Point]) -> str:
        """Convert a list of Points to OSRM format 'lon,lat;lon,lat;...'"""
        return ';'.join(f"{p.lng},{p.lat}" for p in coords)

    def _parse_steps(self, route: Dict[str, Any]) -> List[ManeuverStep]:
        steps: List[ManeuverStep] = []
        #a route with waypoints has one leg per pair of waypoints, keep them all in order
        for leg in route.get("legs", []):
            for raw in leg.get("steps", []) or []:
                maneuver = raw.get("maneuver", {})
                location = maneuver.get("location") or [0.0, 0.0]
                steps.append(
                    ManeuverStep(
                        maneuver_type=maneuver.get("type", ""),
                        modifier=maneuver.get("modifier"),
                        distance_m=float(raw.get("distance", 0.0)),
                        street_name=raw.get("name", "") or "",
                        location=Point.from_lnglat(location),
                    )
                )
        return steps

    #----------------
    # Public methods
    #----------------
    def route(self, waypoints: Sequence[Point], profile: str = "walking") -> ProviderRoute:
        """
        calls the OSRM /route endpoint through all waypoints (start, detours..., goal)
        and returns the full geometry with turn-by-turn steps.

        Raises:
            OSRMError: on transport errors, bad JSON or a non-"Ok" OSRM code.
        """
        if len(waypoints) < 2:
            raise ValueError("At least two coordinates are required to compute a route.")

        coordinates = self.format_coordinates(waypoints)
        url = f"{self.base_url}/route/v1/{profile}/{coordinates}"

        try:
            response = requests.get(
                url,
                params={
                    "overview": "full", # we need the full geometry for map-matching
                    "geometries": "geojson",
                    "steps": "true",
                    "continue_straight": "true",
                    "radiuses": ";".join(str(int(self.snap_radius_m)) for _ in waypoints),
                },
                timeout=self.timeout,
            )
            data = response.json() #OSRM returns a JSON body even for most errors
        except requests.RequestException as e:
            raise OSRMError(f"OSRM request failed: {e}") from e
        except ValueError as e:
            raise OSRMError(f"OSRM returned invalid JSON (HTTP {response.status_code})") from e

        #validating OSRM response
        try:
            if data.get("code") != "Ok":
                raise OSRMError(f"OSRM error: {data.get('message', data.get('code', 'Unknown error'))}")

            routes = data.get("routes") or []
            if not routes:
                raise OSRMError("OSRM returned no route")

            route = routes[0] #take the first route (OSRM may return alternatives)
            geometry = (route.get("geometry") or {}).get("coordinates") or []
            path = [Point.from_lnglat(c) for c in geometry]
            steps = self._parse_steps(route)
        except MALFORMED_PAYLOAD_ERRORS as e:
            raise OSRMError(f"OSRM returned a malformed route: {e!r}") from e

        logger.debug(f"OSRM {profile} route through {len(waypoints)} waypoints: {len(path)} points")
        return ProviderRoute(path=path, steps=steps)
