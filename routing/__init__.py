#Marks routing as a package.
#Re-exports the public API (RouteSynthesizer, RouteService, the provider clients,
#ETA helpers) so other modules import from routing without knowing internal file names.
#No business logic.

from .models import (
    RoutingError,
    TravelMode,
    CandidateKind,
    ManeuverStep,
    ProviderRoute,
    TransitLeg,
    TransitItinerary,
    RouteCandidate,
)
from .policy import SynthesisPolicy, default_synthesis_policy
from .eta_service import estimate_eta_minutes, estimate_remaining_minutes, estimate_toll_fare
from .osrm_client import OSRMClient, OSRMError
from .transit_client import ODsayTransitClient, TransitError
from .places_client import KakaoEntranceFinder, PlacesError
from .route_service import RouteService, RoutingProvider
from .detour import DetourPlanner, DetourResult
from .highway import EntranceFinder, HighwayPlanner, best_highway_entrance
from .synthesizer import RouteSynthesizer, TransitProvider

__all__ = [
    "RoutingError",
    "TravelMode",
    "CandidateKind",
    "ManeuverStep",
    "ProviderRoute",
    "TransitLeg",
    "TransitItinerary",
    "RouteCandidate",
    "SynthesisPolicy",
    "default_synthesis_policy",
    "estimate_eta_minutes",
    "estimate_remaining_minutes",
    "estimate_toll_fare",
    "OSRMClient",
    "OSRMError",
    "ODsayTransitClient",
    "TransitError",
    "KakaoEntranceFinder",
    "PlacesError",
    "RouteService",
    "RoutingProvider",
    "DetourPlanner",
    "DetourResult",
    "EntranceFinder",
    "HighwayPlanner",
    "best_highway_entrance",
    "RouteSynthesizer",
    "TransitProvider",
]
