"""Multi-stop errand itinerary planning and leg-by-leg route execution."""

from .errors import InsufficientStopsError, ItineraryError, LegFailedError, OptimizerError
from .matcher import ErrandMatcher, within_epsilon
from .orchestrator import RouteOrchestrator
from .planner import LegPlan, LegPlanner
from .sequencer import RetryPolicy, RouteSequencer
from .session import RouteSession, SessionState, clear_session
from .types import (
    Coordinate,
    DirectionsRequest,
    DirectionsSuccess,
    ErrandDescriptor,
    Itinerary,
    Leg,
    PolylineStyle,
    ProviderFailure,
    RateLimited,
    RouteStop,
    TravelMode,
)

__all__ = [
    "Coordinate",
    "DirectionsRequest",
    "DirectionsSuccess",
    "ErrandDescriptor",
    "ErrandMatcher",
    "InsufficientStopsError",
    "Itinerary",
    "ItineraryError",
    "Leg",
    "LegFailedError",
    "LegPlan",
    "LegPlanner",
    "OptimizerError",
    "PolylineStyle",
    "ProviderFailure",
    "RateLimited",
    "RetryPolicy",
    "RouteOrchestrator",
    "RouteSequencer",
    "RouteSession",
    "RouteStop",
    "SessionState",
    "TravelMode",
    "clear_session",
    "within_epsilon",
]
