from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol

from .errors import LegFailedError
from .types import (
    Coordinate,
    DirectionsOutcome,
    DirectionsRequest,
    DirectionsSuccess,
    ErrandDescriptor,
    Itinerary,
    Leg,
    PolylineStyle,
)


class DirectionsProvider(Protocol):
    async def route(self, request: DirectionsRequest) -> DirectionsOutcome: ...


class RouteRenderer(Protocol):
    def render(self, leg: Leg, style: PolylineStyle, result: DirectionsSuccess) -> Any: ...

    def unrender(self, handle: Any) -> None: ...

    def place_marker(self, coordinate: Coordinate, index: int) -> None: ...

    def clear_markers(self) -> None: ...


class ErrandSource(Protocol):
    def list_known_errands(self) -> Sequence[ErrandDescriptor]: ...


class ItineraryDisplay(Protocol):
    def publish_itinerary(self, itinerary: Itinerary) -> None: ...

    def report_failure(self, error: LegFailedError) -> None: ...
