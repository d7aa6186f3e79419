from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from .errors import InsufficientStopsError
from .matcher import ErrandMatcher
from .types import Coordinate, ErrandDescriptor, Itinerary, Leg, RouteStop, TravelMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LegPlan:
    """Everything derived from one route response before any request is made."""

    stops: tuple[RouteStop, ...]
    locations: tuple[Coordinate, ...]
    legs: tuple[Leg, ...]
    labels: tuple[str, ...]

    @property
    def itinerary(self) -> Itinerary:
        return Itinerary(errands=self.labels)


def waypoint_letters(position: int) -> str:
    """Spreadsheet-style letters for a 0-based position: A..Z, AA..AZ, BA, ..."""
    letters = ""
    n = position + 1
    while n:
        n, rem = divmod(n - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


def waypoint_label(position: int) -> str:
    """Generic label for the ``position``-th intermediate stop (0-based)."""
    return f"Walk to point {waypoint_letters(position)}"


class LegPlanner:
    def __init__(self, matcher: ErrandMatcher | None = None):
        self.matcher = matcher or ErrandMatcher()

    @classmethod
    def from_settings(cls) -> LegPlanner:
        from ..settings import settings

        return cls(ErrandMatcher(epsilon=settings.ERRAND_MATCH_EPSILON))

    def plan(
        self,
        stops: Sequence[RouteStop],
        known_errands: Sequence[ErrandDescriptor] = (),
    ) -> LegPlan:
        if len(stops) < 2:
            raise InsufficientStopsError(len(stops))

        locations = tuple(stop.coordinate for stop in stops)
        # The transit flag belongs to the leg's destination; stops[0] has no inbound leg.
        legs = tuple(
            Leg(
                index=i,
                origin=locations[i],
                destination=locations[i + 1],
                mode=TravelMode.TRANSIT if stops[i + 1].transit else TravelMode.WALK,
            )
            for i in range(len(stops) - 1)
        )
        labels = tuple(
            self._label(locations[i], i - 1, known_errands) for i in range(1, len(stops) - 1)
        )
        logger.debug(
            "Planned %d legs (%d transit) with %d labelled stops",
            len(legs),
            sum(1 for leg in legs if leg.mode is TravelMode.TRANSIT),
            len(labels),
        )
        return LegPlan(stops=tuple(stops), locations=locations, legs=legs, labels=labels)

    def _label(
        self, point: Coordinate, position: int, known_errands: Sequence[ErrandDescriptor]
    ) -> str:
        errand = self.matcher.describe(point, known_errands)
        if errand is None:
            return waypoint_label(position)
        return errand.label


__all__ = ["LegPlan", "LegPlanner", "waypoint_label", "waypoint_letters"]
