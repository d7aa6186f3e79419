from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..config import CURRENT_LOCATION_LABEL


class TravelMode(Enum):
    """Travel mode for a single leg; values are the provider's wire names."""

    WALK = "walking"
    TRANSIT = "transit"


@dataclass(frozen=True, slots=True)
class Coordinate:
    lat: float
    lng: float

    def as_param(self) -> str:
        return f"{self.lat},{self.lng}"


@dataclass(frozen=True, slots=True)
class ErrandDescriptor:
    coordinate: Coordinate
    place_name: str
    errand_name: str

    @property
    def label(self) -> str:
        return f"{self.place_name}: {self.errand_name}"


def _parse_transit(raw: Any) -> bool:
    if isinstance(raw, str):
        return raw.strip().lower() == TravelMode.TRANSIT.value
    return bool(raw)


@dataclass(frozen=True, slots=True)
class RouteStop:
    coordinate: Coordinate
    # True when the leg arriving at this stop is taken by transit.
    transit: bool = False

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> RouteStop:
        """Build a stop from an optimizer record ``{lat, lng, transit}``.

        The optimizer emits ``transit`` either as a bool or as the provider
        travel-mode string (``"transit"`` / ``"walking"``); both are accepted.
        """
        return cls(
            coordinate=Coordinate(lat=float(record["lat"]), lng=float(record["lng"])),
            transit=_parse_transit(record.get("transit")),
        )


@dataclass(frozen=True, slots=True)
class DirectionsRequest:
    origin: Coordinate
    destination: Coordinate
    mode: TravelMode


@dataclass(frozen=True, slots=True)
class Leg:
    index: int
    origin: Coordinate
    destination: Coordinate
    mode: TravelMode

    @property
    def request(self) -> DirectionsRequest:
        return DirectionsRequest(origin=self.origin, destination=self.destination, mode=self.mode)


# --- Directions provider outcomes (closed set) ---
@dataclass(slots=True)
class DirectionsSuccess:
    polyline: str | None = None
    distance_meters: int | None = None
    duration_seconds: int | None = None
    steps: list[dict[str, Any]] = field(default_factory=list)
    raw: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class RateLimited:
    status: str = "OVER_QUERY_LIMIT"


@dataclass(frozen=True, slots=True)
class ProviderFailure:
    status: str
    message: str | None = None


DirectionsOutcome = DirectionsSuccess | RateLimited | ProviderFailure


@dataclass(frozen=True, slots=True)
class PolylineStyle:
    color: str = "#1E88E5"
    weight: int = 5
    opacity: float = 0.8


@dataclass(frozen=True, slots=True)
class Itinerary:
    errands: tuple[str, ...] = ()
    origin: str = CURRENT_LOCATION_LABEL
    destination: str = CURRENT_LOCATION_LABEL

    def to_dict(self) -> dict[str, Any]:
        return {
            "origin": self.origin,
            "errands": list(self.errands),
            "destination": self.destination,
        }
