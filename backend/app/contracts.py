from __future__ import annotations

from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from .itinerary.types import Coordinate, RouteStop


# --- Inbound ---
class CoordinateIn(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)

    def to_coordinate(self) -> Coordinate:
        return Coordinate(lat=self.lat, lng=self.lng)


class RouteStopIn(CoordinateIn):
    transit: bool = False

    @field_validator("transit", mode="before")
    @classmethod
    def _mode_string(cls, value: Any) -> Any:
        # The optimizer sends the travel mode name instead of a flag.
        if isinstance(value, str) and value.strip().lower() in {"transit", "walking"}:
            return value.strip().lower() == "transit"
        if value is None:
            return False
        return value

    def to_stop(self) -> RouteStop:
        return RouteStop(coordinate=self.to_coordinate(), transit=self.transit)


class ErrandIn(CoordinateIn):
    place_name: str = Field(min_length=1, max_length=120)
    errand_name: str = Field(min_length=1, max_length=120)


class ItineraryRequest(BaseModel):
    stops: list[RouteStopIn]
    # When given, these replace the registered errands for label matching.
    errands: list[ErrandIn] | None = None


class OptimizeRequest(BaseModel):
    origin: CoordinateIn
    errand_groups: list[list[CoordinateIn]] = Field(min_length=1)
    use_gtsp: bool | None = None


# --- Outbound ---
class ErrandOut(BaseModel):
    id: UUID
    lat: float
    lng: float
    place_name: str
    errand_name: str
    label: str


class ItineraryOut(BaseModel):
    origin: str
    errands: list[str] = Field(default_factory=list)
    destination: str


class LegOut(BaseModel):
    index: int
    mode: Literal["walking", "transit"]
    origin: CoordinateIn
    destination: CoordinateIn
    distance_meters: int | None = None
    duration_seconds: int | None = None
    path: list[tuple[float, float]] = Field(default_factory=list)


class ItineraryResponse(BaseModel):
    session: UUID
    state: Literal["idle", "running", "retry_wait", "complete", "failed", "cancelled"]
    itinerary: ItineraryOut
    completed_legs: int
    total_legs: int
    legs: list[LegOut] = Field(default_factory=list)
    error: str | None = None
    geojson: dict[str, Any] | None = None
