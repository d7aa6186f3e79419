"""In-memory rendering surface that collects legs and markers as GeoJSON."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any

from .types import Coordinate, DirectionsSuccess, Leg, PolylineStyle


def decode_polyline(encoded: str) -> list[tuple[float, float]]:
    """Decode a Google-encoded polyline string to a list of (lat, lng) points.

    See: https://developers.google.com/maps/documentation/utilities/polylinealgorithm

    Raises:
        ValueError: the string ends in the middle of a coordinate.
    """
    result: list[tuple[float, float]] = []
    index = 0
    lat = 0
    lng = 0

    while index < len(encoded):
        deltas = []
        for _ in range(2):
            shift = 0
            value = 0
            while True:
                if index >= len(encoded):
                    raise ValueError(f"Truncated polyline at offset {index}")
                b = ord(encoded[index]) - 63
                index += 1
                value |= (b & 0x1F) << shift
                shift += 5
                if b < 0x20:
                    break
            deltas.append(~(value >> 1) if (value & 1) else (value >> 1))
        lat += deltas[0]
        lng += deltas[1]
        result.append((lat / 1e5, lng / 1e5))

    return result


@dataclass(slots=True)
class RenderedLeg:
    id: int
    leg: Leg
    style: PolylineStyle
    path: list[tuple[float, float]]
    distance_meters: int | None = None
    duration_seconds: int | None = None


@dataclass(slots=True)
class Marker:
    coordinate: Coordinate
    index: int


@dataclass
class GeoJsonRenderer:
    """
    Rendering collaborator backed by plain lists.

    Legs without a provider polyline are drawn as a straight segment between
    their endpoints.
    """

    legs: list[RenderedLeg] = field(default_factory=list)
    markers: list[Marker] = field(default_factory=list)
    _ids: Any = field(default_factory=itertools.count, repr=False)

    def render(self, leg: Leg, style: PolylineStyle, result: DirectionsSuccess) -> RenderedLeg:
        if result.polyline:
            path = decode_polyline(result.polyline)
        else:
            path = [
                (leg.origin.lat, leg.origin.lng),
                (leg.destination.lat, leg.destination.lng),
            ]
        handle = RenderedLeg(
            id=next(self._ids),
            leg=leg,
            style=style,
            path=path,
            distance_meters=result.distance_meters,
            duration_seconds=result.duration_seconds,
        )
        self.legs.append(handle)
        return handle

    def unrender(self, handle: RenderedLeg) -> None:
        self.legs = [item for item in self.legs if item.id != handle.id]

    def place_marker(self, coordinate: Coordinate, index: int) -> None:
        self.markers.append(Marker(coordinate=coordinate, index=index))

    def clear_markers(self) -> None:
        self.markers.clear()

    def to_feature_collection(self) -> dict[str, Any]:
        features: list[dict[str, Any]] = []
        for item in self.legs:
            features.append(
                {
                    "type": "Feature",
                    "geometry": {
                        "type": "LineString",
                        # GeoJSON positions are [lng, lat]
                        "coordinates": [[lng, lat] for lat, lng in item.path],
                    },
                    "properties": {
                        "kind": "leg",
                        "leg_index": item.leg.index,
                        "mode": item.leg.mode.value,
                        "stroke": item.style.color,
                        "stroke-width": item.style.weight,
                        "stroke-opacity": item.style.opacity,
                        "distance_meters": item.distance_meters,
                        "duration_seconds": item.duration_seconds,
                    },
                }
            )
        for marker in self.markers:
            features.append(
                {
                    "type": "Feature",
                    "geometry": {
                        "type": "Point",
                        "coordinates": [marker.coordinate.lng, marker.coordinate.lat],
                    },
                    "properties": {"kind": "marker", "index": marker.index},
                }
            )
        return {"type": "FeatureCollection", "features": features}


__all__ = ["GeoJsonRenderer", "Marker", "RenderedLeg", "decode_polyline"]
