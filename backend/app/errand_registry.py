"""In-process registry of the errands the user has placed on the map."""

from __future__ import annotations

import logging
from threading import Lock
from uuid import UUID, uuid4

from .itinerary.types import Coordinate, ErrandDescriptor

logger = logging.getLogger(__name__)


class ErrandRegistry:
    def __init__(self) -> None:
        self._errands: dict[UUID, ErrandDescriptor] = {}
        self._lock = Lock()

    def add(self, lat: float, lng: float, place_name: str, errand_name: str) -> UUID:
        errand = ErrandDescriptor(
            coordinate=Coordinate(lat=lat, lng=lng),
            place_name=place_name,
            errand_name=errand_name,
        )
        errand_id = uuid4()
        with self._lock:
            self._errands[errand_id] = errand
        logger.info("Registered errand %s (%s)", errand_id, errand.label)
        return errand_id

    def get(self, errand_id: UUID) -> ErrandDescriptor | None:
        with self._lock:
            return self._errands.get(errand_id)

    def remove(self, errand_id: UUID) -> bool:
        with self._lock:
            return self._errands.pop(errand_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._errands.clear()

    def items(self) -> list[tuple[UUID, ErrandDescriptor]]:
        with self._lock:
            return list(self._errands.items())

    def list_known_errands(self) -> list[ErrandDescriptor]:
        """Errands in the order they were registered (matching is first-wins)."""
        with self._lock:
            return list(self._errands.values())


registry = ErrandRegistry()

__all__ = ["ErrandRegistry", "registry"]
