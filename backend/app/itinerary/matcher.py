"""Match route stops back to the errands the user asked for."""

from __future__ import annotations

from collections.abc import Iterable

from .types import Coordinate, ErrandDescriptor

# Provider-returned coordinates differ from user-entered ones in the last digits.
EPSILON = 0.00001


def within_epsilon(a: Coordinate, b: Coordinate, epsilon: float = EPSILON) -> bool:
    """Per-axis tolerance equality; both axes must be strictly inside epsilon."""
    return abs(a.lat - b.lat) < epsilon and abs(a.lng - b.lng) < epsilon


class ErrandMatcher:
    def __init__(self, epsilon: float = EPSILON):
        self.epsilon = epsilon

    def describe(
        self, point: Coordinate, known_errands: Iterable[ErrandDescriptor]
    ) -> ErrandDescriptor | None:
        """
        Return the first known errand within tolerance of ``point``.

        Errands are scanned in the given order, so if two errands sit within
        tolerance of each other the earlier one wins. ``None`` means the stop is
        a plain waypoint and the caller should use a generic label.
        """
        for errand in known_errands:
            if within_epsilon(errand.coordinate, point, self.epsilon):
                return errand
        return None


__all__ = ["EPSILON", "ErrandMatcher", "within_epsilon"]
