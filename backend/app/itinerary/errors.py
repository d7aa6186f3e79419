from __future__ import annotations


class ItineraryError(Exception):
    """Base class for itinerary computation errors."""


class InsufficientStopsError(ItineraryError):
    def __init__(self, count: int) -> None:
        super().__init__(f"A route needs at least 2 stops, got {count}")
        self.count = count


class LegFailedError(ItineraryError):
    """A leg could not be routed; the session stops at that leg."""

    def __init__(self, leg_index: int, reason: str, message: str | None = None) -> None:
        detail = f"Leg {leg_index} failed: {reason}"
        if message:
            detail = f"{detail} ({message})"
        super().__init__(detail)
        self.leg_index = leg_index
        self.reason = reason
        self.message = message


class OptimizerError(ItineraryError):
    """The stop-ordering backend failed or returned an unusable payload."""


class DirectionsConfigError(RuntimeError):
    pass
