"""Test doubles for the route orchestrator's collaborators."""

import asyncio

from backend.app.itinerary import Coordinate, DirectionsSuccess, RouteStop


class ScriptedProvider:
    """Directions provider answering from a per-destination script.

    Destinations without a scripted outcome (or whose script ran out) succeed.
    """

    def __init__(self, script=None):
        self.calls = []
        self.script = {dest: list(outcomes) for dest, outcomes in (script or {}).items()}

    async def route(self, request):
        self.calls.append(request)
        queue = self.script.get(request.destination)
        if queue:
            return queue.pop(0)
        return DirectionsSuccess(distance_meters=100, duration_seconds=60)


class GatedProvider:
    """Directions provider whose responses the test releases by hand."""

    def __init__(self):
        self.calls = []
        self.pending = []

    async def route(self, request):
        future = asyncio.get_running_loop().create_future()
        self.calls.append(request)
        self.pending.append(future)
        return await future


class RecordingRenderer:
    def __init__(self):
        self.rendered = []
        self.unrendered = []
        self.markers = []
        self.marker_clears = 0

    def render(self, leg, style, result):
        handle = ("leg", len(self.rendered), leg)
        self.rendered.append(handle)
        return handle

    def unrender(self, handle):
        self.unrendered.append(handle)

    def place_marker(self, coordinate, index):
        self.markers.append((coordinate, index))

    def clear_markers(self):
        self.marker_clears += 1
        self.markers = []


class RecordingDisplay:
    def __init__(self):
        self.itineraries = []
        self.failures = []

    def publish_itinerary(self, itinerary):
        self.itineraries.append(itinerary)

    def report_failure(self, error):
        self.failures.append(error)


def make_stops(*points, transit=()):
    """Build route stops from (lat, lng) pairs; ``transit`` lists inbound-transit indices."""
    return [
        RouteStop(coordinate=Coordinate(lat=lat, lng=lng), transit=i in transit)
        for i, (lat, lng) in enumerate(points)
    ]


async def settle(rounds: int = 10) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)
