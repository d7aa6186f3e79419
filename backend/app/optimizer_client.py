"""
Client for the stop-ordering optimizer backend.

The optimizer solves the visiting order (TSP when every errand has a single
location, generalized TSP when an errand can be done at one of several
places) and answers with the ordered route that the orchestrator consumes.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import Any

import httpx

from .itinerary.errors import OptimizerError
from .itinerary.types import Coordinate, RouteStop
from .json_utils import extract_json_list
from .settings import settings

logger = logging.getLogger(__name__)


def build_optimizer_request(
    origin: Coordinate,
    errand_groups: Sequence[Sequence[Coordinate]],
    *,
    use_gtsp: bool | None = None,
) -> dict[str, Any]:
    """
    Build the optimizer payload for a round trip from ``origin``.

    Each entry of ``errand_groups`` lists the candidate locations for one
    errand; the group number on the wire is the errand's 1-based position
    (group 0 is the origin). ``use_gtsp`` forces the algorithm; by default
    GTSP is chosen only when some errand offers more than one location.
    """
    if use_gtsp is None:
        use_gtsp = any(len(group) > 1 for group in errand_groups)

    origin_record = {"lat": origin.lat, "lng": origin.lng, "group": 0}
    waypoints = [
        {"lat": point.lat, "lng": point.lng, "group": group_number}
        for group_number, group in enumerate(errand_groups, start=1)
        for point in group
    ]
    return {
        "algorithm": "gtsp" if use_gtsp else "tsp",
        "data": {
            "origin": origin_record,
            "destination": dict(origin_record),
            "waypoints": waypoints,
        },
    }


def parse_route_response(raw: str | bytes) -> list[RouteStop]:
    try:
        records = extract_json_list(raw)
        return [RouteStop.from_record(record) for record in records]
    except (ValueError, KeyError, TypeError) as exc:
        raise OptimizerError(f"Malformed optimizer response: {exc}") from exc


class OptimizerClient:
    def __init__(
        self,
        url: str | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ):
        self.url = url or settings.OPTIMIZER_URL
        self.timeout = timeout if timeout is not None else settings.OPTIMIZER_TIMEOUT_SECONDS
        self._client = client

    async def order_stops(self, payload: dict[str, Any]) -> list[RouteStop]:
        started = time.perf_counter()
        try:
            if self._client is not None:
                resp = await self._client.post(self.url, json=payload, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    resp = await client.post(self.url, json=payload)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise OptimizerError(f"Optimizer request failed: {exc}") from exc

        stops = parse_route_response(resp.content)
        logger.info(
            "Optimizer algorithm=%s waypoints=%d stops=%d latency=%.1fms",
            payload.get("algorithm"),
            len(payload.get("data", {}).get("waypoints", [])),
            len(stops),
            (time.perf_counter() - started) * 1000,
        )
        return stops


__all__ = ["OptimizerClient", "build_optimizer_request", "parse_route_response"]
