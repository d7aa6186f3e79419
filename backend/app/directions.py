from __future__ import annotations

import logging
import time
from functools import lru_cache
from typing import Any

import httpx

from .itinerary.errors import DirectionsConfigError
from .itinerary.types import (
    DirectionsOutcome,
    DirectionsRequest,
    DirectionsSuccess,
    ProviderFailure,
    RateLimited,
)
from .settings import settings

logger = logging.getLogger(__name__)

STATUS_OK = "OK"
STATUS_OVER_QUERY_LIMIT = "OVER_QUERY_LIMIT"


def _parse_success(data: dict[str, Any]) -> DirectionsSuccess:
    route = data["routes"][0]
    legs = route.get("legs") or []
    leg = legs[0] if legs else {}
    distance = (leg.get("distance") or {}).get("value")
    duration = (leg.get("duration") or {}).get("value")
    return DirectionsSuccess(
        polyline=(route.get("overview_polyline") or {}).get("points"),
        distance_meters=int(distance) if distance is not None else None,
        duration_seconds=int(duration) if duration is not None else None,
        steps=list(leg.get("steps") or []),
        raw=data,
    )


class GoogleDirectionsProvider:
    """
    Single-leg directions over the Google Directions JSON API.

    Every response maps onto exactly one outcome: ``OK`` is a success,
    ``OVER_QUERY_LIMIT`` or HTTP 429 is a rate limit, and any other status,
    HTTP error or transport error is a failure carrying that status.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key or settings.GOOGLE_MAPS_API_KEY
        if not self.api_key:
            raise DirectionsConfigError("GOOGLE_MAPS_API_KEY not configured")
        self.base_url = base_url or settings.DIRECTIONS_API_BASE
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            timeout = httpx.Timeout(
                settings.DIRECTIONS_TIMEOUT_SECONDS,
                connect=settings.DIRECTIONS_CONNECT_TIMEOUT_SECONDS,
            )
            self._client = httpx.AsyncClient(timeout=timeout)
        return self._client

    async def route(self, request: DirectionsRequest) -> DirectionsOutcome:
        params = {
            "origin": request.origin.as_param(),
            "destination": request.destination.as_param(),
            "mode": request.mode.value,
            "key": self.api_key,
        }
        started = time.perf_counter()
        try:
            resp = await self._get_client().get(self.base_url, params=params)
        except httpx.HTTPError as exc:
            logger.warning("Directions request failed: %s", exc)
            return ProviderFailure(status="NETWORK_ERROR", message=str(exc))

        if resp.status_code == 429:
            return RateLimited(status="HTTP_429")
        if resp.status_code >= 400:
            return ProviderFailure(status=f"HTTP_{resp.status_code}", message=resp.text[:200])

        try:
            data = resp.json()
        except ValueError:
            return ProviderFailure(status="INVALID_RESPONSE", message="Invalid JSON from provider")

        status = data.get("status")
        if status == STATUS_OVER_QUERY_LIMIT:
            return RateLimited(status=status)
        if status != STATUS_OK:
            return ProviderFailure(
                status=status or "UNKNOWN", message=data.get("error_message")
            )
        if not data.get("routes"):
            return ProviderFailure(status="NO_ROUTES")

        result = _parse_success(data)
        elapsed = (time.perf_counter() - started) * 1000
        logger.info(
            "Directions origin=(%.5f,%.5f) dest=(%.5f,%.5f) mode=%s distance=%sm duration=%ss latency=%.1fms",
            request.origin.lat,
            request.origin.lng,
            request.destination.lat,
            request.destination.lng,
            request.mode.value,
            result.distance_meters,
            result.duration_seconds,
            elapsed,
        )
        return result

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None


@lru_cache(maxsize=1)
def get_directions_provider() -> GoogleDirectionsProvider:
    return GoogleDirectionsProvider()


__all__ = ["GoogleDirectionsProvider", "get_directions_provider"]
