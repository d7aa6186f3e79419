"""HTTP surface tests for errands and itinerary endpoints."""

import asyncio

import httpx
import pytest
from backend.app.api.routes.errands import get_registry
from backend.app.api.routes.itinerary import (
    _run_itinerary,
    get_optimizer,
    get_provider,
    get_retry_policy,
)
from backend.app.errand_registry import ErrandRegistry
from backend.app.itinerary import Coordinate, ProviderFailure, RateLimited, RetryPolicy
from backend.app.main import app
from backend.app.optimizer_client import OptimizerClient
from fastapi import HTTPException
from fastapi.testclient import TestClient
from helpers import ScriptedProvider, make_stops, settle

ROUND_TRIP = {
    "stops": [
        {"lat": 0, "lng": 0, "transit": False},
        {"lat": 1, "lng": 1, "transit": False},
        {"lat": 2, "lng": 2, "transit": True},
        {"lat": 0, "lng": 0, "transit": False},
    ]
}


async def _no_wait(delay: float) -> None:
    return None


@pytest.fixture
def registry() -> ErrandRegistry:
    return ErrandRegistry()


@pytest.fixture
def provider() -> ScriptedProvider:
    return ScriptedProvider()


@pytest.fixture
def client(registry, provider):
    app.dependency_overrides[get_registry] = lambda: registry
    app.dependency_overrides[get_provider] = lambda: provider
    app.dependency_overrides[get_retry_policy] = lambda: RetryPolicy(sleep=_no_wait)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class TestHealth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "healthy"
        assert body["service"] == "errand-router"

    def test_request_id_echoed(self, client):
        resp = client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert resp.headers["X-Request-ID"] == "abc-123"


class TestErrandEndpoints:
    def test_create_list_delete(self, client, registry):
        resp = client.post(
            "/v1/errands",
            json={"lat": 1, "lng": 1, "place_name": "Library", "errand_name": "Return books"},
        )
        assert resp.status_code == 201
        created = resp.json()
        assert created["label"] == "Library: Return books"

        listed = client.get("/v1/errands").json()
        assert [item["id"] for item in listed] == [created["id"]]

        assert client.delete(f"/v1/errands/{created['id']}").status_code == 204
        assert client.delete(f"/v1/errands/{created['id']}").status_code == 404
        assert registry.list_known_errands() == []

    def test_clear(self, client, registry):
        registry.add(1.0, 1.0, "Library", "Return books")
        assert client.delete("/v1/errands").status_code == 204
        assert registry.list_known_errands() == []

    def test_invalid_coordinates_rejected(self, client):
        resp = client.post(
            "/v1/errands",
            json={"lat": 95, "lng": 1, "place_name": "Nowhere", "errand_name": "Nothing"},
        )
        assert resp.status_code == 422


class TestItineraryEndpoint:
    def test_round_trip(self, client, registry, provider):
        registry.add(1.0, 1.0, "Library", "Return books")

        resp = client.post("/v1/itinerary", json=ROUND_TRIP)

        assert resp.status_code == 200
        body = resp.json()
        assert body["state"] == "complete"
        assert body["itinerary"] == {
            "origin": "Current Location",
            "errands": ["Library: Return books", "Walk to point B"],
            "destination": "Current Location",
        }
        assert body["completed_legs"] == 3
        assert body["total_legs"] == 3
        assert [leg["mode"] for leg in body["legs"]] == ["walking", "transit", "walking"]
        assert body["error"] is None
        kinds = [f["properties"]["kind"] for f in body["geojson"]["features"]]
        assert kinds.count("leg") == 3
        assert kinds.count("marker") == 3
        assert len(provider.calls) == 3

    def test_inline_errands_replace_registry(self, client, registry):
        registry.add(1.0, 1.0, "Library", "Return books")
        payload = dict(
            ROUND_TRIP,
            errands=[{"lat": 2, "lng": 2, "place_name": "Station", "errand_name": "Top up card"}],
        )

        body = client.post("/v1/itinerary", json=payload).json()

        assert body["itinerary"]["errands"] == ["Walk to point A", "Station: Top up card"]

    def test_transit_mode_string_accepted(self, client):
        payload = {
            "stops": [
                {"lat": 0, "lng": 0, "transit": None},
                {"lat": 1, "lng": 1, "transit": "transit"},
            ]
        }
        body = client.post("/v1/itinerary", json=payload).json()
        assert body["legs"][0]["mode"] == "transit"

    def test_single_stop_is_rejected(self, client, provider):
        resp = client.post("/v1/itinerary", json={"stops": [{"lat": 0, "lng": 0}]})
        assert resp.status_code == 422
        assert "at least 2 stops" in resp.json()["detail"]
        assert provider.calls == []

    def test_rate_limited_leg_still_completes(self, client):
        app.dependency_overrides[get_provider] = lambda: ScriptedProvider(
            {Coordinate(2, 2): [RateLimited(), RateLimited()]}
        )
        body = client.post("/v1/itinerary", json=ROUND_TRIP).json()
        assert body["state"] == "complete"

    def test_provider_failure_returns_502_with_partial_route(self, client):
        app.dependency_overrides[get_provider] = lambda: ScriptedProvider(
            {Coordinate(2, 2): [ProviderFailure("ZERO_RESULTS")]}
        )

        resp = client.post("/v1/itinerary", json=ROUND_TRIP)

        assert resp.status_code == 502
        body = resp.json()
        assert body["state"] == "failed"
        assert body["completed_legs"] == 1
        assert len(body["legs"]) == 1
        assert "ZERO_RESULTS" in body["error"]


class TestOptimizeEndpoint:
    def _use_optimizer(self, handler):
        app.dependency_overrides[get_optimizer] = lambda: OptimizerClient(
            "http://optimizer.test/cpp",
            client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

    def test_optimize_then_route(self, client):
        self._use_optimizer(
            lambda request: httpx.Response(
                200,
                text='[{"lat": 0, "lng": 0}, {"lat": 1, "lng": 1}, {"lat": 0, "lng": 0}]',
            )
        )
        payload = {"origin": {"lat": 0, "lng": 0}, "errand_groups": [[{"lat": 1, "lng": 1}]]}

        resp = client.post("/v1/itinerary/optimize", json=payload)

        assert resp.status_code == 200
        body = resp.json()
        assert body["state"] == "complete"
        assert body["itinerary"]["errands"] == ["Walk to point A"]

    def test_optimizer_failure_is_502(self, client):
        self._use_optimizer(lambda request: httpx.Response(500, text="solver crashed"))
        payload = {"origin": {"lat": 0, "lng": 0}, "errand_groups": [[{"lat": 1, "lng": 1}]]}

        resp = client.post("/v1/itinerary/optimize", json=payload)

        assert resp.status_code == 502

    def test_empty_errand_groups_rejected(self, client):
        resp = client.post(
            "/v1/itinerary/optimize", json={"origin": {"lat": 0, "lng": 0}, "errand_groups": []}
        )
        assert resp.status_code == 422


class AlwaysRateLimited:
    def __init__(self):
        self.calls = []

    async def route(self, request):
        self.calls.append(request)
        return RateLimited()


class TestAbandonedItinerary:
    """A request that stops waiting must also stop its route task."""

    def test_cancelled_request_stops_requesting_legs(self):
        async def scenario():
            provider = AlwaysRateLimited()
            handler = asyncio.create_task(
                _run_itinerary(
                    make_stops((0, 0), (1, 1)),
                    ErrandRegistry(),
                    provider,
                    RetryPolicy(delay_seconds=0),
                )
            )
            await settle()
            assert provider.calls

            handler.cancel()
            with pytest.raises(asyncio.CancelledError):
                await handler
            calls_at_cancel = len(provider.calls)
            await settle(50)
            return calls_at_cancel, len(provider.calls)

        calls_at_cancel, calls_later = asyncio.run(scenario())

        assert calls_later == calls_at_cancel

    def test_timeout_cancels_the_route_task(self, monkeypatch):
        from backend.app.settings import settings

        monkeypatch.setattr(settings, "ITINERARY_TIMEOUT_SECONDS", 0.01)

        async def scenario():
            provider = AlwaysRateLimited()
            with pytest.raises(HTTPException) as exc_info:
                await _run_itinerary(
                    make_stops((0, 0), (1, 1)),
                    ErrandRegistry(),
                    provider,
                    RetryPolicy(delay_seconds=0),
                )
            calls_at_timeout = len(provider.calls)
            await settle(50)
            return exc_info.value.status_code, calls_at_timeout, len(provider.calls)

        status_code, calls_at_timeout, calls_later = asyncio.run(scenario())

        assert status_code == 504
        assert calls_later == calls_at_timeout
