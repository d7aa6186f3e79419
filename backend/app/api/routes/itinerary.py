from __future__ import annotations

from collections.abc import Sequence

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from ...contracts import (
    CoordinateIn,
    ItineraryOut,
    ItineraryRequest,
    ItineraryResponse,
    LegOut,
    OptimizeRequest,
)
from ...directions import get_directions_provider
from ...errand_registry import ErrandRegistry
from ...itinerary import (
    InsufficientStopsError,
    Itinerary,
    LegPlanner,
    OptimizerError,
    RetryPolicy,
    RouteOrchestrator,
    RouteSession,
    RouteStop,
    SessionState,
)
from ...itinerary.base import DirectionsProvider, ErrandSource
from ...itinerary.display import ItineraryBoard
from ...itinerary.errors import DirectionsConfigError
from ...itinerary.rendering import GeoJsonRenderer
from ...logging_config import get_logger
from ...optimizer_client import OptimizerClient, build_optimizer_request
from ...settings import settings
from .errands import get_registry

router = APIRouter(tags=["itinerary"])
logger = get_logger(__name__)


def get_provider() -> DirectionsProvider:
    try:
        return get_directions_provider()
    except DirectionsConfigError as exc:
        raise HTTPException(503, str(exc)) from exc


def get_optimizer() -> OptimizerClient:
    return OptimizerClient()


def get_retry_policy() -> RetryPolicy:
    return RetryPolicy.from_settings()


def _build_response(
    session: RouteSession, board: ItineraryBoard, renderer: GeoJsonRenderer
) -> ItineraryResponse:
    itinerary = board.itinerary or Itinerary()
    legs = [
        LegOut(
            index=item.leg.index,
            mode=item.leg.mode.value,
            origin=CoordinateIn(lat=item.leg.origin.lat, lng=item.leg.origin.lng),
            destination=CoordinateIn(
                lat=item.leg.destination.lat, lng=item.leg.destination.lng
            ),
            distance_meters=item.distance_meters,
            duration_seconds=item.duration_seconds,
            path=item.path,
        )
        for item in renderer.legs
    ]
    return ItineraryResponse(
        session=session.token,
        state=session.state.value,
        itinerary=ItineraryOut(**itinerary.to_dict()),
        completed_legs=session.current_leg_index,
        total_legs=len(session.legs),
        legs=legs,
        error=str(session.error) if session.error else None,
        geojson=renderer.to_feature_collection(),
    )


async def _run_itinerary(
    stops: Sequence[RouteStop],
    errands: ErrandSource,
    provider: DirectionsProvider,
    policy: RetryPolicy,
):
    renderer = GeoJsonRenderer()
    board = ItineraryBoard()
    orchestrator = RouteOrchestrator(
        provider,
        renderer,
        errands=errands,
        display=board,
        planner=LegPlanner.from_settings(),
        policy=policy,
    )
    try:
        session = orchestrator.start(stops)
    except InsufficientStopsError as exc:
        raise HTTPException(422, str(exc)) from exc

    try:
        await session.wait(timeout=settings.ITINERARY_TIMEOUT_SECONDS)
    except TimeoutError as exc:
        logger.warning("itinerary_timeout", session=str(session.token))
        raise HTTPException(504, "Route computation timed out") from exc
    finally:
        # Nothing else owns this orchestrator; a timed-out or disconnected
        # request must not leave its route task retrying.
        if not session.is_finished:
            orchestrator.cancel()
            logger.info("itinerary_abandoned", session=str(session.token))

    body = _build_response(session, board, renderer)
    logger.info(
        "itinerary_finished",
        session=str(session.token),
        state=session.state.value,
        legs=body.completed_legs,
    )
    if session.state is SessionState.FAILED:
        return JSONResponse(status_code=502, content=body.model_dump(mode="json"))
    return body


@router.post("/itinerary", response_model=ItineraryResponse)
async def compute_itinerary(
    payload: ItineraryRequest,
    registered: ErrandRegistry = Depends(get_registry),
    provider: DirectionsProvider = Depends(get_provider),
    policy: RetryPolicy = Depends(get_retry_policy),
):
    errands: ErrandSource = registered
    if payload.errands is not None:
        errands = ErrandRegistry()
        for item in payload.errands:
            errands.add(item.lat, item.lng, item.place_name, item.errand_name)
    stops = [stop.to_stop() for stop in payload.stops]
    return await _run_itinerary(stops, errands, provider, policy)


@router.post("/itinerary/optimize", response_model=ItineraryResponse)
async def optimize_itinerary(
    payload: OptimizeRequest,
    registered: ErrandRegistry = Depends(get_registry),
    provider: DirectionsProvider = Depends(get_provider),
    optimizer: OptimizerClient = Depends(get_optimizer),
    policy: RetryPolicy = Depends(get_retry_policy),
):
    request = build_optimizer_request(
        payload.origin.to_coordinate(),
        [[point.to_coordinate() for point in group] for group in payload.errand_groups],
        use_gtsp=payload.use_gtsp,
    )
    try:
        stops = await optimizer.order_stops(request)
    except OptimizerError as exc:
        logger.warning("optimizer_failed", error=str(exc))
        raise HTTPException(502, str(exc)) from exc
    return await _run_itinerary(stops, registered, provider, policy)


__all__ = ["router", "get_provider", "get_optimizer", "get_retry_policy"]
