#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.app.directions import GoogleDirectionsProvider  # noqa: E402
from backend.app.errand_registry import ErrandRegistry  # noqa: E402
from backend.app.itinerary import (  # noqa: E402
    ItineraryError,
    LegPlanner,
    RetryPolicy,
    RouteOrchestrator,
    RouteSession,
)
from backend.app.itinerary.display import ItineraryBoard  # noqa: E402
from backend.app.itinerary.errors import DirectionsConfigError  # noqa: E402
from backend.app.itinerary.rendering import GeoJsonRenderer  # noqa: E402
from backend.app.logging_config import configure_structlog  # noqa: E402
from backend.app.optimizer_client import parse_route_response  # noqa: E402


def load_errands(path: Path) -> ErrandRegistry:
    registry = ErrandRegistry()
    for record in json.loads(path.read_text(encoding="utf-8")):
        registry.add(
            float(record["lat"]),
            float(record["lng"]),
            record["place_name"],
            record["errand_name"],
        )
    return registry


async def run(args: argparse.Namespace) -> tuple[RouteSession, ItineraryBoard, GeoJsonRenderer]:
    stops = parse_route_response(args.route.read_bytes())
    errands = load_errands(args.errands) if args.errands else ErrandRegistry()
    provider = GoogleDirectionsProvider()
    renderer = GeoJsonRenderer()
    board = ItineraryBoard()
    policy = RetryPolicy.from_settings()
    if args.max_attempts is not None:
        policy = RetryPolicy(delay_seconds=policy.delay_seconds, max_attempts=args.max_attempts)
    orchestrator = RouteOrchestrator(
        provider,
        renderer,
        errands=errands,
        display=board,
        planner=LegPlanner.from_settings(),
        policy=policy,
    )
    try:
        session = await orchestrator.compute_route(stops)
    finally:
        await provider.aclose()
    return session, board, renderer


def main() -> None:
    parser = argparse.ArgumentParser(description="Route an ordered errand list leg by leg.")
    parser.add_argument("route", type=Path, help="JSON file with the ordered stops [{lat, lng, transit}]")
    parser.add_argument("--errands", type=Path, help="JSON file with known errands")
    parser.add_argument("--max-attempts", type=int, help="Give up on a leg after this many rate-limited requests")
    parser.add_argument("--geojson", type=Path, help="Write rendered legs and markers to this file")
    parser.add_argument("--json", action="store_true", help="Emit JSON instead of text")
    args = parser.parse_args()

    configure_structlog()
    try:
        session, board, renderer = asyncio.run(run(args))
    except (ItineraryError, DirectionsConfigError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(2)

    if args.geojson:
        args.geojson.write_text(
            json.dumps(renderer.to_feature_collection(), indent=2), encoding="utf-8"
        )

    itinerary = board.itinerary.to_dict() if board.itinerary else {}
    if args.json:
        payload = {
            "session": str(session.token),
            "state": session.state.value,
            "itinerary": itinerary,
            "completed_legs": session.current_leg_index,
            "total_legs": len(session.legs),
            "error": str(session.error) if session.error else None,
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        print(f"Start: {itinerary.get('origin')}")
        for number, label in enumerate(itinerary.get("errands", []), start=1):
            print(f"  {number}. {label}")
        print(f"End: {itinerary.get('destination')}")
        print(f"{session.current_leg_index}/{len(session.legs)} legs routed ({session.state.value})")
        if session.error:
            print(f"error: {session.error}", file=sys.stderr)

    if session.error:
        sys.exit(1)


if __name__ == "__main__":
    main()
