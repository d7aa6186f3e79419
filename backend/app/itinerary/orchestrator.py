from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence

from .base import DirectionsProvider, ErrandSource, ItineraryDisplay, RouteRenderer
from .planner import LegPlanner
from .sequencer import RetryPolicy, RouteSequencer
from .session import RouteSession, SessionState, clear_session
from .types import Leg, PolylineStyle, RouteStop

logger = logging.getLogger(__name__)


class RouteOrchestrator:
    """
    Owns the active route session for one rendering surface.

    Each ``start`` plans the new route, supersedes and clears the previous
    session, publishes the itinerary, and launches the sequencer as a task.
    Only the active session may touch the renderer; a superseded session's
    late responses and pending retries are discarded.
    """

    def __init__(
        self,
        provider: DirectionsProvider,
        renderer: RouteRenderer,
        *,
        errands: ErrandSource | None = None,
        display: ItineraryDisplay | None = None,
        planner: LegPlanner | None = None,
        policy: RetryPolicy | None = None,
        style_for: Callable[[Leg], PolylineStyle] | None = None,
    ):
        self.renderer = renderer
        self.errands = errands
        self.display = display
        self.planner = planner or LegPlanner()
        self.sequencer = RouteSequencer(
            provider,
            renderer,
            policy=policy,
            display=display,
            style_for=style_for,
        )
        self._active: RouteSession | None = None

    @property
    def active_session(self) -> RouteSession | None:
        return self._active

    def is_active(self, session: RouteSession) -> bool:
        return self._active is not None and self._active.token == session.token

    def start(self, stops: Sequence[RouteStop]) -> RouteSession:
        """
        Begin a new route session; must be called from a running event loop.

        Raises:
            InsufficientStopsError: fewer than two stops; nothing is requested
                and the previous session is left untouched.
        """
        known = list(self.errands.list_known_errands()) if self.errands is not None else []
        plan = self.planner.plan(stops, known)

        session = RouteSession(plan=plan)
        self.cancel()
        self._active = session
        logger.info(
            "Starting route session %s with %d legs", session.token, len(plan.legs)
        )

        if self.display is not None:
            self.display.publish_itinerary(plan.itinerary)

        loop = asyncio.get_running_loop()
        session.task = loop.create_task(self.sequencer.run(session, self.is_active))
        return session

    async def compute_route(
        self, stops: Sequence[RouteStop], *, timeout: float | None = None
    ) -> RouteSession:
        """Start a session and wait for it to finish."""
        session = self.start(stops)
        await session.wait(timeout=timeout)
        return session

    def cancel(self) -> None:
        """Supersede the active session, if any, and clear what it rendered."""
        previous, self._active = self._active, None
        if previous is None:
            return
        if not previous.is_finished:
            previous.state = SessionState.CANCELLED
            logger.info(
                "Superseding route session %s at leg %d",
                previous.token,
                previous.current_leg_index,
            )
        if previous.task is not None and not previous.task.done():
            previous.task.cancel()
        clear_session(previous, self.renderer)

    def clear(self, session: RouteSession | None = None) -> int:
        target = session or self._active
        if target is None:
            return 0
        return clear_session(target, self.renderer)


__all__ = ["RouteOrchestrator"]
