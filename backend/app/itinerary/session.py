from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from .errors import LegFailedError
from .planner import LegPlan
from .types import Leg, RouteStop

if TYPE_CHECKING:
    from .base import RouteRenderer

logger = logging.getLogger(__name__)


class SessionState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    RETRY_WAIT = "retry_wait"  # running, waiting out a rate limit
    COMPLETE = "complete"
    FAILED = "failed"
    CANCELLED = "cancelled"  # superseded by a newer session


TERMINAL_STATES = frozenset({SessionState.COMPLETE, SessionState.FAILED, SessionState.CANCELLED})


@dataclass(eq=False)
class RouteSession:
    """
    State of one "compute route" invocation.

    ``current_leg_index`` counts successfully rendered legs, so it is also the
    index of the leg in progress. It never exceeds ``len(stops) - 1``, which is
    the value it holds once the session is complete.
    """

    plan: LegPlan
    token: UUID = field(default_factory=uuid4)
    current_leg_index: int = 0
    rendered_legs: list[Any] = field(default_factory=list)
    state: SessionState = SessionState.IDLE
    error: LegFailedError | None = None
    task: asyncio.Task | None = field(default=None, repr=False)

    @property
    def stops(self) -> tuple[RouteStop, ...]:
        return self.plan.stops

    @property
    def legs(self) -> tuple[Leg, ...]:
        return self.plan.legs

    @property
    def is_complete(self) -> bool:
        return self.current_leg_index == len(self.stops) - 1

    @property
    def is_finished(self) -> bool:
        return self.state in TERMINAL_STATES

    async def wait(self, timeout: float | None = None) -> SessionState:
        """Wait for the sequencer task to finish and return the final state."""
        if self.task is None:
            return self.state
        try:
            await asyncio.wait_for(asyncio.shield(self.task), timeout=timeout)
        except asyncio.CancelledError:
            if not self.task.cancelled():
                raise
        return self.state


def clear_session(session: RouteSession, renderer: RouteRenderer) -> int:
    """
    Remove every rendered leg of ``session`` from the display.

    Returns the number of legs removed. Clearing an empty session does nothing.
    """
    if not session.rendered_legs:
        return 0
    handles, session.rendered_legs = session.rendered_legs, []
    for handle in handles:
        renderer.unrender(handle)
    renderer.clear_markers()
    logger.debug("Cleared %d rendered legs for session %s", len(handles), session.token)
    return len(handles)


__all__ = ["RouteSession", "SessionState", "TERMINAL_STATES", "clear_session"]
