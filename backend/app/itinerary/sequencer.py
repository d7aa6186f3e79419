"""
Leg-by-leg route execution against a directions provider.

Legs run strictly in order with a single request in flight. Each successful
leg is rendered before the next request goes out; rate-limited legs are
retried according to a ``RetryPolicy``; any other provider failure ends the
session in the ``FAILED`` state and is reported to the display.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .errors import LegFailedError
from .session import RouteSession, SessionState
from .types import (
    DirectionsSuccess,
    Leg,
    PolylineStyle,
    ProviderFailure,
    RateLimited,
)

if TYPE_CHECKING:
    from .base import DirectionsProvider, ItineraryDisplay, RouteRenderer

logger = logging.getLogger(__name__)

RATE_LIMIT_EXHAUSTED = "RATE_LIMIT_EXHAUSTED"
PROVIDER_ERROR = "PROVIDER_ERROR"
RENDER_ERROR = "RENDER_ERROR"

DEFAULT_STYLE = PolylineStyle()


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """
    How rate-limited legs are retried.

    Attributes:
        delay_seconds: Fixed wait between attempts when no backoff is given
        max_attempts: Requests allowed per leg; None retries until superseded
        backoff: Optional ``attempt -> seconds`` function overriding the fixed delay
        sleep: Awaitable used to wait; tests inject a controllable one
    """

    delay_seconds: float = 1.0
    max_attempts: int | None = None
    backoff: Callable[[int], float] | None = None
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    def delay_for(self, attempt: int) -> float:
        if self.backoff is not None:
            return self.backoff(attempt)
        return self.delay_seconds

    def allows_retry(self, attempts: int) -> bool:
        return self.max_attempts is None or attempts < self.max_attempts

    @classmethod
    def from_settings(cls) -> RetryPolicy:
        from ..settings import settings

        return cls(
            delay_seconds=settings.RATE_LIMIT_RETRY_DELAY_SECONDS,
            max_attempts=settings.RATE_LIMIT_MAX_ATTEMPTS,
        )


def _always_active(session: RouteSession) -> bool:
    return True


class RouteSequencer:
    def __init__(
        self,
        provider: DirectionsProvider,
        renderer: RouteRenderer,
        *,
        policy: RetryPolicy | None = None,
        display: ItineraryDisplay | None = None,
        style_for: Callable[[Leg], PolylineStyle] | None = None,
    ):
        self.provider = provider
        self.renderer = renderer
        self.policy = policy or RetryPolicy()
        self.display = display
        self.style_for = style_for or (lambda leg: DEFAULT_STYLE)

    async def run(
        self,
        session: RouteSession,
        is_active: Callable[[RouteSession], bool] = _always_active,
    ) -> SessionState:
        """
        Drive the session's legs to completion, failure, or supersession.

        ``is_active`` is consulted after every suspension point; once it returns
        False the session is abandoned without touching the renderer or its
        own state. Per-leg errors are recorded on the session, never raised.
        """
        legs = session.legs
        session.state = SessionState.RUNNING
        attempts = 0
        while session.current_leg_index < len(legs):
            leg = legs[session.current_leg_index]
            attempts += 1
            try:
                outcome = await self.provider.route(leg.request)
            except Exception as exc:
                if not is_active(session):
                    return session.state
                logger.exception("Directions provider raised for leg %d", leg.index)
                self._fail(session, leg, PROVIDER_ERROR, str(exc))
                return session.state

            if not is_active(session):
                logger.debug(
                    "Discarding leg %d response for superseded session %s",
                    leg.index,
                    session.token,
                )
                return session.state

            if isinstance(outcome, DirectionsSuccess):
                try:
                    self._publish(session, leg, outcome)
                except Exception as exc:
                    logger.exception("Rendering failed for leg %d", leg.index)
                    self._fail(session, leg, RENDER_ERROR, str(exc))
                    return session.state
                attempts = 0
                session.current_leg_index += 1
            elif isinstance(outcome, RateLimited):
                if not self.policy.allows_retry(attempts):
                    self._fail(session, leg, RATE_LIMIT_EXHAUSTED, outcome.status)
                    return session.state
                delay = self.policy.delay_for(attempts)
                session.state = SessionState.RETRY_WAIT
                logger.warning(
                    "Leg %d rate limited (attempt %d); retrying in %.2fs",
                    leg.index,
                    attempts,
                    delay,
                )
                await self.policy.sleep(delay)
                if not is_active(session):
                    logger.debug(
                        "Dropping leg %d retry for superseded session %s",
                        leg.index,
                        session.token,
                    )
                    return session.state
                session.state = SessionState.RUNNING
            elif isinstance(outcome, ProviderFailure):
                self._fail(session, leg, outcome.status, outcome.message)
                return session.state
            else:
                raise TypeError(f"Unknown directions outcome: {outcome!r}")

        session.state = SessionState.COMPLETE
        logger.info("Route session %s complete after %d legs", session.token, len(legs))
        return session.state

    def _publish(self, session: RouteSession, leg: Leg, result: DirectionsSuccess) -> None:
        handle = self.renderer.render(leg, self.style_for(leg), result)
        self.renderer.place_marker(leg.origin, leg.index)
        session.rendered_legs.append(handle)
        logger.debug("Rendered leg %d (%s)", leg.index, leg.mode.value)

    def _fail(
        self, session: RouteSession, leg: Leg, reason: str, message: str | None
    ) -> None:
        error = LegFailedError(leg.index, reason, message)
        session.error = error
        session.state = SessionState.FAILED
        logger.error("Route session %s stopped: %s", session.token, error)
        if self.display is not None:
            self.display.report_failure(error)


__all__ = [
    "RetryPolicy",
    "RouteSequencer",
    "RATE_LIMIT_EXHAUSTED",
    "PROVIDER_ERROR",
    "RENDER_ERROR",
]
