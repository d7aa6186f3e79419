from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .errors import LegFailedError
from .types import Itinerary

logger = logging.getLogger(__name__)


@dataclass
class ItineraryBoard:
    """Display collaborator that keeps the latest itinerary and failure."""

    itinerary: Itinerary | None = None
    failure: LegFailedError | None = None
    published: int = 0

    def publish_itinerary(self, itinerary: Itinerary) -> None:
        self.itinerary = itinerary
        self.failure = None
        self.published += 1

    def report_failure(self, error: LegFailedError) -> None:
        self.failure = error
        logger.warning("Itinerary incomplete: %s", error)
