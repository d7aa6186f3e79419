import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Never reach real services from tests
os.environ["SENTRY_DSN"] = ""
os.environ.setdefault("GOOGLE_MAPS_API_KEY", "test-key")

from backend.app.itinerary import RetryPolicy  # noqa: E402
from helpers import RecordingDisplay, RecordingRenderer  # noqa: E402


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def display() -> RecordingDisplay:
    return RecordingDisplay()


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def instant_policy(sleeps) -> RetryPolicy:
    """Retry policy that records requested delays instead of waiting."""

    async def record_sleep(delay: float) -> None:
        sleeps.append(delay)

    return RetryPolicy(delay_seconds=1.0, sleep=record_sleep)
