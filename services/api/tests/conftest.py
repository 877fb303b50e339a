"""
Shared test fixtures for the StreetVoice API test suite.

Provides:
- factory functions for RawPost and Report
- a ReportService backed by a tmp_path store with seeded randomness
- async FastAPI test client with the service and a fake Reddit client
  injected into app state (no network, no lifespan)
"""

import os
import random
import time
import uuid
from datetime import datetime, timezone
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

# Ensure test env vars before any app imports
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("SENTRY_DSN", "")
os.environ.setdefault("AUTOSAVE", "true")

from services.api.pipeline.normalizer import Normalizer  # noqa: E402
from services.api.reports.service import ReportService  # noqa: E402
from services.api.reports.store import ReportStore  # noqa: E402
from services.api.reports.types import RawPost, Report  # noqa: E402
from services.api.scrapers.base import FetchResult  # noqa: E402
from services.api.scrapers.reddit import mock_city_complaints  # noqa: E402


# ---------------------------------------------------------------------------
# Factory functions
# ---------------------------------------------------------------------------

def _short_id() -> str:
    return uuid.uuid4().hex[:8]


def make_raw_post(**overrides: Any) -> RawPost:
    """Factory for a relevant, well-formed Reddit post in r/nyc."""
    post_id = overrides.pop("id", _short_id())
    base = {
        "id": post_id,
        "title": "Broken streetlight on my block",
        "selftext": "The streetlight has been out for two weeks and nobody will fix it.",
        "author": "test_user",
        "created_utc": 1_700_000_000.0,
        "score": 12,
        "num_comments": 3,
        "subreddit": "nyc",
        "permalink": f"/r/nyc/comments/{post_id}/test/",
        "url": f"https://www.reddit.com/r/nyc/comments/{post_id}/test/",
    }
    base.update(overrides)
    return RawPost(**base)


def make_report(**overrides: Any) -> Report:
    """Factory for an unanalyzed Report in Manhattan."""
    base = {
        "id": f"reddit_{_short_id()}",
        "text": "Broken streetlight on my block",
        "location": "New York, Manhattan",
        "district": "Manhattan",
        "coordinates": (40.7128, -74.006),
        "timestamp": datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc).isoformat(),
        "analyzed": False,
    }
    base.update(overrides)
    return Report(**base)


def make_analyzed_report(**overrides: Any) -> Report:
    """Factory for an analyzed Report (Roads / negative / severity 6)."""
    base = {
        "text": "Pothole on Main Street damaged my car",
        "category": "Roads",
        "sentiment": "negative",
        "emotion": "frustration",
        "severity": 6,
        "analyzed": True,
    }
    base.update(overrides)
    return make_report(**base)


# ---------------------------------------------------------------------------
# Fake Reddit client
# ---------------------------------------------------------------------------

class FakeRedditClient:
    """Stands in for RedditClient in router tests."""

    def __init__(self, result: FetchResult | None = None):
        self.result = result or FetchResult(posts=[])
        self.calls: list[str] = []

    async def get_city_complaints(self) -> FetchResult:
        self.calls.append("reddit")
        return self.result

    async def get_mock_city_complaints(self) -> FetchResult:
        self.calls.append("mock")
        return FetchResult(posts=mock_city_complaints(now=time.time()))

    async def aclose(self) -> None:
        pass


# ---------------------------------------------------------------------------
# Service / app fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def store(tmp_path) -> ReportStore:
    return ReportStore(tmp_path / "data")


@pytest.fixture
def normalizer() -> Normalizer:
    return Normalizer(district_fallback="random", rng=random.Random(1234))


@pytest.fixture
def service(store, normalizer) -> ReportService:
    return ReportService(store=store, normalizer=normalizer, autosave=True)


@pytest.fixture
def fake_reddit() -> FakeRedditClient:
    return FakeRedditClient()


@pytest.fixture
async def app(service, fake_reddit):
    """Test FastAPI app with a tmp_path-backed service and a fake Reddit client."""
    from services.api.main import app as _app
    from services.api.config import settings

    _app.state.settings = settings
    _app.state.report_service = service
    _app.state.reddit_client = fake_reddit
    yield _app
    _app.state.report_service = None
    _app.state.reddit_client = None


@pytest.fixture
async def client(app):
    """Async HTTP client bound to the test app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
