"""
Test configuration and fixtures for SnapCoach.

- FakeVisionProvider behind a real VisionService (no API calls)
- HistoryStore on a per-test temporary file
- TestClient with service dependency overrides
"""

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from snapcoach.api.dependencies import (
    get_history_store,
    get_session_registry,
    get_vision_service,
)
from snapcoach.main import app
from snapcoach.services.history_store import HistoryStore
from snapcoach.services.pipeline import MealSession, SessionRegistry
from snapcoach.services.vision_service import VisionService
from tests.fixtures.mocks import FakeVisionProvider, make_jpeg


# =============================================================================
# Service Fixtures
# =============================================================================


@pytest.fixture
def fake_provider() -> FakeVisionProvider:
    """Scriptable provider; configure replies per test."""
    return FakeVisionProvider()


@pytest.fixture
def vision_service(fake_provider: FakeVisionProvider) -> VisionService:
    return VisionService(fake_provider, language="English")


@pytest.fixture
def history_store(tmp_path) -> HistoryStore:
    """History file isolated to the test's temporary directory."""
    return HistoryStore(str(tmp_path / "history.json"))


@pytest.fixture
def meal_session(vision_service: VisionService, history_store: HistoryStore) -> MealSession:
    return MealSession(vision_service, history=history_store)


@pytest.fixture
def session_registry(vision_service: VisionService, history_store: HistoryStore) -> SessionRegistry:
    return SessionRegistry(vision_service, history=history_store)


@pytest.fixture
def sample_jpeg() -> bytes:
    return make_jpeg()


# =============================================================================
# API Fixtures
# =============================================================================


@pytest.fixture
def client(
    vision_service: VisionService,
    history_store: HistoryStore,
    session_registry: SessionRegistry,
) -> Generator[TestClient, None, None]:
    """
    TestClient with service dependency overrides.

    Every test gets a fresh session registry wired to the fake provider and
    the temporary history file.
    """
    app.dependency_overrides[get_vision_service] = lambda: vision_service
    app.dependency_overrides[get_history_store] = lambda: history_store
    app.dependency_overrides[get_session_registry] = lambda: session_registry

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# pytest markers
# =============================================================================


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
