"""
Shared test fixtures for the plant operations API.

Sets test environment variables so Settings loads without a real ``.env``,
provides a TestClient that runs the application lifespan, and builds small
fixture collections of plants and RTUs for service-level tests.

CHANGELOG:
- 2026-10-07: Point HISTORY_PATH at tmp_path (STORY-012)
- 2026-10-02: Initial creation (STORY-001)
"""

import random
from collections.abc import Generator
from datetime import UTC, datetime
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from plantops.services.seed import generate_plants, generate_rtus
from plantops.services.store import PlantStore, RtuStore

TEST_TOKEN = "test-token-abc"
FIXED_NOW = datetime(2026, 10, 1, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def _set_test_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Set environment variables for testing and isolate the working directory.

    Seed counts are zero so API tests start from an empty collection; the
    history journal lives under tmp_path.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("API_TOKENS", f"{TEST_TOKEN}:alice,other-token:bob")
    monkeypatch.setenv("SEED_PLANTS", "0")
    monkeypatch.setenv("SEED_RTUS", "0")
    monkeypatch.setenv("SEED_RANDOM", "7")
    monkeypatch.setenv("HISTORY_PATH", str(tmp_path / "history.db"))
    monkeypatch.setenv("TELEMETRY_MIN_INTERVAL_S", "30")
    monkeypatch.setenv("TELEMETRY_MAX_INTERVAL_S", "60")


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    """Create a FastAPI TestClient with the application lifespan running.

    Yields:
        TestClient: Configured test client for the FastAPI app.
    """
    from plantops.api.main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture()
def plant_store() -> PlantStore:
    """A PlantStore seeded with 10 deterministic plants and a fixed clock."""
    plants = generate_plants(10, random.Random(1), now=FIXED_NOW)
    return PlantStore(plants, clock=lambda: FIXED_NOW)


@pytest.fixture()
def rtu_store(plant_store: PlantStore) -> RtuStore:
    """An RtuStore with 20 deterministic RTUs linked to ``plant_store``."""
    rtus = generate_rtus(20, plant_store.list(), random.Random(2), now=FIXED_NOW)
    return RtuStore(plant_store, rtus, clock=lambda: FIXED_NOW)


@pytest.fixture()
def auth_headers() -> dict[str, str]:
    """Authorization header for the ``alice`` test user."""
    return {"Authorization": f"Bearer {TEST_TOKEN}"}
