"""Fixtures for API tests."""

from pathlib import Path
from typing import Any

import pytest  # type: ignore[import-not-found]
from fastapi.testclient import TestClient  # type: ignore[import-untyped]

from time_tracker.api import create_app
from time_tracker.core.config import ConfigManager


@pytest.fixture
def test_config(temp_data_dir: Path) -> ConfigManager:
    """Create a test configuration pointing at the temporary data directory."""
    config = ConfigManager(temp_data_dir.parent / "config.yml")
    config.set("general.data_dir", str(temp_data_dir))
    return config


@pytest.fixture
def test_app(test_config: ConfigManager):
    """Create a test FastAPI application."""
    return create_app(test_config)


@pytest.fixture
def client(test_app) -> TestClient:
    """Create a test client."""
    return TestClient(test_app)


@pytest.fixture
def projects(client: TestClient) -> list[dict[str, Any]]:
    """The seeded default projects."""
    response = client.get("/api/projects")
    assert response.status_code == 200
    return response.json()
