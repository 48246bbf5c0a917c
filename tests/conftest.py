"""Pytest configuration and shared fixtures."""

import tempfile
from pathlib import Path

import pytest  # type: ignore[import-not-found]

from time_tracker.core.storage import StorageManager


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest."""
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")


@pytest.fixture
def temp_data_dir():
    """Create a temporary data directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "data"


@pytest.fixture
def storage(temp_data_dir: Path) -> StorageManager:
    """Create a storage manager with seeded default projects."""
    return StorageManager(temp_data_dir)
