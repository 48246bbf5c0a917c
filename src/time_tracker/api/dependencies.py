"""Dependency injection for FastAPI endpoints.

The application owns exactly one StorageManager (``app.state.storage``);
every handler receives that instance so all writes go through the same
single-writer lock.
"""

from fastapi import Request  # type: ignore[import-untyped]

from time_tracker.core.config import ConfigManager
from time_tracker.core.storage import StorageManager
from time_tracker.core.tracker import TimeTracker


def get_config(request: Request) -> ConfigManager:
    """Get the configuration manager stored on the application.

    Note:
        Use with Depends(get_config) in endpoint parameters.
    """
    config: ConfigManager = request.app.state.config
    return config


def get_storage(request: Request) -> StorageManager:
    """Get the shared storage instance.

    Note:
        Use with Depends(get_storage) in endpoint parameters.
    """
    storage: StorageManager = request.app.state.storage
    return storage


def get_tracker(request: Request) -> TimeTracker:
    """Get a tracker bound to the shared storage instance."""
    return TimeTracker(get_storage(request))
