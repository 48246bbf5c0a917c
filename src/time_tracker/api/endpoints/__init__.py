"""API endpoints.

This package contains all API endpoint routers organized by resource type.
Each module defines a FastAPI router that is included in the main application.

Available routers:
- projects: Project listing, creation and deletion
- entries: Time entry CRUD
- stats: Aggregate statistics and the combined snapshot
- system: Export and reset
- extension: Single-active-timer API for the browser extension
"""

__all__ = ["entries", "extension", "projects", "stats", "system"]

from time_tracker.api.endpoints import (  # noqa: F401
    entries,
    extension,
    projects,
    stats,
    system,
)
