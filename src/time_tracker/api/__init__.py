"""REST API for Time Tracker.

This module provides a FastAPI-based JSON API over the project and time
entry store, used by the web client and by the browser extension.

Key features:
- Project listing and creation
- Full CRUD for time entries
- Daily and weekly statistics
- Export and reset of the whole store
- Single-active-timer endpoints for the extension (start/stop/status/ping)

Usage:
    # Start server
    time-tracker serve

    # Access API docs
    http://localhost:3000/docs
"""

__all__ = ["create_app", "run_server"]

from time_tracker.api.server import create_app, run_server  # noqa: F401
