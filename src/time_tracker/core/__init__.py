"""Core functionality for time tracking."""

from time_tracker.core.models import Completed, Project, Running, TimeEntry
from time_tracker.core.tracker import TimeTracker

__all__ = ["TimeEntry", "Project", "Running", "Completed", "TimeTracker"]
