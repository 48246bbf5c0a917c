"""Client side: HTTP API client and the local timer state machine."""

from time_tracker.client.api import ApiError, TrackerClient
from time_tracker.client.timer import TimerError, TimerSession, TimerState

__all__ = ["ApiError", "TrackerClient", "TimerError", "TimerSession", "TimerState"]
