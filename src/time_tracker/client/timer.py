"""Client-side timer state machine.

A ``TimerSession`` tracks Idle/Running/Paused locally and only talks to the
server when a stopped timer is committed as a time entry. The one-second
display tick is a background task that exists only while Running.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Optional, Protocol

from time_tracker.client.api import ApiError, TrackerClient
from time_tracker.core.models import now_local, span_ms

logger = logging.getLogger(__name__)


class TimerState(Enum):
    """States of the client timer."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


class TimerError(Exception):
    """A transition is not allowed in the current state."""


class Cancellable(Protocol):
    def start(self) -> None: ...

    def cancel(self) -> None: ...


TickerFactory = Callable[[float, Callable[[], None]], Cancellable]


class Ticker:
    """Calls ``callback`` every ``interval`` seconds on a daemon thread.

    Usable as a context manager; leaving the block cancels the ticker.
    """

    def __init__(self, interval: float, callback: Callable[[], None]):
        self.interval = interval
        self.callback = callback
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name="timer-tick", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stopped.wait(self.interval):
            try:
                self.callback()
            except Exception:
                logger.exception("Tick callback failed")

    def cancel(self) -> None:
        self._stopped.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.interval + 1)

    def __enter__(self) -> "Ticker":
        self.start()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.cancel()


@dataclass
class PendingEntry:
    """A stopped timer that has not been saved on the server yet."""

    project_id: str
    start_time: datetime
    end_time: datetime
    duration_ms: int
    description: Optional[str] = None


def format_elapsed(milliseconds: int) -> str:
    """Format milliseconds as ``HH:MM:SS``."""
    total_seconds = max(0, milliseconds) // 1000
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_duration(milliseconds: Optional[int]) -> str:
    """Format milliseconds for summaries: ``2h 5m``, ``12m`` or ``<1m``."""
    if milliseconds is None:
        return "ongoing"

    total_seconds = milliseconds // 1000
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60

    if hours > 0:
        return f"{hours}h {minutes}m"
    elif minutes > 0:
        return f"{minutes}m"
    else:
        return "<1m"


class TimerSession:
    """Local Idle/Running/Paused timer that commits entries on stop.

    Args:
        api: Client used to save completed entries
        clock: Returns the current time (injectable for tests)
        tick_interval: Seconds between display refreshes
        on_tick: Called with the elapsed milliseconds on every tick
        ticker_factory: Builds the periodic task, ``(interval, callback)``
    """

    def __init__(
        self,
        api: TrackerClient,
        clock: Callable[[], datetime] = now_local,
        tick_interval: float = 1.0,
        on_tick: Optional[Callable[[int], None]] = None,
        ticker_factory: TickerFactory = Ticker,
    ):
        self.api = api
        self.clock = clock
        self.tick_interval = tick_interval
        self.on_tick = on_tick
        self.ticker_factory = ticker_factory

        self.state = TimerState.IDLE
        self.project_id: Optional[str] = None
        self.start_time: Optional[datetime] = None
        self._elapsed_ms = 0
        self._ticker: Optional[Cancellable] = None
        self._lock = threading.RLock()

        self.pending: list[PendingEntry] = []
        self.last_error: Optional[ApiError] = None

    @property
    def elapsed_ms(self) -> int:
        """Elapsed running time, excluding paused intervals."""
        with self._lock:
            if self.state is TimerState.RUNNING and self.start_time is not None:
                return max(0, span_ms(self.start_time, self.clock()))
            return self._elapsed_ms

    @property
    def display(self) -> str:
        return format_elapsed(self.elapsed_ms)

    def _tick(self) -> None:
        with self._lock:
            if self.state is not TimerState.RUNNING:
                return
            self._elapsed_ms = self.elapsed_ms
            elapsed = self._elapsed_ms
        if self.on_tick is not None:
            self.on_tick(elapsed)

    def _start_ticker(self) -> None:
        self._ticker = self.ticker_factory(self.tick_interval, self._tick)
        self._ticker.start()

    def _detach_ticker(self) -> Optional[Cancellable]:
        ticker, self._ticker = self._ticker, None
        return ticker

    @staticmethod
    def _cancel(ticker: Optional[Cancellable]) -> None:
        # Called without the lock held: a tick in progress may be waiting on it
        if ticker is not None:
            ticker.cancel()

    def start(self, project_id: Optional[str] = None) -> None:
        """Start a new timer, or resume a paused one.

        Args:
            project_id: Project to track. Required from Idle; when resuming
                it may be omitted but must match the paused project if given.

        Raises:
            TimerError: If already running, no project is selected, or a
                different project is given while paused
        """
        with self._lock:
            now = self.clock()
            if self.state is TimerState.RUNNING:
                raise TimerError("Timer is already running")

            if self.state is TimerState.PAUSED:
                if project_id and project_id != self.project_id:
                    raise TimerError("Stop the paused timer before switching projects")
                self.start_time = now - timedelta(milliseconds=self._elapsed_ms)
                logger.debug(f"Timer resumed at {self._elapsed_ms} ms")
            else:
                if not project_id:
                    raise TimerError("Please select a project first")
                self.project_id = project_id
                self.start_time = now
                self._elapsed_ms = 0
                logger.debug(f"Timer started for project {project_id}")

            self.state = TimerState.RUNNING
            self._start_ticker()

    def pause(self) -> None:
        """Freeze the elapsed time and stop ticking.

        Raises:
            TimerError: If the timer is not running
        """
        with self._lock:
            if self.state is not TimerState.RUNNING:
                raise TimerError("Timer is not running")
            self._elapsed_ms = self.elapsed_ms
            self.state = TimerState.PAUSED
            ticker = self._detach_ticker()
        self._cancel(ticker)
        logger.debug(f"Timer paused at {self._elapsed_ms} ms")

    def stop(self, description: Optional[str] = None) -> Optional[dict[str, Any]]:
        """Stop the timer and save the entry on the server.

        Local state returns to Idle even when saving fails; the unsaved
        entry is then queued in ``pending`` behind any earlier unsaved
        entries, and ``retry_commit`` saves them in order.

        Args:
            description: Optional note for the saved entry

        Returns:
            The saved entry as returned by the server, or None when nothing
            was tracked

        Raises:
            TimerError: If the timer is idle
            ApiError: If saving failed (the entry stays pending)
        """
        with self._lock:
            if self.state is TimerState.IDLE:
                raise TimerError("Timer is not running")

            elapsed = self.elapsed_ms
            ticker = self._detach_ticker()
            pending = None
            if elapsed > 0 and self.project_id and self.start_time is not None:
                pending = PendingEntry(
                    project_id=self.project_id,
                    start_time=self.start_time,
                    end_time=self.start_time + timedelta(milliseconds=elapsed),
                    duration_ms=elapsed,
                    description=description,
                )
            self._reset()
        self._cancel(ticker)

        if pending is None:
            return None

        self.pending.append(pending)
        return self.retry_commit()

    def retry_commit(self) -> dict[str, Any]:
        """Save every pending entry, oldest first.

        Each entry leaves the queue as soon as it is saved, so a failure
        part way through keeps only the entries still unsaved.

        Returns:
            The last entry saved, as returned by the server

        Raises:
            TimerError: If nothing is pending
            ApiError: If saving failed again
        """
        if not self.pending:
            raise TimerError("No unsaved entry")

        entry: dict[str, Any] = {}
        while self.pending:
            pending = self.pending[0]
            try:
                entry = self.api.create_entry(
                    project_id=pending.project_id,
                    start_time=pending.start_time,
                    end_time=pending.end_time,
                    duration_ms=pending.duration_ms,
                    description=pending.description,
                )
            except ApiError as e:
                self.last_error = e
                logger.error(
                    f"Failed to save time entry ({pending.duration_ms} ms, "
                    f"{len(self.pending)} unsaved): {e}"
                )
                raise

            self.pending.pop(0)
            logger.info(f"Time entry saved: {entry.get('id')} ({pending.duration_ms} ms)")

        self.last_error = None
        return entry

    def discard_pending(self) -> list[PendingEntry]:
        """Drop all unsaved entries and return them."""
        dropped, self.pending = self.pending, []
        self.last_error = None
        return dropped

    def _reset(self) -> None:
        self.state = TimerState.IDLE
        self.project_id = None
        self.start_time = None
        self._elapsed_ms = 0
