"""Core time tracking engine: the single-active-timer operations."""

import logging
from datetime import datetime, timedelta
from typing import Optional

from time_tracker.core.errors import InvalidInputError, NoActiveTimerError
from time_tracker.core.models import TimeEntry, normalize_timestamp, now_local
from time_tracker.core.storage import StorageManager

logger = logging.getLogger(__name__)


class TimeTracker:
    """Start/stop semantics on top of the store.

    At most one entry is running at any time. ``start`` closes the running
    entry (if any) before opening a new one, inside the same store
    transaction.
    """

    def __init__(self, storage: Optional[StorageManager] = None):
        """Initialize time tracker.

        Args:
            storage: Storage manager instance. Creates default if None.
        """
        self.storage = storage or StorageManager()

    def status(self) -> Optional[TimeEntry]:
        """Get the running entry or None if not tracking."""
        return self.storage.get_running_entry()

    def start(
        self,
        project_id: str,
        description: Optional[str] = None,
        start_time: Optional[datetime] = None,
    ) -> tuple[Optional[TimeEntry], TimeEntry]:
        """Start tracking a project, closing the running entry first.

        Args:
            project_id: Project to track (must exist)
            description: Optional note for the new entry
            start_time: Start of the new entry. Defaults to now

        Returns:
            Tuple of (closed entry or None, new running entry)

        Raises:
            InvalidInputError: If project_id is empty
            NotFoundError: If the project does not exist
        """
        if not project_id:
            raise InvalidInputError("projectId is required")

        now = now_local()
        with self.storage.transaction():
            self.storage.get_project(project_id)

            stopped = self.storage.get_running_entry()
            if stopped is not None:
                stopped.close(now)
                self.storage.save_entry(stopped)
                logger.info(
                    f"Closed running entry {stopped.id} after {stopped.duration_ms} ms "
                    f"to start a new timer"
                )

            entry = self.storage.create_entry(
                project_id=project_id,
                start_time=start_time or now,
                description=description,
            )

        logger.info(f"Timer started: {entry.id} (project {project_id})")
        return stopped, entry

    def stop(self, description: Optional[str] = None) -> TimeEntry:
        """Stop the running entry.

        Args:
            description: Replaces the entry description when given

        Returns:
            The closed entry

        Raises:
            NoActiveTimerError: If no entry is running
        """
        with self.storage.transaction():
            current = self.storage.get_running_entry()
            if current is None:
                raise NoActiveTimerError("No active timer to stop")

            current.close(now_local())
            if description:
                current.description = description
            self.storage.save_entry(current)

        logger.info(f"Timer stopped: {current.id} ({current.duration_ms} ms)")
        return current

    def add_entry(
        self,
        project_id: str,
        start_time: datetime,
        end_time: Optional[datetime] = None,
        duration_ms: Optional[int] = None,
        description: Optional[str] = None,
    ) -> TimeEntry:
        """Record an entry submitted by a client.

        ``end_time`` wins over ``duration_ms``; with only a duration the end
        is ``start_time + duration_ms``. With neither, the entry is opened
        as the running timer.

        Raises:
            InvalidInputError: If the duration is negative or end precedes start
            NotFoundError: If the project does not exist
        """
        if duration_ms is not None and duration_ms < 0:
            raise InvalidInputError("duration must be non-negative")

        start_time = normalize_timestamp(start_time)
        if end_time is None and duration_ms is not None:
            end_time = start_time + timedelta(milliseconds=duration_ms)

        if end_time is None:
            _, entry = self.start(project_id, description=description, start_time=start_time)
            return entry

        with self.storage.transaction():
            self.storage.get_project(project_id)
            entry = self.storage.create_entry(
                project_id=project_id,
                start_time=start_time,
                end_time=end_time,
                description=description,
            )

        logger.info(f"Time entry recorded: {entry.id} ({entry.duration_ms} ms)")
        return entry
