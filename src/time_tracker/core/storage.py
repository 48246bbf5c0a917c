"""CSV storage manager with atomic writes and a single-writer lock."""

import csv
import logging
import os
import shutil
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from time_tracker.core.errors import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    StorageError,
)
from time_tracker.core.models import (
    DEFAULT_PROJECT_COLOR,
    DEFAULT_PROJECTS,
    Completed,
    Project,
    Running,
    Span,
    TimeEntry,
    normalize_timestamp,
    now_local,
)

logger = logging.getLogger(__name__)

PROJECT_FIELDS = ["id", "name", "color", "created_at"]
ENTRY_FIELDS = [
    "id",
    "project_id",
    "start_time",
    "end_time",
    "duration_ms",
    "description",
    "created_at",
    "updated_at",
]

_UNSET: Any = object()


def _lock_file(file_obj: Any, exclusive: bool = True) -> None:
    """Lock a file in a cross-platform way.

    Args:
        file_obj: File object to lock
        exclusive: If True, acquire exclusive lock; if False, acquire shared lock
    """
    if sys.platform == "win32":
        import msvcrt  # type: ignore[import-not-found]

        mode = msvcrt.LK_NBLCK if exclusive else msvcrt.LK_NBRLCK
        msvcrt.locking(file_obj.fileno(), mode, 1)
    else:
        import fcntl  # type: ignore[import-not-found]

        mode = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        fcntl.flock(file_obj.fileno(), mode)


def _unlock_file(file_obj: Any) -> None:
    """Unlock a file in a cross-platform way."""
    if sys.platform == "win32":
        import msvcrt  # type: ignore[import-not-found]

        msvcrt.locking(file_obj.fileno(), msvcrt.LK_UNLCK, 1)
    else:
        import fcntl  # type: ignore[import-not-found]

        fcntl.flock(file_obj.fileno(), fcntl.LOCK_UN)


class StorageManager:
    """Owns the projects and time entries on disk.

    Every read-modify-write cycle runs under ``transaction()``, a re-entrant
    lock shared by all handlers of one process, so callers never observe a
    half-applied change.
    """

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        default_projects: Optional[list[tuple[str, str]]] = None,
    ):
        """Initialize storage manager.

        Args:
            data_dir: Custom data directory. Defaults to ~/.time-tracker/data
            default_projects: (name, color) pairs seeded into an empty store
        """
        if data_dir is None:
            data_dir = Path.home() / ".time-tracker" / "data"

        self.data_dir = Path(data_dir)
        self.entries_file = self.data_dir / "entries.csv"
        self.projects_file = self.data_dir / "projects.csv"
        self.backup_dir = self.data_dir.parent / "backups"
        self.default_projects = (
            default_projects if default_projects is not None else DEFAULT_PROJECTS
        )
        self._lock = threading.RLock()

        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            self.backup_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create data directory {self.data_dir}: {e}") from e

        self._initialize_files()

    @contextmanager
    def transaction(self) -> Iterator["StorageManager"]:
        """Hold the single-writer lock for a composite operation."""
        with self._lock:
            yield self

    def _initialize_files(self) -> None:
        """Create CSV files and seed default projects on first use."""
        with self._lock:
            if not self.entries_file.exists():
                self._write_csv_atomic(self.entries_file, ENTRY_FIELDS, [])
            if not self.projects_file.exists() or not self._read_csv(self.projects_file):
                self._seed_default_projects()

    def _seed_default_projects(self) -> list[Project]:
        projects = [Project(name=name, color=color) for name, color in self.default_projects]
        self._write_projects(projects)
        logger.info(f"Seeded {len(projects)} default projects in {self.projects_file}")
        return projects

    def _write_csv_atomic(
        self, file_path: Path, fieldnames: list[str], rows: list[dict[str, Any]]
    ) -> None:
        """Write CSV file atomically using temporary file and rename.

        Raises:
            StorageError: If the file cannot be written
        """
        temp_file = file_path.with_suffix(".tmp")

        try:
            with open(temp_file, "w", newline="", encoding="utf-8") as f:
                _lock_file(f, exclusive=True)

                writer = csv.DictWriter(f, fieldnames=fieldnames)
                writer.writeheader()
                writer.writerows(rows)

                f.flush()
                os.fsync(f.fileno())

                _unlock_file(f)

            temp_file.replace(file_path)

        except OSError as e:
            if temp_file.exists():
                temp_file.unlink()
            logger.error(f"Failed to write {file_path}: {e}")
            raise StorageError(f"Failed to write {file_path.name}: {e}") from e

    def _read_csv(self, file_path: Path) -> list[dict[str, Any]]:
        """Read CSV file with locking.

        Raises:
            StorageError: If the file cannot be read
        """
        if not file_path.exists():
            return []

        try:
            with open(file_path, encoding="utf-8") as f:
                _lock_file(f, exclusive=False)
                try:
                    rows = list(csv.DictReader(f))
                finally:
                    _unlock_file(f)
        except OSError as e:
            logger.error(f"Failed to read {file_path}: {e}")
            raise StorageError(f"Failed to read {file_path.name}: {e}") from e

        return rows

    def _load(self, file_path: Path, factory: Any) -> list[Any]:
        rows = self._read_csv(file_path)
        try:
            return [factory(row) for row in rows]
        except (KeyError, ValueError) as e:
            logger.error(f"Corrupt row in {file_path}: {e}")
            raise StorageError(f"Corrupt data in {file_path.name}: {e}") from e

    def _write_projects(self, projects: list[Project]) -> None:
        self._write_csv_atomic(self.projects_file, PROJECT_FIELDS, [p.to_dict() for p in projects])

    def _write_entries(self, entries: list[TimeEntry]) -> None:
        self._write_csv_atomic(self.entries_file, ENTRY_FIELDS, [e.to_dict() for e in entries])

    def backup(self, label: Optional[str] = None) -> Path:
        """Create backup of all data files.

        Args:
            label: Optional label for backup. Defaults to timestamp

        Returns:
            Path to backup directory
        """
        if label is None:
            label = datetime.now().strftime("%Y%m%d_%H%M%S")

        backup_path = self.backup_dir / label
        with self._lock:
            try:
                backup_path.mkdir(parents=True, exist_ok=True)
                for file in [self.entries_file, self.projects_file]:
                    if file.exists():
                        shutil.copy2(file, backup_path / file.name)
            except OSError as e:
                raise StorageError(f"Backup failed: {e}") from e

        logger.info(f"Backup written to {backup_path}")
        return backup_path

    def reset(self) -> list[Project]:
        """Delete every entry and project, then reseed the defaults.

        Returns:
            The freshly seeded projects
        """
        with self._lock:
            self._write_entries([])
            projects = self._seed_default_projects()
        logger.warning("Store reset to defaults")
        return projects

    def snapshot(self) -> tuple[list[Project], list[TimeEntry]]:
        """Consistent view of all projects and entries."""
        with self._lock:
            return self.list_projects(), self.list_entries()

    # Project operations

    def list_projects(self) -> list[Project]:
        """Load all projects in creation order."""
        projects: list[Project] = self._load(self.projects_file, Project.from_dict)
        return projects

    def get_project(self, project_id: str) -> Project:
        """Get project by ID.

        Raises:
            NotFoundError: If no project has this ID
        """
        for project in self.list_projects():
            if project.id == project_id:
                return project
        raise NotFoundError(f"Project not found: {project_id}")

    def create_project(self, name: str, color: Optional[str] = None) -> Project:
        """Create a project with a unique, non-empty name.

        Raises:
            InvalidInputError: If the name is empty
            ConflictError: If a project with this name already exists
        """
        name = (name or "").strip()
        if not name:
            raise InvalidInputError("Project name is required")

        with self._lock:
            projects = self.list_projects()
            if any(p.name == name for p in projects):
                raise ConflictError(f"Project name already exists: {name}")

            project = Project(name=name, color=color or DEFAULT_PROJECT_COLOR)
            projects.append(project)
            self._write_projects(projects)

        logger.info(f"Project created: {project.name} ({project.id})")
        return project

    def delete_project(self, project_id: str) -> None:
        """Delete a project. Its entries are kept.

        Raises:
            NotFoundError: If no project has this ID
        """
        with self._lock:
            projects = self.list_projects()
            remaining = [p for p in projects if p.id != project_id]
            if len(remaining) == len(projects):
                raise NotFoundError(f"Project not found: {project_id}")
            self._write_projects(remaining)

        logger.info(f"Project deleted: {project_id}")

    # Entry operations

    def list_entries(self, limit: Optional[int] = None) -> list[TimeEntry]:
        """Load entries, most recent start first.

        Args:
            limit: Maximum number of entries to return
        """
        entries: list[TimeEntry] = self._load(self.entries_file, TimeEntry.from_dict)
        entries.sort(key=lambda e: e.start_time, reverse=True)

        if limit:
            entries = entries[:limit]

        return entries

    def get_entry(self, entry_id: str) -> TimeEntry:
        """Get entry by ID.

        Raises:
            NotFoundError: If no entry has this ID
        """
        for entry in self.list_entries():
            if entry.id == entry_id:
                return entry
        raise NotFoundError(f"Time entry not found: {entry_id}")

    def get_running_entry(self) -> Optional[TimeEntry]:
        """Get the currently running entry, if any."""
        for entry in self.list_entries():
            if entry.is_running:
                return entry
        return None

    def save_entry(self, entry: TimeEntry) -> TimeEntry:
        """Insert or replace an entry by ID."""
        with self._lock:
            entries = self.list_entries()
            for i, existing in enumerate(entries):
                if existing.id == entry.id:
                    entries[i] = entry
                    break
            else:
                entries.append(entry)
            self._write_entries(entries)

        logger.debug(f"Time entry saved: {entry.id} ({entry.status})")
        return entry

    def create_entry(
        self,
        project_id: str,
        start_time: datetime,
        end_time: Optional[datetime] = None,
        description: Optional[str] = None,
    ) -> TimeEntry:
        """Create a time entry. Without ``end_time`` the entry is running.

        Raises:
            InvalidInputError: If project_id or start_time is missing, or the
                end precedes the start
        """
        if not project_id:
            raise InvalidInputError("projectId is required")
        if start_time is None:
            raise InvalidInputError("startTime is required")

        start_time = normalize_timestamp(start_time)
        span: Span
        if end_time is not None:
            span = Completed(start_time, normalize_timestamp(end_time))
        else:
            span = Running(start_time)

        entry = TimeEntry(project_id=project_id, span=span, description=description)
        return self.save_entry(entry)

    def update_entry(
        self,
        entry_id: str,
        project_id: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
        description: Any = _UNSET,
    ) -> TimeEntry:
        """Apply a partial update to an entry.

        Omitted arguments are left unchanged. Setting ``end_time`` closes a
        running entry; duration follows from the new timestamps.

        Raises:
            NotFoundError: If no entry has this ID
            InvalidInputError: If the resulting end precedes the start
        """
        with self._lock:
            entry = self.get_entry(entry_id)

            if project_id is not None:
                entry.project_id = project_id
            if description is not _UNSET:
                entry.description = description or None

            new_start = normalize_timestamp(start_time) if start_time else entry.start_time
            new_end = normalize_timestamp(end_time) if end_time else entry.end_time
            entry.span = Completed(new_start, new_end) if new_end else Running(new_start)
            entry.updated_at = now_local()

            self.save_entry(entry)

        return entry

    def delete_entry(self, entry_id: str) -> None:
        """Delete an entry by ID.

        Raises:
            NotFoundError: If no entry has this ID
        """
        with self._lock:
            entries = self.list_entries()
            remaining = [e for e in entries if e.id != entry_id]
            if len(remaining) == len(entries):
                raise NotFoundError(f"Time entry not found: {entry_id}")
            self._write_entries(remaining)

        logger.info(f"Time entry deleted: {entry_id}")
