"""Core data models for time tracking."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Optional, Union
from uuid import uuid4

from time_tracker.core.errors import InvalidInputError

DEFAULT_PROJECT_COLOR = "#3498db"

# (name, color) pairs seeded into an empty store
DEFAULT_PROJECTS = [
    ("Client A - Bookkeeping", DEFAULT_PROJECT_COLOR),
    ("Client B - Tax Prep", "#e67e22"),
    ("Client C - Payroll", "#2ecc71"),
]


def now_local() -> datetime:
    """Current wall-clock time as a timezone-aware local datetime."""
    return datetime.now().astimezone()


def normalize_timestamp(value: datetime) -> datetime:
    """Normalize a datetime to timezone-aware local time.

    Naive datetimes are taken to already be in local time.
    """
    return value.astimezone()


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 string (a trailing ``Z`` is accepted) into local time.

    Raises:
        InvalidInputError: If the string is not a valid timestamp
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return normalize_timestamp(datetime.fromisoformat(text))
    except ValueError:
        raise InvalidInputError(f"Invalid timestamp: {value!r}")


def span_ms(start: datetime, end: datetime) -> int:
    """Whole milliseconds between two datetimes."""
    return int((end - start) / timedelta(milliseconds=1))


@dataclass(frozen=True)
class Running:
    """Span of an entry whose timer is still running."""

    start_time: datetime

    @property
    def end_time(self) -> None:
        return None

    @property
    def duration_ms(self) -> int:
        return 0


@dataclass(frozen=True)
class Completed:
    """Span of a closed entry. Duration is always derived from the timestamps."""

    start_time: datetime
    end_time: datetime

    def __post_init__(self) -> None:
        if self.end_time < self.start_time:
            raise InvalidInputError("endTime must not be before startTime")

    @property
    def duration_ms(self) -> int:
        return span_ms(self.start_time, self.end_time)


Span = Union[Running, Completed]


@dataclass
class TimeEntry:
    """A block of time spent on a project.

    Attributes:
        project_id: Project this time belongs to
        span: Running or Completed span
        id: Unique identifier (uuid4 string)
        description: Free-text note
        created_at: When this record was created
        updated_at: Last update time
    """

    project_id: str
    span: Span
    id: str = field(default_factory=lambda: str(uuid4()))
    description: Optional[str] = None
    created_at: datetime = field(default_factory=now_local)
    updated_at: datetime = field(default_factory=now_local)

    @property
    def start_time(self) -> datetime:
        return self.span.start_time

    @property
    def end_time(self) -> Optional[datetime]:
        return self.span.end_time

    @property
    def duration_ms(self) -> int:
        """Duration in milliseconds (0 while running)."""
        return self.span.duration_ms

    @property
    def is_running(self) -> bool:
        """Check if this entry is the currently running timer."""
        return isinstance(self.span, Running)

    @property
    def status(self) -> str:
        return "running" if self.is_running else "completed"

    def close(self, end_time: datetime) -> None:
        """Stop a running entry at ``end_time``.

        An end time earlier than the start (clock skew) is clamped to the
        start so the duration stays non-negative.
        """
        end_time = normalize_timestamp(end_time)
        self.span = Completed(self.start_time, max(end_time, self.start_time))
        self.updated_at = now_local()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for CSV serialization."""
        return {
            "id": self.id,
            "project_id": self.project_id,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else "",
            "duration_ms": self.duration_ms,
            "description": self.description or "",
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TimeEntry":
        """Create TimeEntry from dictionary (CSV deserialization)."""
        start_time = parse_timestamp(data["start_time"])
        span: Span
        if data.get("end_time"):
            span = Completed(start_time, parse_timestamp(data["end_time"]))
        else:
            span = Running(start_time)
        return cls(
            id=data["id"],
            project_id=data["project_id"],
            span=span,
            description=data["description"] if data.get("description") else None,
            created_at=parse_timestamp(data["created_at"]),
            updated_at=parse_timestamp(data["updated_at"]),
        )


@dataclass
class Project:
    """Project that time entries are booked against.

    Attributes:
        name: Display name, unique across projects
        id: Unique identifier (uuid4 string)
        color: Display color (hex)
        created_at: Creation timestamp
    """

    name: str
    id: str = field(default_factory=lambda: str(uuid4()))
    color: str = DEFAULT_PROJECT_COLOR
    created_at: datetime = field(default_factory=now_local)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for CSV serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Project":
        """Create Project from dictionary (CSV deserialization)."""
        return cls(
            id=data["id"],
            name=data["name"],
            color=data["color"] if data.get("color") else DEFAULT_PROJECT_COLOR,
            created_at=parse_timestamp(data["created_at"]),
        )
