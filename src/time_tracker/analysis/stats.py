"""Daily and weekly statistics derived from stored entries."""

from dataclasses import dataclass, field
from datetime import datetime, time, timedelta
from typing import Optional

from time_tracker.core.models import Project, TimeEntry, normalize_timestamp

WEEKDAYS = {"monday": 0, "sunday": 6}
UNKNOWN_PROJECT = "Unknown project"


@dataclass
class ProjectTotal:
    """Time booked on one project today."""

    project_id: str
    project_name: str
    color: Optional[str]
    total_ms: int = 0
    entries: int = 0


@dataclass
class Stats:
    """Aggregate statistics at a point in time.

    Attributes:
        total_entries: Number of stored entries
        today_entries: Entries started today
        today_total_ms: Completed time started today
        week_total_ms: Completed time started this week
        project_count: Number of projects
        active_timer: Running entry, if any
        project_breakdown: Today's totals per project, largest first
    """

    total_entries: int
    today_entries: int
    today_total_ms: int
    week_total_ms: int
    project_count: int
    active_timer: Optional[TimeEntry] = None
    project_breakdown: list[ProjectTotal] = field(default_factory=list)


def week_start_for(now: datetime, week_start: str = "monday") -> datetime:
    """Local midnight of the first day of the week containing ``now``.

    The boundary is localised from the calendar date, so its UTC offset is
    the one in force at that midnight rather than the offset of ``now``.

    Args:
        now: Reference time
        week_start: ``monday`` or ``sunday``
    """
    if week_start not in WEEKDAYS:
        raise ValueError(f"Unknown week start: {week_start}")
    local = normalize_timestamp(now)
    days_back = (local.weekday() - WEEKDAYS[week_start]) % 7
    return datetime.combine(local.date() - timedelta(days=days_back), time.min).astimezone()


def compute_stats(
    entries: list[TimeEntry],
    projects: list[Project],
    now: datetime,
    week_start: str = "monday",
) -> Stats:
    """Compute today/week totals and today's per-project breakdown.

    Entries count toward the local calendar day on which they started, even
    when they run past midnight. Running entries contribute nothing to the
    totals.
    """
    now = normalize_timestamp(now)
    today = now.date()
    week_begin = week_start_for(now, week_start)

    today_entries = [e for e in entries if e.start_time.astimezone().date() == today]
    week_entries = [e for e in entries if e.start_time >= week_begin]

    projects_by_id = {p.id: p for p in projects}
    breakdown: dict[str, ProjectTotal] = {}
    for entry in today_entries:
        if entry.is_running:
            continue
        if entry.project_id not in breakdown:
            project = projects_by_id.get(entry.project_id)
            breakdown[entry.project_id] = ProjectTotal(
                project_id=entry.project_id,
                project_name=project.name if project else UNKNOWN_PROJECT,
                color=project.color if project else None,
            )
        item = breakdown[entry.project_id]
        item.total_ms += entry.duration_ms
        item.entries += 1

    running = [e for e in entries if e.is_running]

    return Stats(
        total_entries=len(entries),
        today_entries=len(today_entries),
        today_total_ms=sum(e.duration_ms for e in today_entries),
        week_total_ms=sum(e.duration_ms for e in week_entries),
        project_count=len(projects),
        active_timer=running[0] if running else None,
        project_breakdown=sorted(
            breakdown.values(), key=lambda p: (-p.total_ms, p.project_name)
        ),
    )

