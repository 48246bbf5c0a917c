"""Tests for statistics."""

import time
from collections.abc import Iterator
from datetime import datetime, timedelta

import pytest  # type: ignore[import-not-found]

from time_tracker.analysis.stats import UNKNOWN_PROJECT, compute_stats, week_start_for
from time_tracker.core.models import Completed, Project, Running, TimeEntry

# Wednesday
NOW = datetime(2025, 11, 19, 12, 0).astimezone()


def completed(project_id: str, start: datetime, minutes: float) -> TimeEntry:
    start = start.astimezone()
    return TimeEntry(
        project_id=project_id,
        span=Completed(start, start + timedelta(minutes=minutes)),
    )


@pytest.fixture
def projects() -> list[Project]:
    return [
        Project(name="Bookkeeping", id="a", color="#3498db"),
        Project(name="Tax Prep", id="b", color="#e67e22"),
    ]


@pytest.fixture
def berlin_tz(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run with local time in Europe/Berlin (CEST ends 2025-10-26 03:00)."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", "Europe/Berlin")
    time.tzset()
    try:
        if datetime(2025, 7, 1, 12, 0).astimezone().utcoffset() != timedelta(hours=2):
            pytest.skip("Europe/Berlin zone data is not installed")
        yield
    finally:
        monkeypatch.undo()
        time.tzset()


class TestWeekStart:
    """Test week boundary computation."""

    def test_monday(self) -> None:
        """Test Monday-start weeks."""
        begin = week_start_for(NOW, "monday")
        assert begin.date() == datetime(2025, 11, 17).date()
        assert (begin.hour, begin.minute) == (0, 0)

    def test_sunday(self) -> None:
        """Test Sunday-start weeks."""
        assert week_start_for(NOW, "sunday").date() == datetime(2025, 11, 16).date()

    def test_on_first_day(self) -> None:
        """Test that the first day of the week maps to itself."""
        monday = datetime(2025, 11, 17, 8, 0).astimezone()
        assert week_start_for(monday, "monday").date() == monday.date()

    def test_unknown(self) -> None:
        """Test that other values are rejected."""
        with pytest.raises(ValueError):
            week_start_for(NOW, "friday")

    def test_across_dst_change(self, berlin_tz: None) -> None:
        """Test that the week starts at local midnight before a DST change."""
        sunday = datetime(2025, 10, 26, 12, 0).astimezone()
        assert sunday.utcoffset() == timedelta(hours=1)

        begin = week_start_for(sunday, "monday")

        assert begin == datetime(2025, 10, 20, 0, 0).astimezone()
        assert begin.utcoffset() == timedelta(hours=2)
        assert (begin.hour, begin.minute) == (0, 0)


class TestComputeStats:
    """Test compute_stats."""

    def test_empty(self, projects: list[Project]) -> None:
        """Test stats over an empty store."""
        stats = compute_stats([], projects, NOW)

        assert stats.total_entries == 0
        assert stats.today_total_ms == 0
        assert stats.week_total_ms == 0
        assert stats.project_count == 2
        assert stats.active_timer is None
        assert stats.project_breakdown == []

    def test_today_total(self, projects: list[Project]) -> None:
        """Test a single 25 minute entry today."""
        entry = completed("a", datetime(2025, 11, 19, 9, 0), 25)

        stats = compute_stats([entry], projects, NOW)

        assert stats.today_total_ms == 1_500_000
        assert stats.today_entries == 1
        assert stats.week_total_ms == 1_500_000

    def test_running_entry_counts_zero(self, projects: list[Project]) -> None:
        """Test that a running entry is active but adds no time."""
        started = datetime(2025, 11, 19, 11, 0).astimezone()
        running = TimeEntry(project_id="b", span=Running(started))
        entry = completed("a", datetime(2025, 11, 19, 9, 0), 25)

        stats = compute_stats([running, entry], projects, NOW)

        assert stats.today_entries == 2
        assert stats.today_total_ms == 1_500_000
        assert stats.active_timer is running
        assert [p.project_id for p in stats.project_breakdown] == ["a"]

    def test_entry_spanning_midnight_counts_on_start_day(self, projects: list[Project]) -> None:
        """Test that an overnight entry belongs to the day it started."""
        overnight = completed("a", datetime(2025, 11, 18, 23, 30), 60)

        stats = compute_stats([overnight], projects, NOW)

        assert stats.today_entries == 0
        assert stats.today_total_ms == 0
        assert stats.week_total_ms == 3_600_000

    def test_week_boundaries(self, projects: list[Project]) -> None:
        """Test entries before the week start are excluded."""
        entries = [
            completed("a", datetime(2025, 11, 17, 0, 0), 10),
            completed("a", datetime(2025, 11, 16, 23, 0), 10),
        ]

        monday = compute_stats(entries, projects, NOW, week_start="monday")
        sunday = compute_stats(entries, projects, NOW, week_start="sunday")

        assert monday.week_total_ms == 600_000
        assert sunday.week_total_ms == 1_200_000

    def test_breakdown_sorted_by_total(self, projects: list[Project]) -> None:
        """Test per-project totals, largest first."""
        entries = [
            completed("a", datetime(2025, 11, 19, 8, 0), 10),
            completed("b", datetime(2025, 11, 19, 9, 0), 30),
            completed("a", datetime(2025, 11, 19, 10, 0), 5),
        ]

        breakdown = compute_stats(entries, projects, NOW).project_breakdown

        assert [(p.project_name, p.total_ms, p.entries) for p in breakdown] == [
            ("Tax Prep", 1_800_000, 1),
            ("Bookkeeping", 900_000, 2),
        ]

    def test_deleted_project(self, projects: list[Project]) -> None:
        """Test entries for a missing project are still counted."""
        entry = completed("gone", datetime(2025, 11, 19, 9, 0), 5)

        breakdown = compute_stats([entry], projects, NOW).project_breakdown

        assert breakdown[0].project_name == UNKNOWN_PROJECT
        assert breakdown[0].color is None

    def test_week_total_across_dst_change(self, projects: list[Project], berlin_tz: None) -> None:
        """Test that an entry just after Monday midnight counts after a DST change."""
        sunday = datetime(2025, 10, 26, 12, 0).astimezone()
        early_monday = completed("a", datetime(2025, 10, 20, 0, 30), 20)
        previous_sunday = completed("a", datetime(2025, 10, 19, 23, 30), 10)

        stats = compute_stats([early_monday, previous_sunday], projects, sunday)

        assert stats.week_total_ms == 1_200_000
