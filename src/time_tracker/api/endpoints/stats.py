"""Statistics endpoints: aggregate stats and the combined snapshot."""

from fastapi import APIRouter, Depends  # type: ignore[import-untyped]

from time_tracker.analysis.stats import compute_stats
from time_tracker.api.dependencies import get_config, get_storage
from time_tracker.api.models import (
    EntryResponse,
    ProjectResponse,
    SnapshotResponse,
    StatsResponse,
)
from time_tracker.core.config import ConfigManager
from time_tracker.core.models import now_local
from time_tracker.core.storage import StorageManager

router = APIRouter()


@router.get("/stats", response_model=StatsResponse)
async def get_stats(
    storage: StorageManager = Depends(get_storage),
    config: ConfigManager = Depends(get_config),
) -> StatsResponse:
    """Get today/this-week totals and today's per-project breakdown.

    Example:
        >>> GET /api/stats
        {
            "totalEntries": 12,
            "todayEntries": 3,
            "todayTotal": 5400000,
            "weekTotal": 18000000,
            "projectCount": 3,
            "activeTimer": null,
            "projectBreakdown": [...]
        }
    """
    projects, entries = storage.snapshot()
    stats = compute_stats(entries, projects, now_local(), config.get("general.week_start"))
    return StatsResponse.from_stats(stats, {p.id: p.name for p in projects})


@router.get("/snapshot", response_model=SnapshotResponse)
async def get_snapshot(
    storage: StorageManager = Depends(get_storage),
    config: ConfigManager = Depends(get_config),
) -> SnapshotResponse:
    """Get projects, entries and stats from one consistent read."""
    projects, entries = storage.snapshot()
    names = {p.id: p.name for p in projects}
    stats = compute_stats(entries, projects, now_local(), config.get("general.week_start"))
    return SnapshotResponse(
        projects=[ProjectResponse.from_project(p) for p in projects],
        entries=[EntryResponse.from_entry(e, names.get(e.project_id)) for e in entries],
        stats=StatsResponse.from_stats(stats, names),
    )
