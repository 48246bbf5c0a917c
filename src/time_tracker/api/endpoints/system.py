"""System endpoints: export and reset of the whole store."""

import logging
from datetime import date

from fastapi import APIRouter, Depends  # type: ignore[import-untyped]
from fastapi.responses import JSONResponse  # type: ignore[import-untyped]

from time_tracker import __version__
from time_tracker.api.dependencies import get_storage
from time_tracker.api.models import (
    EntryResponse,
    ExportResponse,
    ProjectResponse,
    ResetResponse,
)
from time_tracker.core.models import now_local
from time_tracker.core.storage import StorageManager

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/export", response_model=ExportResponse)
async def export_data(
    storage: StorageManager = Depends(get_storage),
) -> JSONResponse:
    """Download every project and entry as a JSON attachment.

    Example:
        >>> GET /api/export
        {
            "exportedAt": "2025-11-16T18:00:00+01:00",
            "version": "0.1.0",
            "projects": [...],
            "entries": [...]
        }
    """
    projects, entries = storage.snapshot()
    names = {p.id: p.name for p in projects}
    export = ExportResponse(
        exported_at=now_local(),
        version=__version__,
        projects=[ProjectResponse.from_project(p) for p in projects],
        entries=[EntryResponse.from_entry(e, names.get(e.project_id)) for e in entries],
    )
    filename = f"time-tracker-export-{date.today().isoformat()}.json"
    return JSONResponse(
        content=export.model_dump(mode="json", by_alias=True),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.delete("/reset", response_model=ResetResponse)
async def reset_data(
    storage: StorageManager = Depends(get_storage),
) -> ResetResponse:
    """Delete all entries and projects and reseed the default projects.

    Note:
        A backup of the current files is taken first.
    """
    backup_path = storage.backup()
    logger.warning(f"Resetting store (backup at {backup_path})")
    projects = storage.reset()
    return ResetResponse(projects=[ProjectResponse.from_project(p) for p in projects])
