"""Time entry endpoints.

This module provides CRUD operations for time entries. Entries without an
end time are running timers; creating one closes the previous running
entry.
"""

from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query, status  # type: ignore[import-untyped]

from time_tracker.api.dependencies import get_storage, get_tracker
from time_tracker.api.models import (
    CreateEntryRequest,
    DeletedResponse,
    EntryResponse,
    ErrorResponse,
    UpdateEntryRequest,
)
from time_tracker.core.models import normalize_timestamp
from time_tracker.core.storage import StorageManager
from time_tracker.core.tracker import TimeTracker

router = APIRouter()


def project_names(storage: StorageManager) -> dict[str, str]:
    """Map project ids to display names."""
    return {p.id: p.name for p in storage.list_projects()}


@router.get("", response_model=list[EntryResponse])
async def list_entries(
    limit: Optional[int] = Query(None, ge=1, le=10000, description="Maximum entries to return"),
    storage: StorageManager = Depends(get_storage),
) -> list[EntryResponse]:
    """List time entries, newest start first.

    Example:
        >>> GET /api/time-entries?limit=10
    """
    names = project_names(storage)
    return [
        EntryResponse.from_entry(e, names.get(e.project_id))
        for e in storage.list_entries(limit=limit)
    ]


@router.get(
    "/{entry_id}",
    response_model=EntryResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_entry(
    entry_id: str,
    storage: StorageManager = Depends(get_storage),
) -> EntryResponse:
    """Get a specific entry by ID."""
    entry = storage.get_entry(entry_id)
    return EntryResponse.from_entry(entry, project_names(storage).get(entry.project_id))


@router.post(
    "",
    response_model=EntryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_entry(
    request: CreateEntryRequest,
    tracker: TimeTracker = Depends(get_tracker),
) -> EntryResponse:
    """Record a time entry.

    With ``endTime`` the duration is derived from the timestamps. With only
    ``duration`` (milliseconds) the end is computed from it. With neither the
    entry starts running and any running entry is closed.

    Example:
        >>> POST /api/time-entries
        {
            "projectId": "0f4c...",
            "startTime": "2025-11-16T09:00:00Z",
            "endTime": "2025-11-16T09:25:00Z"
        }
    """
    entry = tracker.add_entry(
        project_id=request.project_id,
        start_time=request.start_time,
        end_time=request.end_time,
        duration_ms=request.duration,
        description=request.description,
    )
    names = project_names(tracker.storage)
    return EntryResponse.from_entry(entry, names.get(entry.project_id))


@router.put(
    "/{entry_id}",
    response_model=EntryResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_entry(
    entry_id: str,
    request: UpdateEntryRequest,
    storage: StorageManager = Depends(get_storage),
) -> EntryResponse:
    """Update an existing entry with the provided fields only.

    A ``duration`` without ``endTime`` moves the end to start + duration.

    Example:
        >>> PUT /api/time-entries/{id}
        {"description": "Quarterly close"}
    """
    with storage.transaction():
        entry = storage.get_entry(entry_id)
        if request.project_id is not None:
            storage.get_project(request.project_id)

        end_time = request.end_time
        if end_time is None and request.duration is not None:
            start = entry.start_time
            if request.start_time is not None:
                start = normalize_timestamp(request.start_time)
            end_time = start + timedelta(milliseconds=request.duration)

        changes = {}
        if "description" in request.model_fields_set:
            changes["description"] = request.description

        entry = storage.update_entry(
            entry_id,
            project_id=request.project_id,
            start_time=request.start_time,
            end_time=end_time,
            **changes,
        )

    return EntryResponse.from_entry(entry, project_names(storage).get(entry.project_id))


@router.delete(
    "/{entry_id}",
    response_model=DeletedResponse,
    responses={404: {"model": ErrorResponse}},
)
async def delete_entry(
    entry_id: str,
    storage: StorageManager = Depends(get_storage),
) -> DeletedResponse:
    """Delete an entry."""
    storage.delete_entry(entry_id)
    return DeletedResponse(id=entry_id)
