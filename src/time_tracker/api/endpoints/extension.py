"""Browser-extension endpoints.

A reduced API around a single active timer: the running entry is the one
without an end time, and starting a timer always closes it first.
"""

from typing import Optional

from fastapi import APIRouter, Depends  # type: ignore[import-untyped]

from time_tracker.api.dependencies import get_storage, get_tracker
from time_tracker.api.endpoints.entries import project_names
from time_tracker.api.models import (
    EntryResponse,
    ErrorResponse,
    ExtensionStatusResponse,
    PingResponse,
    ProjectResponse,
    StartTimerRequest,
    StartTimerResponse,
    StopTimerRequest,
    StopTimerResponse,
)
from time_tracker.core.models import now_local
from time_tracker.core.storage import StorageManager
from time_tracker.core.tracker import TimeTracker

router = APIRouter()


@router.get("/ping", response_model=PingResponse)
async def ping() -> PingResponse:
    """Liveness probe.

    Example:
        >>> GET /api/extension/ping
        {"status": "online", "timestamp": "2025-11-16T10:30:00+01:00"}
    """
    return PingResponse(timestamp=now_local())


@router.get("/status", response_model=ExtensionStatusResponse)
async def get_status(
    storage: StorageManager = Depends(get_storage),
) -> ExtensionStatusResponse:
    """Report whether a timer is running, which one, and the projects."""
    projects, entries = storage.snapshot()
    names = {p.id: p.name for p in projects}
    running = next((e for e in entries if e.is_running), None)
    return ExtensionStatusResponse(
        is_running=running is not None,
        active_timer=EntryResponse.from_entry(running, names.get(running.project_id))
        if running
        else None,
        projects=[ProjectResponse.from_project(p) for p in projects],
    )


@router.post(
    "/start-timer",
    response_model=StartTimerResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def start_timer(
    request: StartTimerRequest,
    tracker: TimeTracker = Depends(get_tracker),
) -> StartTimerResponse:
    """Start a timer, closing the running one (if any) first.

    Example:
        >>> POST /api/extension/start-timer
        {"projectId": "0f4c...", "description": "Inbox"}
    """
    stopped, entry = tracker.start(request.project_id, description=request.description)
    names = project_names(tracker.storage)
    return StartTimerResponse(
        entry=EntryResponse.from_entry(entry, names.get(entry.project_id)),
        stopped_entry=EntryResponse.from_entry(stopped, names.get(stopped.project_id))
        if stopped
        else None,
    )


@router.post(
    "/stop-timer",
    response_model=StopTimerResponse,
    responses={400: {"model": ErrorResponse}},
)
async def stop_timer(
    request: Optional[StopTimerRequest] = None,
    tracker: TimeTracker = Depends(get_tracker),
) -> StopTimerResponse:
    """Stop the running timer.

    Raises:
        NoActiveTimerError: If nothing is running (400)

    Example:
        >>> POST /api/extension/stop-timer
        {"description": "Done with the inbox"}
    """
    entry = tracker.stop(description=request.description if request else None)
    names = project_names(tracker.storage)
    return StopTimerResponse(entry=EntryResponse.from_entry(entry, names.get(entry.project_id)))
