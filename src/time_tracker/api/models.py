"""Pydantic models for API requests and responses.

Field names are snake_case in Python and camelCase on the wire. All
durations are integer milliseconds.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field  # type: ignore[import-untyped]

# ============================================================================
# Response Models
# ============================================================================


class ApiModel(BaseModel):
    """Base model accepting both field names and camelCase aliases."""

    class Config:
        """Pydantic configuration."""

        populate_by_name = True
        from_attributes = True


class ProjectResponse(ApiModel):
    """Response model for project."""

    id: str
    name: str
    color: str
    created_at: datetime = Field(..., alias="createdAt")

    @classmethod
    def from_project(cls, project):  # type: ignore[no-untyped-def]
        """Create response from Project model.

        Args:
            project: Project instance from core.models

        Returns:
            ProjectResponse instance
        """
        return cls(
            id=project.id,
            name=project.name,
            color=project.color,
            created_at=project.created_at,
        )


class EntryResponse(ApiModel):
    """Response model for time entry."""

    id: str
    project_id: str = Field(..., alias="projectId")
    project_name: Optional[str] = Field(None, alias="projectName")
    start_time: datetime = Field(..., alias="startTime")
    end_time: Optional[datetime] = Field(None, alias="endTime")
    duration: int = Field(0, description="Duration in milliseconds")
    description: Optional[str] = None
    status: str
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    @classmethod
    def from_entry(cls, entry, project_name=None):  # type: ignore[no-untyped-def]
        """Create response from TimeEntry model.

        Args:
            entry: TimeEntry instance from core.models
            project_name: Display name of the entry's project, if known

        Returns:
            EntryResponse instance
        """
        return cls(
            id=entry.id,
            project_id=entry.project_id,
            project_name=project_name,
            start_time=entry.start_time,
            end_time=entry.end_time,
            duration=entry.duration_ms,
            description=entry.description,
            status=entry.status,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )


class ProjectTotalResponse(ApiModel):
    """Today's time on one project."""

    project_id: str = Field(..., alias="projectId")
    project_name: str = Field(..., alias="projectName")
    color: Optional[str] = None
    total: int
    entries: int


class StatsResponse(ApiModel):
    """Response model for aggregate statistics."""

    total_entries: int = Field(..., alias="totalEntries")
    today_entries: int = Field(..., alias="todayEntries")
    today_total: int = Field(..., alias="todayTotal")
    week_total: int = Field(..., alias="weekTotal")
    project_count: int = Field(..., alias="projectCount")
    active_timer: Optional[EntryResponse] = Field(None, alias="activeTimer")
    project_breakdown: list[ProjectTotalResponse] = Field(
        default_factory=list, alias="projectBreakdown"
    )

    @classmethod
    def from_stats(cls, stats, project_names=None):  # type: ignore[no-untyped-def]
        """Create response from analysis.stats.Stats.

        Args:
            stats: Stats instance
            project_names: Mapping of project id to name for the active timer
        """
        project_names = project_names or {}
        active = stats.active_timer
        return cls(
            total_entries=stats.total_entries,
            today_entries=stats.today_entries,
            today_total=stats.today_total_ms,
            week_total=stats.week_total_ms,
            project_count=stats.project_count,
            active_timer=(
                EntryResponse.from_entry(active, project_names.get(active.project_id))
                if active
                else None
            ),
            project_breakdown=[
                ProjectTotalResponse(
                    project_id=item.project_id,
                    project_name=item.project_name,
                    color=item.color,
                    total=item.total_ms,
                    entries=item.entries,
                )
                for item in stats.project_breakdown
            ],
        )


class SnapshotResponse(ApiModel):
    """Projects, entries and stats in one payload."""

    projects: list[ProjectResponse]
    entries: list[EntryResponse]
    stats: StatsResponse


class ExportResponse(ApiModel):
    """Downloadable snapshot of the store."""

    exported_at: datetime = Field(..., alias="exportedAt")
    version: str
    projects: list[ProjectResponse]
    entries: list[EntryResponse]


class DeletedResponse(ApiModel):
    """Confirmation of a deletion."""

    success: bool = True
    id: str


class ResetResponse(ApiModel):
    """Confirmation of a reset, with the reseeded projects."""

    success: bool = True
    projects: list[ProjectResponse]


# ============================================================================
# Request Models
# ============================================================================


class CreateProjectRequest(ApiModel):
    """Request model for creating a project."""

    name: str = Field(..., min_length=1, max_length=200, description="Project name")
    color: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$", description="Hex color code")


class CreateEntryRequest(ApiModel):
    """Request model for recording a time entry."""

    project_id: str = Field(..., alias="projectId", min_length=1)
    start_time: datetime = Field(..., alias="startTime")
    end_time: Optional[datetime] = Field(None, alias="endTime")
    duration: Optional[int] = Field(None, ge=0, description="Duration in milliseconds")
    description: Optional[str] = Field(None, max_length=5000)


class UpdateEntryRequest(ApiModel):
    """Request model for a partial entry update."""

    project_id: Optional[str] = Field(None, alias="projectId", min_length=1)
    start_time: Optional[datetime] = Field(None, alias="startTime")
    end_time: Optional[datetime] = Field(None, alias="endTime")
    duration: Optional[int] = Field(None, ge=0, description="Duration in milliseconds")
    description: Optional[str] = Field(None, max_length=5000)


# ============================================================================
# Extension Models
# ============================================================================


class StartTimerRequest(ApiModel):
    """Request model for starting the single active timer."""

    project_id: str = Field(..., alias="projectId", min_length=1)
    description: Optional[str] = Field(None, max_length=5000)


class StopTimerRequest(ApiModel):
    """Request model for stopping the active timer."""

    description: Optional[str] = Field(None, max_length=5000)


class PingResponse(ApiModel):
    """Liveness probe response."""

    status: str = "online"
    timestamp: datetime


class ExtensionStatusResponse(ApiModel):
    """Whether a timer is running, which one, and the project list."""

    is_running: bool = Field(..., alias="isRunning")
    is_online: bool = Field(True, alias="isOnline")
    active_timer: Optional[EntryResponse] = Field(None, alias="activeTimer")
    projects: list[ProjectResponse]


class StartTimerResponse(ApiModel):
    """Response for start-timer."""

    success: bool = True
    entry: EntryResponse
    stopped_entry: Optional[EntryResponse] = Field(None, alias="stoppedEntry")


class StopTimerResponse(ApiModel):
    """Response for stop-timer."""

    success: bool = True
    entry: EntryResponse


# ============================================================================
# Error Models
# ============================================================================


class ErrorResponse(BaseModel):
    """Response model for client errors."""

    error: str = Field(..., description="Error message")


class InternalErrorResponse(BaseModel):
    """Response model for internal faults."""

    error: str
    message: str
    timestamp: datetime
