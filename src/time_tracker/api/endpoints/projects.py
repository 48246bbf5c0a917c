"""Project endpoints for project management."""

from fastapi import APIRouter, Depends, status  # type: ignore[import-untyped]

from time_tracker.api.dependencies import get_storage
from time_tracker.api.models import (
    CreateProjectRequest,
    DeletedResponse,
    ErrorResponse,
    ProjectResponse,
)
from time_tracker.core.storage import StorageManager

router = APIRouter()


@router.get("", response_model=list[ProjectResponse])
async def list_projects(
    storage: StorageManager = Depends(get_storage),
) -> list[ProjectResponse]:
    """List all projects in creation order.

    Example:
        >>> GET /api/projects
        [
            {
                "id": "0f4c...",
                "name": "Client A - Bookkeeping",
                "color": "#3498db",
                "createdAt": "2025-11-16T10:00:00+01:00"
            }
        ]
    """
    return [ProjectResponse.from_project(p) for p in storage.list_projects()]


@router.post(
    "",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_project(
    request: CreateProjectRequest,
    storage: StorageManager = Depends(get_storage),
) -> ProjectResponse:
    """Create a new project.

    Raises:
        InvalidInputError: If the name is blank (400)
        ConflictError: If the name is already taken (400)

    Example:
        >>> POST /api/projects
        {"name": "Research", "color": "#9b59b6"}
    """
    project = storage.create_project(request.name, request.color)
    return ProjectResponse.from_project(project)


@router.delete(
    "/{project_id}",
    response_model=DeletedResponse,
    responses={404: {"model": ErrorResponse}},
)
async def delete_project(
    project_id: str,
    storage: StorageManager = Depends(get_storage),
) -> DeletedResponse:
    """Delete a project. Entries booked on it are kept."""
    storage.delete_project(project_id)
    return DeletedResponse(id=project_id)
