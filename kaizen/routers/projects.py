"""Project router - API endpoints for project management."""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from kaizen.database import get_database
from kaizen.errors import to_http_exception
from kaizen.models.project import Project, ProjectCreate, ProjectUpdate
from kaizen.routers.auth import get_current_user_id
from kaizen.services.project_service import ProjectService


router = APIRouter(prefix="/projects", tags=["projects"])


@router.post("", response_model=Project, status_code=status.HTTP_201_CREATED)
async def create_project(
    project: ProjectCreate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Create a new project.

    Args:
        project: Project creation data
        user_id: Current user ID (from token)
        db: Database connection

    Returns:
        Created project object
    """
    service = ProjectService(db)
    return await service.create_project(
        user_id=user_id,
        project_create=project,
    )


@router.get("", response_model=list[Project])
async def list_projects(
    is_active: Optional[bool] = Query(None, description="Filter by active flag"),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """List projects for the current user, newest first."""
    service = ProjectService(db)
    return await service.list_projects(user_id=user_id, is_active=is_active)


@router.get("/{project_id}", response_model=Project)
async def get_project(
    project_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Get a project by id.

    Raises:
        HTTPException: 400 for a malformed id, 404 if missing, 403 if not owned
    """
    service = ProjectService(db)
    try:
        return await service.get_project(user_id=user_id, project_id=project_id)
    except ValueError as e:
        raise to_http_exception(e)


@router.put("/{project_id}", response_model=Project)
@router.patch("/{project_id}", response_model=Project)
async def update_project(
    project_id: str,
    project_update: ProjectUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Update a project."""
    service = ProjectService(db)
    try:
        return await service.update_project(
            user_id=user_id,
            project_id=project_id,
            project_update=project_update,
        )
    except ValueError as e:
        raise to_http_exception(e)


@router.delete("/{project_id}")
async def delete_project(
    project_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Delete a project.

    - Its tasks and their time entries are deleted too
    - Hard delete (permanent)
    """
    service = ProjectService(db)
    try:
        return await service.delete_project(user_id=user_id, project_id=project_id)
    except ValueError as e:
        raise to_http_exception(e)
