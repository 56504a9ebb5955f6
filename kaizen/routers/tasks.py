"""Task router - API endpoints for task management."""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from kaizen.database import get_database
from kaizen.errors import to_http_exception
from kaizen.models.task import Task, TaskCreate, TaskUpdate
from kaizen.routers.auth import get_current_user_id
from kaizen.services.task_service import TaskService


router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_task(
    task: TaskCreate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Create a task.

    - Project must exist (404) and belong to the caller (403)
    """
    service = TaskService(db)
    try:
        return await service.create_task(user_id=user_id, task_create=task)
    except ValueError as e:
        raise to_http_exception(e)


@router.get("", response_model=list[Task])
async def list_tasks(
    project_id: Optional[str] = Query(None),
    is_completed: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, description="Match name or description"),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """List tasks for the current user, newest first."""
    service = TaskService(db)
    return await service.list_tasks(
        user_id=user_id,
        project_id=project_id,
        is_completed=is_completed,
        search=search,
    )


@router.get("/{task_id}", response_model=Task)
async def get_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Get a task by id."""
    service = TaskService(db)
    try:
        return await service.get_task(user_id=user_id, task_id=task_id)
    except ValueError as e:
        raise to_http_exception(e)


@router.put("/{task_id}", response_model=Task)
@router.patch("/{task_id}", response_model=Task)
async def update_task(
    task_id: str,
    task_update: TaskUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Update a task; moving it re-checks ownership of the target project."""
    service = TaskService(db)
    try:
        return await service.update_task(
            user_id=user_id,
            task_id=task_id,
            task_update=task_update,
        )
    except ValueError as e:
        raise to_http_exception(e)


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Delete a task and its time entries."""
    service = TaskService(db)
    try:
        return await service.delete_task(user_id=user_id, task_id=task_id)
    except ValueError as e:
        raise to_http_exception(e)
