"""Time entry endpoints - timers and manual entries."""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel

from kaizen.database import get_database
from kaizen.errors import to_http_exception
from kaizen.models.time_entry import TimeEntry, TimeEntryCreate, TimeEntryUpdate
from kaizen.routers.auth import get_current_user_id
from kaizen.services.timer_service import TimerService


router = APIRouter(prefix="/time-entries", tags=["time-entries"])


class TimerStop(BaseModel):
    """Request model for stopping the running timer."""

    end_time: Optional[datetime] = None
    description: Optional[str] = None


@router.post("", response_model=TimeEntry, status_code=status.HTTP_201_CREATED)
async def create_entry(
    entry_create: TimeEntryCreate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Create a time entry.

    - Without end_time: starts a timer; a running timer is stopped first
    - With end_time: records a completed entry, duration derived server-side
    - Task must exist (404) and belong to the caller (403)
    """
    service = TimerService(db)
    try:
        return await service.create_entry(user_id=user_id, entry_create=entry_create)
    except ValueError as e:
        raise to_http_exception(e)


@router.get("", response_model=list[TimeEntry])
async def list_entries(
    task_id: Optional[str] = Query(None),
    is_active: bool = Query(False),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    List time entries for the authenticated user.

    - Optional filters: task_id, is_active, start_date, end_date
    - Results sorted by start_time descending (most recent first)
    """
    service = TimerService(db)
    return await service.list_entries(
        user_id=user_id,
        task_id=task_id,
        is_active=is_active,
        start_date=start_date,
        end_date=end_date,
    )


@router.get("/active", response_model=Optional[TimeEntry])
async def get_active_entry(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Get the running entry, or null when no timer is running."""
    service = TimerService(db)
    return await service.get_active_entry(user_id=user_id)


@router.get("/recent", response_model=list[TimeEntry])
async def recent_entries(
    limit: int = Query(10, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Most recent completed entries."""
    service = TimerService(db)
    return await service.recent_entries(user_id=user_id, limit=limit)


@router.post("/stop", response_model=TimeEntry)
async def stop_timer(
    timer_stop: Optional[TimerStop] = None,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Stop the running timer (404 if none is running)."""
    timer_stop = timer_stop or TimerStop()
    service = TimerService(db)
    try:
        return await service.stop_timer(
            user_id=user_id,
            end_time=timer_stop.end_time,
            description=timer_stop.description,
        )
    except ValueError as e:
        raise to_http_exception(e)


@router.get("/{entry_id}", response_model=TimeEntry)
async def get_entry(
    entry_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Get a specific time entry by ID."""
    service = TimerService(db)
    try:
        return await service.get_entry(user_id=user_id, entry_id=entry_id)
    except ValueError as e:
        raise to_http_exception(e)


@router.put("/{entry_id}", response_model=TimeEntry)
@router.patch("/{entry_id}", response_model=TimeEntry)
async def update_entry(
    entry_id: str,
    entry_update: TimeEntryUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Update a time entry.

    - Duration is recomputed from the instants unless manual_duration is set
    - Setting end_time stops a running entry
    """
    service = TimerService(db)
    try:
        return await service.update_entry(
            user_id=user_id,
            entry_id=entry_id,
            entry_update=entry_update,
        )
    except ValueError as e:
        raise to_http_exception(e)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entry(
    entry_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Delete a time entry (hard delete)."""
    service = TimerService(db)
    try:
        await service.delete_entry(user_id=user_id, entry_id=entry_id)
    except ValueError as e:
        raise to_http_exception(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
