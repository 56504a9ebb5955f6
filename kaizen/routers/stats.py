"""Stats router - dashboard and report rollups."""
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, Depends, HTTPException, Query, status

from kaizen.database import get_database
from kaizen.errors import to_http_exception
from kaizen.routers.auth import get_current_user_id
from kaizen.models.stats import UserStats
from kaizen.services.auth_service import AuthService
from kaizen.services.stats_service import StatsService


router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("", response_model=UserStats)
async def get_user_stats(
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    tz: str = Query("UTC", description="IANA zone used to group by day"),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Totals of completed entries by day, week, month and project.

    - Weeks start on the user's configured week_start
    """
    try:
        zone = ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown time zone: {tz}",
        )

    try:
        user_settings = await AuthService(db).get_settings(user_id)
    except ValueError as e:
        raise to_http_exception(e)

    service = StatsService(db)
    return await service.get_user_stats(
        user_id=user_id,
        tz=zone,
        week_start=user_settings.week_start,
        start_date=start_date,
        end_date=end_date,
    )
