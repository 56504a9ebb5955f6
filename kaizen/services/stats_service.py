"""Stats service - read-only rollups over completed time entries."""
from collections import defaultdict
from datetime import date, datetime, timedelta, tzinfo
from typing import Optional

from kaizen.models.stats import DailyTime, MonthlyTime, ProjectTime, UserStats, WeeklyTime
from kaizen.utils.timeutils import ensure_utc


def week_start_of(day: date, week_start: int) -> date:
    """
    First day of the week containing ``day``.

    ``week_start`` uses 0 = Sunday through 6 = Saturday.

    Example:
        >>> week_start_of(date(2024, 1, 10), 1)  # a Wednesday
        datetime.date(2024, 1, 8)
    """
    # date.weekday() is 0 = Monday
    offset = (day.weekday() + 1 - week_start) % 7
    return day - timedelta(days=offset)


class StatsService:
    """Service computing daily/weekly/monthly and per-project totals."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.time_entries = db["time_entries"]
        self.tasks = db["tasks"]
        self.projects = db["projects"]

    async def get_user_stats(
        self,
        user_id: str,
        tz: tzinfo,
        week_start: int = 1,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> UserStats:
        """
        Aggregate a user's completed entries.

        Args:
            user_id: User ID
            tz: Zone used to assign entries to calendar days
            week_start: First day of the week, 0 = Sunday
            start_date: Optional lower bound on start_time
            end_date: Optional upper bound on start_time

        Returns:
            Totals in seconds
        """
        query = {"user_id": user_id, "duration": {"$ne": None}}
        if start_date or end_date:
            query["start_time"] = {}
            if start_date:
                query["start_time"]["$gte"] = ensure_utc(start_date)
            if end_date:
                query["start_time"]["$lte"] = ensure_utc(end_date)

        entries = await self.time_entries.find(query).to_list(length=None)

        daily = defaultdict(int)
        weekly = defaultdict(int)
        monthly = defaultdict(int)
        by_task = defaultdict(int)
        total = 0

        for entry in entries:
            duration = entry["duration"]
            day = ensure_utc(entry["start_time"]).astimezone(tz).date()
            daily[day] += duration
            weekly[week_start_of(day, week_start)] += duration
            monthly[day.replace(day=1)] += duration
            by_task[entry["task_id"]] += duration
            total += duration

        return UserStats(
            total_tracked_time=total,
            project_stats=await self._project_stats(user_id, by_task),
            daily_stats=[DailyTime(date=d, total_time=t) for d, t in sorted(daily.items())],
            weekly_stats=[WeeklyTime(week_start=d, total_time=t) for d, t in sorted(weekly.items())],
            monthly_stats=[MonthlyTime(month=d, total_time=t) for d, t in sorted(monthly.items())],
        )

    async def _project_stats(self, user_id: str, by_task: dict) -> list[ProjectTime]:
        """Fold per-task totals into active projects with their share."""
        task_docs = await self.tasks.find({"user_id": user_id}).to_list(length=None)
        project_docs = await self.projects.find(
            {"user_id": user_id, "is_active": True}
        ).to_list(length=None)
        projects = {str(doc["_id"]): doc for doc in project_docs}

        by_project = defaultdict(int)
        for task in task_docs:
            seconds = by_task.get(str(task["_id"]))
            if seconds and task["project_id"] in projects:
                by_project[task["project_id"]] += seconds

        total = sum(by_project.values())
        stats = [
            ProjectTime(
                id=project_id,
                name=projects[project_id]["name"],
                color=projects[project_id]["color"],
                total_time=seconds,
                percentage=(seconds / total) * 100 if total else 0.0,
            )
            for project_id, seconds in by_project.items()
        ]
        stats.sort(key=lambda p: p.total_time, reverse=True)
        return stats
