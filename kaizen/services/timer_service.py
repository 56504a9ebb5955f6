"""Timer service - business logic for time tracking."""
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.errors import DuplicateKeyError

from kaizen.config import settings
from kaizen.errors import InvalidInputError, NotFoundError, TimerConflictError
from kaizen.models.time_entry import TimeEntry, TimeEntryCreate, TimeEntryUpdate
from kaizen.utils.ids import find_owned
from kaizen.utils.timeutils import calculate_duration, ensure_utc, utc_now

logger = logging.getLogger(__name__)

MAX_START_ATTEMPTS = 3


class TimerService:
    """
    Service for handling time tracking operations.

    A user has at most one open entry (``end_time`` is None). Open entries
    carry ``running_user_id``, which a unique sparse index keeps unique per
    user; every path that closes an entry unsets it.
    """

    def __init__(self, db, clock: Callable[[], datetime] = utc_now):
        """Initialize service with database connection."""
        self.db = db
        self.time_entries = db["time_entries"]
        self.tasks = db["tasks"]
        self.projects = db["projects"]
        self.clock = clock

    def _doc_to_entry(self, doc: dict, details: Optional[dict] = None) -> TimeEntry:
        """
        Convert database document to TimeEntry model.

        ``details`` maps task ids to the task/project display fields.
        """
        extra = (details or {}).get(doc["task_id"], {})
        return TimeEntry(
            _id=str(doc["_id"]),
            user_id=doc["user_id"],
            task_id=doc["task_id"],
            description=doc.get("description") or "",
            start_time=ensure_utc(doc["start_time"]),
            end_time=ensure_utc(doc.get("end_time")),
            duration=doc.get("duration"),
            created_at=ensure_utc(doc["created_at"]),
            updated_at=ensure_utc(doc["updated_at"]),
            **extra,
        )

    async def _load_details(self, docs: list[dict]) -> dict:
        """Fetch task and project display fields for a batch of entries."""
        task_ids = []
        for doc in docs:
            try:
                task_ids.append(ObjectId(doc["task_id"]))
            except (InvalidId, TypeError):
                continue
        if not task_ids:
            return {}

        task_docs = await self.tasks.find({"_id": {"$in": task_ids}}).to_list(length=None)
        project_ids = []
        for task in task_docs:
            try:
                project_ids.append(ObjectId(task["project_id"]))
            except (InvalidId, TypeError):
                continue
        project_docs = await self.projects.find(
            {"_id": {"$in": project_ids}}
        ).to_list(length=None)
        projects = {str(p["_id"]): p for p in project_docs}

        details = {}
        for task in task_docs:
            project = projects.get(task["project_id"], {})
            details[str(task["_id"])] = {
                "task_name": task["name"],
                "project_id": task["project_id"],
                "project_name": project.get("name"),
                "project_color": project.get("color"),
            }
        return details

    async def _to_entries(self, docs: list[dict]) -> list[TimeEntry]:
        details = await self._load_details(docs)
        return [self._doc_to_entry(doc, details) for doc in docs]

    def _latest_allowed(self) -> datetime:
        """Latest instant accepted as "not in the future"."""
        return self.clock() + timedelta(seconds=settings.clock_skew_seconds)

    async def _close_entry(
        self,
        doc: dict,
        end_time: datetime,
        description: Optional[str] = None,
    ) -> Optional[dict]:
        """
        Close one open entry. Returns None if it was closed meanwhile.

        Duration comes from wall-clock elapse and is clamped at zero.
        """
        update_doc = {
            "end_time": end_time,
            "duration": max(0, calculate_duration(doc["start_time"], end_time)),
            "updated_at": self.clock(),
        }
        if description is not None:
            update_doc["description"] = description

        return await self.time_entries.find_one_and_update(
            {"_id": doc["_id"], "end_time": None},
            {"$set": update_doc, "$unset": {"running_user_id": ""}},
            return_document=True,
        )

    async def close_open_entries(
        self,
        user_id: str,
        end_time: Optional[datetime] = None,
    ) -> list[TimeEntry]:
        """
        Close every open entry of a user.

        Args:
            user_id: User ID
            end_time: Optional end time (defaults to now)

        Returns:
            The entries that were closed by this call
        """
        if end_time is None:
            end_time = self.clock()

        open_docs = await self.time_entries.find({
            "user_id": user_id,
            "end_time": None,
        }).to_list(length=None)

        closed = []
        for doc in open_docs:
            closed_doc = await self._close_entry(doc, end_time)
            if closed_doc is not None:
                closed.append(self._doc_to_entry(closed_doc))
        return closed

    async def start_timer(
        self,
        user_id: str,
        task_id: str,
        description: str = "",
        start_time: Optional[datetime] = None,
    ) -> TimeEntry:
        """
        Start a new timer, closing whatever timer the user had running.

        Args:
            user_id: User ID
            task_id: Task to track time against
            description: Optional description
            start_time: Optional start time (defaults to now)

        Returns:
            Created open time entry

        Raises:
            NotFoundError: If the task doesn't exist
            ForbiddenError: If the task belongs to another user
            InvalidInputError: If start_time is in the future
            TimerConflictError: If concurrent starts keep colliding
        """
        await find_owned(self.tasks, task_id, user_id, "task")

        now = self.clock()
        start_time = ensure_utc(start_time) if start_time else now
        if start_time > self._latest_allowed():
            raise InvalidInputError("Start time cannot be in the future")

        for _ in range(MAX_START_ATTEMPTS):
            for closed in await self.close_open_entries(user_id, end_time=now):
                logger.warning(
                    "Closed running entry %s (%ss) before starting a new timer",
                    closed.id, closed.duration,
                )

            entry_doc = {
                "user_id": user_id,
                "task_id": task_id,
                "description": description,
                "start_time": start_time,
                "end_time": None,
                "duration": None,
                "running_user_id": user_id,
                "created_at": now,
                "updated_at": now,
            }
            try:
                result = await self.time_entries.insert_one(entry_doc)
            except DuplicateKeyError:
                logger.warning("Concurrent timer start for user %s, retrying", user_id)
                continue

            entry_doc["_id"] = result.inserted_id
            logger.info("Started timer %s on task %s", result.inserted_id, task_id)
            return (await self._to_entries([entry_doc]))[0]

        raise TimerConflictError("Another timer was started at the same time")

    async def stop_timer(
        self,
        user_id: str,
        end_time: Optional[datetime] = None,
        description: Optional[str] = None,
    ) -> TimeEntry:
        """
        Stop the currently running timer.

        Args:
            user_id: User ID
            end_time: Optional end time (defaults to now)
            description: Optional final description

        Returns:
            Updated time entry with end_time and duration

        Raises:
            NotFoundError: If no timer is running
        """
        running = await self.time_entries.find_one(
            {"user_id": user_id, "end_time": None},
            sort=[("start_time", -1)],
        )
        if not running:
            raise NotFoundError("No timer running")

        end_time = ensure_utc(end_time) if end_time else self.clock()
        closed_doc = await self._close_entry(running, end_time, description)
        if closed_doc is None:
            raise NotFoundError("No timer running")

        logger.info("Stopped timer %s after %ss", closed_doc["_id"], closed_doc["duration"])
        return (await self._to_entries([closed_doc]))[0]

    async def get_active_entry(
        self,
        user_id: str,
    ) -> Optional[TimeEntry]:
        """
        Get the currently running entry, if any.

        Args:
            user_id: User ID

        Returns:
            Open time entry with display fields, or None
        """
        running = await self.time_entries.find_one(
            {"user_id": user_id, "end_time": None},
            sort=[("start_time", -1)],
        )
        if not running:
            return None

        return (await self._to_entries([running]))[0]

    async def list_entries(
        self,
        user_id: str,
        task_id: Optional[str] = None,
        is_active: bool = False,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> list[TimeEntry]:
        """
        List time entries for a user with optional filtering.

        Args:
            user_id: User ID
            task_id: Optional task filter
            is_active: Only return open entries
            start_date: Optional lower bound on start_time
            end_date: Optional upper bound on start_time

        Returns:
            List of time entries, most recent first
        """
        query = {"user_id": user_id}

        if task_id:
            query["task_id"] = task_id
        if is_active:
            query["end_time"] = None
        if start_date or end_date:
            query["start_time"] = {}
            if start_date:
                query["start_time"]["$gte"] = ensure_utc(start_date)
            if end_date:
                query["start_time"]["$lte"] = ensure_utc(end_date)

        cursor = self.time_entries.find(query).sort("start_time", -1)
        return await self._to_entries(await cursor.to_list(length=None))

    async def recent_entries(self, user_id: str, limit: int = 10) -> list[TimeEntry]:
        """Most recent completed entries."""
        cursor = self.time_entries.find(
            {"user_id": user_id, "end_time": {"$ne": None}}
        ).sort("start_time", -1).limit(limit)
        return await self._to_entries(await cursor.to_list(length=None))

    async def get_entry(self, user_id: str, entry_id: str) -> TimeEntry:
        """
        Get one time entry.

        Raises:
            NotFoundError: If entry not found
            ForbiddenError: If entry belongs to another user
        """
        doc = await find_owned(self.time_entries, entry_id, user_id, "time entry")
        return (await self._to_entries([doc]))[0]

    async def create_entry(
        self,
        user_id: str,
        entry_create: TimeEntryCreate,
    ) -> TimeEntry:
        """
        Create a time entry.

        Without an end time this starts a timer. With one it records a
        completed interval whose duration is derived from the instants,
        unless ``manual_duration`` is set.

        Raises:
            NotFoundError: If the task doesn't exist
            ForbiddenError: If the task belongs to another user
            InvalidInputError: If the interval is empty or in the future
        """
        if entry_create.end_time is None:
            if entry_create.duration is not None:
                raise InvalidInputError("Duration cannot be set on a running entry")
            return await self.start_timer(
                user_id=user_id,
                task_id=entry_create.task_id,
                description=entry_create.description,
                start_time=entry_create.start_time,
            )

        await find_owned(self.tasks, entry_create.task_id, user_id, "task")

        if entry_create.start_time is None:
            raise InvalidInputError("Start time is required for a completed entry")
        start_time = ensure_utc(entry_create.start_time)
        end_time = ensure_utc(entry_create.end_time)

        if end_time <= start_time:
            raise InvalidInputError("End time must be after start time")
        if end_time > self._latest_allowed():
            raise InvalidInputError("Time entries cannot be in the future")

        duration = calculate_duration(start_time, end_time)
        if entry_create.manual_duration and entry_create.duration is not None:
            duration = entry_create.duration

        now = self.clock()
        entry_doc = {
            "user_id": user_id,
            "task_id": entry_create.task_id,
            "description": entry_create.description,
            "start_time": start_time,
            "end_time": end_time,
            "duration": duration,
            "created_at": now,
            "updated_at": now,
        }

        result = await self.time_entries.insert_one(entry_doc)
        entry_doc["_id"] = result.inserted_id

        return (await self._to_entries([entry_doc]))[0]

    async def update_entry(
        self,
        user_id: str,
        entry_id: str,
        entry_update: TimeEntryUpdate,
    ) -> TimeEntry:
        """
        Patch a time entry.

        Whenever the instants of a closed entry change, its duration is
        recomputed from them; a caller-supplied duration is kept only with
        ``manual_duration``.

        Raises:
            NotFoundError: If the entry or new task is not found
            ForbiddenError: If either belongs to another user
            InvalidInputError: If the resulting interval is invalid
        """
        existing = await find_owned(self.time_entries, entry_id, user_id, "time entry")

        update_doc = {}

        if entry_update.task_id is not None and entry_update.task_id != existing["task_id"]:
            await find_owned(self.tasks, entry_update.task_id, user_id, "task")
            update_doc["task_id"] = entry_update.task_id

        start_time = ensure_utc(existing["start_time"])
        if entry_update.start_time is not None:
            start_time = ensure_utc(entry_update.start_time)
            if start_time > self._latest_allowed():
                raise InvalidInputError("Start time cannot be in the future")
            update_doc["start_time"] = start_time

        end_time = ensure_utc(existing.get("end_time"))
        if entry_update.end_time is not None:
            end_time = ensure_utc(entry_update.end_time)
            if end_time > self._latest_allowed():
                raise InvalidInputError("Time entries cannot be in the future")
            update_doc["end_time"] = end_time

        if end_time is None:
            if entry_update.duration is not None:
                raise InvalidInputError("Duration cannot be set on a running entry")
        else:
            if end_time < start_time:
                raise InvalidInputError("End time must not be before start time")
            if entry_update.manual_duration and entry_update.duration is not None:
                update_doc["duration"] = entry_update.duration
            elif (
                entry_update.start_time is not None
                or entry_update.end_time is not None
                or entry_update.duration is not None
            ):
                update_doc["duration"] = calculate_duration(start_time, end_time)

        if entry_update.description is not None:
            update_doc["description"] = entry_update.description

        update_doc["updated_at"] = self.clock()
        operations = {"$set": update_doc}
        if existing.get("end_time") is None and end_time is not None:
            operations["$unset"] = {"running_user_id": ""}

        updated_doc = await self.time_entries.find_one_and_update(
            {"_id": existing["_id"]},
            operations,
            return_document=True,
        )

        return (await self._to_entries([updated_doc]))[0]

    async def delete_entry(
        self,
        user_id: str,
        entry_id: str,
    ) -> dict:
        """
        Delete a time entry (hard delete).

        Raises:
            NotFoundError: If entry not found
            ForbiddenError: If entry belongs to another user
        """
        existing = await find_owned(self.time_entries, entry_id, user_id, "time entry")

        result = await self.time_entries.delete_one({"_id": existing["_id"]})

        return {"deleted_count": result.deleted_count}
