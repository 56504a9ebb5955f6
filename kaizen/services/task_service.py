"""Task service - business logic for task management."""
import re
from typing import Optional

from kaizen.models.task import Task, TaskCreate, TaskUpdate
from kaizen.utils.ids import find_owned
from kaizen.utils.timeutils import utc_now


class TaskService:
    """Service for handling task operations."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.tasks = db["tasks"]
        self.projects = db["projects"]
        self.time_entries = db["time_entries"]

    def _doc_to_task(self, doc: dict) -> Task:
        """Convert database document to Task model."""
        return Task(
            _id=str(doc["_id"]),
            user_id=doc["user_id"],
            project_id=doc["project_id"],
            name=doc["name"],
            description=doc.get("description", ""),
            is_completed=doc.get("is_completed", False),
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    async def create_task(
        self,
        user_id: str,
        task_create: TaskCreate,
    ) -> Task:
        """
        Create a task inside one of the user's projects.

        Raises:
            NotFoundError: If project doesn't exist
            ForbiddenError: If project belongs to another user
        """
        await find_owned(self.projects, task_create.project_id, user_id, "project")

        now = utc_now()
        task_doc = {
            "user_id": user_id,
            "project_id": task_create.project_id,
            "name": task_create.name,
            "description": task_create.description,
            "is_completed": False,
            "created_at": now,
            "updated_at": now,
        }

        result = await self.tasks.insert_one(task_doc)
        task_doc["_id"] = result.inserted_id

        return self._doc_to_task(task_doc)

    async def list_tasks(
        self,
        user_id: str,
        project_id: Optional[str] = None,
        is_completed: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> list[Task]:
        """
        List tasks for a user with optional filtering.

        Args:
            user_id: User ID
            project_id: Optional project filter
            is_completed: Optional completion filter
            search: Optional case-insensitive text matched against name
                and description

        Returns:
            List of tasks, newest first
        """
        query = {"user_id": user_id}

        if project_id:
            query["project_id"] = project_id
        if is_completed is not None:
            query["is_completed"] = is_completed
        if search:
            pattern = {"$regex": re.escape(search), "$options": "i"}
            query["$or"] = [{"name": pattern}, {"description": pattern}]

        cursor = self.tasks.find(query).sort("created_at", -1)
        task_docs = await cursor.to_list(length=None)

        return [self._doc_to_task(doc) for doc in task_docs]

    async def get_task(self, user_id: str, task_id: str) -> Task:
        """
        Get a task by id.

        Raises:
            NotFoundError: If task not found
            ForbiddenError: If task belongs to another user
        """
        doc = await find_owned(self.tasks, task_id, user_id, "task")
        return self._doc_to_task(doc)

    async def update_task(
        self,
        user_id: str,
        task_id: str,
        task_update: TaskUpdate,
    ) -> Task:
        """
        Update a task. Moving it to another project re-checks ownership.

        Raises:
            NotFoundError: If task or target project not found
            ForbiddenError: If either belongs to another user
        """
        existing = await find_owned(self.tasks, task_id, user_id, "task")

        if task_update.project_id is not None and task_update.project_id != existing["project_id"]:
            await find_owned(self.projects, task_update.project_id, user_id, "project")

        update_doc = task_update.model_dump(exclude_none=True)
        update_doc["updated_at"] = utc_now()

        updated_doc = await self.tasks.find_one_and_update(
            {"_id": existing["_id"]},
            {"$set": update_doc},
            return_document=True,
        )

        return self._doc_to_task(updated_doc)

    async def delete_task(
        self,
        user_id: str,
        task_id: str,
    ) -> dict:
        """
        Delete a task and its time entries.

        Raises:
            NotFoundError: If task not found
            ForbiddenError: If task belongs to another user
        """
        existing = await find_owned(self.tasks, task_id, user_id, "task")

        entries = await self.time_entries.delete_many({"task_id": task_id})
        result = await self.tasks.delete_one({"_id": existing["_id"]})

        return {
            "deleted_count": result.deleted_count,
            "deleted_time_entries": entries.deleted_count,
        }
