"""Project service - business logic for project management."""
import logging
from typing import Optional

from kaizen.config import settings
from kaizen.models.project import Project, ProjectCreate, ProjectUpdate
from kaizen.utils.ids import find_owned
from kaizen.utils.timeutils import utc_now

logger = logging.getLogger(__name__)


class ProjectService:
    """Service for handling project operations."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.projects = db["projects"]
        self.tasks = db["tasks"]
        self.time_entries = db["time_entries"]

    def _doc_to_project(self, doc: dict) -> Project:
        """Convert database document to Project model."""
        return Project(
            _id=str(doc["_id"]),
            user_id=doc["user_id"],
            name=doc["name"],
            description=doc.get("description", ""),
            color=doc["color"],
            is_active=doc.get("is_active", True),
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    async def create_project(
        self,
        user_id: str,
        project_create: ProjectCreate,
    ) -> Project:
        """
        Create a new project.

        Args:
            user_id: User ID who owns the project
            project_create: Project creation data

        Returns:
            Created project object
        """
        now = utc_now()
        project_doc = {
            "user_id": user_id,
            "name": project_create.name,
            "description": project_create.description,
            "color": project_create.color or settings.default_project_color,
            "is_active": True,
            "created_at": now,
            "updated_at": now,
        }

        result = await self.projects.insert_one(project_doc)
        project_doc["_id"] = result.inserted_id

        return self._doc_to_project(project_doc)

    async def list_projects(
        self,
        user_id: str,
        is_active: Optional[bool] = None,
    ) -> list[Project]:
        """
        List projects for a user, newest first.

        Args:
            user_id: User ID
            is_active: Optional active/archived filter

        Returns:
            List of projects
        """
        query = {"user_id": user_id}
        if is_active is not None:
            query["is_active"] = is_active

        cursor = self.projects.find(query).sort("created_at", -1)
        project_docs = await cursor.to_list(length=None)

        return [self._doc_to_project(doc) for doc in project_docs]

    async def get_project(self, user_id: str, project_id: str) -> Project:
        """
        Get a project by id.

        Raises:
            NotFoundError: If project not found
            ForbiddenError: If project belongs to another user
        """
        doc = await find_owned(self.projects, project_id, user_id, "project")
        return self._doc_to_project(doc)

    async def update_project(
        self,
        user_id: str,
        project_id: str,
        project_update: ProjectUpdate,
    ) -> Project:
        """
        Update a project.

        Raises:
            NotFoundError: If project not found
            ForbiddenError: If project belongs to another user
        """
        existing = await find_owned(self.projects, project_id, user_id, "project")

        update_doc = project_update.model_dump(exclude_none=True)
        update_doc["updated_at"] = utc_now()

        updated_doc = await self.projects.find_one_and_update(
            {"_id": existing["_id"]},
            {"$set": update_doc},
            return_document=True,
        )

        return self._doc_to_project(updated_doc)

    async def delete_project(
        self,
        user_id: str,
        project_id: str,
    ) -> dict:
        """
        Delete a project together with its tasks and their time entries.

        Returns:
            Dictionary with deleted counts

        Raises:
            NotFoundError: If project not found
            ForbiddenError: If project belongs to another user
        """
        existing = await find_owned(self.projects, project_id, user_id, "project")

        task_docs = await self.tasks.find(
            {"project_id": project_id, "user_id": user_id}
        ).to_list(length=None)
        task_ids = [str(doc["_id"]) for doc in task_docs]

        entries = await self.time_entries.delete_many({"task_id": {"$in": task_ids}})
        tasks = await self.tasks.delete_many({"project_id": project_id, "user_id": user_id})
        result = await self.projects.delete_one({"_id": existing["_id"]})

        logger.info(
            "Deleted project %s with %d tasks and %d time entries",
            project_id, tasks.deleted_count, entries.deleted_count,
        )
        return {
            "deleted_count": result.deleted_count,
            "deleted_tasks": tasks.deleted_count,
            "deleted_time_entries": entries.deleted_count,
        }
