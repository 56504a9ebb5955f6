"""HTTP client for the Kaizen API."""
from datetime import datetime
from typing import Optional

import httpx

from kaizen.errors import error_for_status
from kaizen.models.project import Project
from kaizen.models.task import Task
from kaizen.models.time_entry import TimeEntry, TimeEntryCreate, TimeEntryUpdate
from kaizen.models.user import User


class KaizenAPI:
    """
    Thin async wrapper over the REST API.

    Error responses are raised as the matching ``kaizen.errors`` class;
    transport failures propagate as ``httpx.HTTPError``.
    """

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    @classmethod
    def connect(cls, base_url: str, token: str, timeout: float = 10.0) -> "KaizenAPI":
        """Create an API client authenticated with a bearer token."""
        return cls(httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
        ))

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        response = await self.client.request(method, url, **kwargs)
        if response.is_error:
            try:
                detail = response.json().get("detail", response.text)
            except ValueError:
                detail = response.text
            error = error_for_status(response.status_code, str(detail))
            if error is None:
                response.raise_for_status()
            raise error
        return response

    async def get_current_user(self) -> User:
        response = await self._request("GET", "/auth/me")
        return User.model_validate(response.json())

    async def get_task(self, task_id: str) -> Task:
        response = await self._request("GET", f"/tasks/{task_id}")
        return Task.model_validate(response.json())

    async def get_project(self, project_id: str) -> Project:
        response = await self._request("GET", f"/projects/{project_id}")
        return Project.model_validate(response.json())

    async def get_active_entry(self) -> Optional[TimeEntry]:
        """The user's open entry, or None."""
        response = await self._request("GET", "/time-entries/active")
        data = response.json()
        if data is None:
            return None
        return TimeEntry.model_validate(data)

    async def list_entries(self, **filters) -> list[TimeEntry]:
        params = {key: value for key, value in filters.items() if value is not None}
        response = await self._request("GET", "/time-entries", params=params)
        return [TimeEntry.model_validate(item) for item in response.json()]

    async def create_entry(
        self,
        task_id: str,
        start_time: datetime,
        end_time: Optional[datetime] = None,
        description: str = "",
    ) -> TimeEntry:
        """Create an entry; open when ``end_time`` is omitted."""
        payload = TimeEntryCreate(
            task_id=task_id,
            start_time=start_time,
            end_time=end_time,
            description=description,
        )
        response = await self._request(
            "POST",
            "/time-entries",
            json=payload.model_dump(mode="json", exclude_none=True),
        )
        return TimeEntry.model_validate(response.json())

    async def update_entry(self, entry_id: str, **fields) -> TimeEntry:
        """Patch an entry with any ``TimeEntryUpdate`` fields."""
        payload = TimeEntryUpdate(**fields)
        response = await self._request(
            "PATCH",
            f"/time-entries/{entry_id}",
            json=payload.model_dump(mode="json", exclude_none=True),
        )
        return TimeEntry.model_validate(response.json())

    async def stop_timer(
        self,
        end_time: Optional[datetime] = None,
        description: Optional[str] = None,
    ) -> TimeEntry:
        """
        Close the user's open entry.

        Raises:
            NotFoundError: If no entry is open, including when another
                client closed it first
        """
        payload = {}
        if end_time is not None:
            payload["end_time"] = end_time.isoformat()
        if description is not None:
            payload["description"] = description
        response = await self._request("POST", "/time-entries/stop", json=payload)
        return TimeEntry.model_validate(response.json())

    async def delete_entry(self, entry_id: str) -> None:
        await self._request("DELETE", f"/time-entries/{entry_id}")
