"""Integration tests for task endpoints."""
import pytest


@pytest.mark.asyncio
class TestTaskEndpoints:
    """Tests for the /tasks endpoints."""

    async def test_create_task(self, app_client, auth_headers):
        project = await app_client.post(
            "/projects", json={"name": "Client work"}, headers=auth_headers
        )

        response = await app_client.post(
            "/tasks",
            json={"project_id": project.json()["id"], "name": "Write report"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Write report"
        assert data["is_completed"] is False

    async def test_create_task_in_other_users_project(
        self, app_client, auth_headers, other_headers
    ):
        project = await app_client.post(
            "/projects", json={"name": "Theirs"}, headers=other_headers
        )

        response = await app_client.post(
            "/tasks",
            json={"project_id": project.json()["id"], "name": "Sneaky"},
            headers=auth_headers,
        )

        assert response.status_code == 403

    async def test_list_tasks_search_and_filter(self, app_client, auth_headers, make_task):
        report = await make_task(auth_headers, task_name="Write report")
        await make_task(auth_headers, task_name="Invoice", project_name="Admin")
        await app_client.patch(
            f"/tasks/{report['id']}", json={"is_completed": True}, headers=auth_headers
        )

        by_search = await app_client.get("/tasks?search=REPORT", headers=auth_headers)
        by_project = await app_client.get(
            f"/tasks?project_id={report['project_id']}", headers=auth_headers
        )
        open_tasks = await app_client.get("/tasks?is_completed=false", headers=auth_headers)

        assert [t["name"] for t in by_search.json()] == ["Write report"]
        assert [t["name"] for t in by_project.json()] == ["Write report"]
        assert [t["name"] for t in open_tasks.json()] == ["Invoice"]

    async def test_get_task_of_other_user(self, app_client, auth_headers, other_headers, make_task):
        task = await make_task(other_headers)

        response = await app_client.get(f"/tasks/{task['id']}", headers=auth_headers)

        assert response.status_code == 403

    async def test_delete_task(self, app_client, auth_headers, make_task):
        task = await make_task(auth_headers)
        await app_client.post(
            "/time-entries",
            json={
                "task_id": task["id"],
                "start_time": "2024-01-05T09:00:00Z",
                "end_time": "2024-01-05T10:00:00Z",
            },
            headers=auth_headers,
        )

        response = await app_client.delete(f"/tasks/{task['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"deleted_count": 1, "deleted_time_entries": 1}
        entries = await app_client.get("/time-entries", headers=auth_headers)
        assert entries.json() == []
