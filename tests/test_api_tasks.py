"""
Tests for the task endpoints.

Tests validate:
- Task bodies use projectId and carry tags as a list
- Status must be one of "To Do", "In Progress", "Done"
- A task needs an existing project
- PUT merges fields; unknown ids answer 404
"""

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def project_id(client: TestClient) -> str:
    return client.post("/api/projects", json={"name": "Launch"}).json()["id"]


@pytest.fixture
def task(client: TestClient, project_id: str) -> dict:
    response = client.post(
        "/api/tasks",
        json={
            "projectId": project_id,
            "title": "Ship",
            "status": "To Do",
            "deadline": "2025-03-11",
            "tags": ["release", "ops"],
        },
    )
    assert response.status_code == 201
    return response.json()


class TestCreateTask:
    def test_create(self, task: dict, project_id: str) -> None:
        assert task["projectId"] == project_id
        assert task["title"] == "Ship"
        assert task["status"] == "To Do"
        assert task["deadline"] == "2025-03-11"
        assert task["tags"] == ["release", "ops"]
        assert task["completed"] is False
        assert task["description"] == ""
        assert task["comments"] == ""

    @pytest.mark.parametrize("missing", ["projectId", "title", "status"])
    def test_required_fields(self, client: TestClient, project_id: str, missing: str) -> None:
        body = {"projectId": project_id, "title": "Ship", "status": "To Do"}
        del body[missing]

        response = client.post("/api/tasks", json=body)

        assert response.status_code == 400
        assert client.get("/api/tasks").json() == []

    def test_invalid_status(self, client: TestClient, project_id: str) -> None:
        response = client.post(
            "/api/tasks", json={"projectId": project_id, "title": "Ship", "status": "Blocked"}
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"
        assert client.get("/api/tasks").json() == []

    def test_unknown_project(self, client: TestClient) -> None:
        response = client.post(
            "/api/tasks", json={"projectId": "missing", "title": "Ship", "status": "To Do"}
        )

        assert response.status_code == 400
        assert "missing" in response.json()["message"]

    def test_blank_title(self, client: TestClient, project_id: str) -> None:
        response = client.post(
            "/api/tasks", json={"projectId": project_id, "title": "   ", "status": "To Do"}
        )

        assert response.status_code == 400
        assert client.get("/api/tasks").json() == []

    def test_invalid_deadline(self, client: TestClient, project_id: str) -> None:
        response = client.post(
            "/api/tasks",
            json={"projectId": project_id, "title": "Ship", "status": "To Do", "deadline": "soon"},
        )
        assert response.status_code == 400


class TestTaskCrud:
    def test_list_and_filter(self, client: TestClient, task: dict, project_id: str) -> None:
        other = client.post("/api/projects", json={"name": "Other"}).json()["id"]
        client.post("/api/tasks", json={"projectId": other, "title": "Else", "status": "Done"})

        assert len(client.get("/api/tasks").json()) == 2
        assert client.get("/api/tasks", params={"projectId": project_id}).json() == [task]

    def test_get(self, client: TestClient, task: dict) -> None:
        assert client.get(f"/api/tasks/{task['id']}").json() == task

    def test_update_merges(self, client: TestClient, task: dict) -> None:
        response = client.put(
            f"/api/tasks/{task['id']}", json={"status": "Done", "completed": True}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "Done"
        assert data["completed"] is True
        assert data["title"] == "Ship"
        assert data["tags"] == ["release", "ops"]

    def test_update_invalid_status(self, client: TestClient, task: dict) -> None:
        response = client.put(f"/api/tasks/{task['id']}", json={"status": "Blocked"})

        assert response.status_code == 400
        assert client.get(f"/api/tasks/{task['id']}").json()["status"] == "To Do"

    def test_delete(self, client: TestClient, task: dict) -> None:
        response = client.delete(f"/api/tasks/{task['id']}")

        assert response.status_code == 200
        assert response.json() == {"message": "Task deleted", "id": task["id"]}
        assert client.get(f"/api/tasks/{task['id']}").status_code == 404

    def test_unknown_id(self, client: TestClient) -> None:
        assert client.put("/api/tasks/missing", json={"title": "X"}).status_code == 404
        assert client.delete("/api/tasks/missing").status_code == 404
