"""
Tests for the manual reminder trigger (GET /test-send-email).
"""

from fastapi.testclient import TestClient

from tasktrack.api.app import create_app


def _seed(client: TestClient) -> None:
    project_id = client.post("/api/projects", json={"name": "Launch"}).json()["id"]
    for title, deadline in (("Ship", "2025-03-11"), ("Retro", "2025-03-14")):
        client.post(
            "/api/tasks",
            json={"projectId": project_id, "title": title, "status": "To Do", "deadline": deadline},
        )


class TestManualTrigger:
    def test_sends_digest_for_tomorrow(self, client: TestClient, transport) -> None:
        _seed(client)

        response = client.get("/test-send-email")

        assert response.status_code == 200
        assert response.text == "Triggered email reminder manually"
        assert len(transport.sent) == 1
        digest, recipient = transport.sent[0]
        assert recipient == "team@example.com"
        assert digest.subject == "Tasks Due Tomorrow (2025-03-11)"
        assert digest.task_count == 1
        assert "<td>Ship</td>" in digest.html
        assert "Retro" not in digest.html

    def test_nothing_due_still_answers_200(self, client: TestClient, transport) -> None:
        response = client.get("/test-send-email")

        assert response.status_code == 200
        assert transport.sent == []

    def test_delivery_failure_still_answers_200(self, client: TestClient, transport) -> None:
        _seed(client)
        transport.fail = True

        response = client.get("/test-send-email")

        assert response.status_code == 200
        assert transport.sent == []

    def test_not_under_api_prefix(self, client: TestClient) -> None:
        assert client.get("/api/test-send-email").status_code == 404


class TestSchedulerLifecycle:
    def test_scheduler_runs_while_app_is_up(self, config, transport) -> None:
        app = create_app(config, transport=transport, start_scheduler=True)

        with TestClient(app):
            scheduler = app.state.scheduler
            assert scheduler is not None
            assert scheduler.is_running

        assert not scheduler.is_running

    def test_scheduler_disabled(self, client: TestClient, app) -> None:
        assert app.state.scheduler is None
