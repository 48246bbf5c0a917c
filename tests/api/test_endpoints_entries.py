"""Tests for time entry endpoints."""

from datetime import datetime, timedelta
from typing import Any

import pytest  # type: ignore[import-not-found]
from fastapi.testclient import TestClient  # type: ignore[import-untyped]


def iso(dt: datetime) -> str:
    return dt.astimezone().isoformat()


START = datetime(2025, 11, 16, 9, 0)


@pytest.fixture
def project_id(projects: list[dict[str, Any]]) -> str:
    return projects[0]["id"]


@pytest.fixture
def sample_entry(client: TestClient, project_id: str) -> dict[str, Any]:
    """A completed 25 minute entry."""
    response = client.post(
        "/api/time-entries",
        json={
            "projectId": project_id,
            "startTime": iso(START),
            "endTime": iso(START + timedelta(minutes=25)),
            "description": "Invoices",
        },
    )
    assert response.status_code == 201
    return response.json()


class TestCreateEntry:
    """Test POST /api/time-entries."""

    def test_with_end_time(self, sample_entry: dict[str, Any], project_id: str) -> None:
        """Test the response shape of a completed entry."""
        assert sample_entry["projectId"] == project_id
        assert sample_entry["projectName"] == "Client A - Bookkeeping"
        assert sample_entry["duration"] == 1_500_000
        assert sample_entry["status"] == "completed"
        assert sample_entry["description"] == "Invoices"
        assert sample_entry["endTime"] is not None
        for key in ("id", "startTime", "createdAt", "updatedAt"):
            assert key in sample_entry

    def test_utc_timestamps(self, client: TestClient, project_id: str) -> None:
        """Test that Z-suffixed timestamps are accepted."""
        response = client.post(
            "/api/time-entries",
            json={
                "projectId": project_id,
                "startTime": "2025-11-16T09:00:00Z",
                "endTime": "2025-11-16T09:25:00Z",
            },
        )

        assert response.status_code == 201
        assert response.json()["duration"] == 1_500_000

    def test_with_duration_only(self, client: TestClient, project_id: str) -> None:
        """Test that the end is derived from the duration."""
        response = client.post(
            "/api/time-entries",
            json={"projectId": project_id, "startTime": iso(START), "duration": 60_000},
        )

        data = response.json()
        assert response.status_code == 201
        assert data["duration"] == 60_000
        assert data["status"] == "completed"

    def test_client_duration_ignored_with_end_time(
        self, client: TestClient, project_id: str
    ) -> None:
        """Test that duration is recomputed from the timestamps."""
        response = client.post(
            "/api/time-entries",
            json={
                "projectId": project_id,
                "startTime": iso(START),
                "endTime": iso(START + timedelta(minutes=1)),
                "duration": 5,
            },
        )

        assert response.json()["duration"] == 60_000

    def test_open_entry_is_running(self, client: TestClient, project_id: str) -> None:
        """Test that an entry without end becomes the running timer."""
        response = client.post(
            "/api/time-entries", json={"projectId": project_id, "startTime": iso(datetime.now())}
        )

        assert response.status_code == 201
        assert response.json()["status"] == "running"
        assert response.json()["endTime"] is None
        assert response.json()["duration"] == 0

    def test_missing_fields(self, client: TestClient) -> None:
        """Test that projectId and startTime are required."""
        response = client.post("/api/time-entries", json={})

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields: projectId, startTime"}

    def test_unknown_project(self, client: TestClient) -> None:
        """Test 404 when the project does not exist."""
        response = client.post(
            "/api/time-entries",
            json={
                "projectId": "missing",
                "startTime": iso(START),
                "endTime": iso(START + timedelta(minutes=1)),
            },
        )

        assert response.status_code == 404
        assert client.get("/api/time-entries").json() == []

    def test_end_before_start(self, client: TestClient, project_id: str) -> None:
        """Test that a negative span is rejected."""
        response = client.post(
            "/api/time-entries",
            json={
                "projectId": project_id,
                "startTime": iso(START),
                "endTime": iso(START - timedelta(minutes=1)),
            },
        )

        assert response.status_code == 400

    def test_negative_duration(self, client: TestClient, project_id: str) -> None:
        response = client.post(
            "/api/time-entries",
            json={"projectId": project_id, "startTime": iso(START), "duration": -1},
        )
        assert response.status_code == 400

    def test_malformed_timestamp(self, client: TestClient, project_id: str) -> None:
        response = client.post(
            "/api/time-entries", json={"projectId": project_id, "startTime": "not a time"}
        )
        assert response.status_code == 400
        assert "startTime" in response.json()["error"]


class TestListAndGet:
    """Test GET endpoints."""

    def test_list_newest_first(self, client: TestClient, project_id: str) -> None:
        """Test ordering and the limit parameter."""
        for hours in (0, 2, 1):
            start = START + timedelta(hours=hours)
            client.post(
                "/api/time-entries",
                json={
                    "projectId": project_id,
                    "startTime": iso(start),
                    "endTime": iso(start + timedelta(minutes=5)),
                    "description": f"h{hours}",
                },
            )

        data = client.get("/api/time-entries").json()
        assert [e["description"] for e in data] == ["h2", "h1", "h0"]

        limited = client.get("/api/time-entries", params={"limit": 2}).json()
        assert [e["description"] for e in limited] == ["h2", "h1"]

    def test_get_entry(self, client: TestClient, sample_entry: dict[str, Any]) -> None:
        response = client.get(f"/api/time-entries/{sample_entry['id']}")

        assert response.status_code == 200
        assert response.json() == sample_entry

    def test_get_missing_entry(self, client: TestClient) -> None:
        response = client.get("/api/time-entries/nope")

        assert response.status_code == 404
        assert response.json() == {"error": "Time entry not found: nope"}


class TestUpdateEntry:
    """Test PUT /api/time-entries/{id}."""

    def test_partial_update(self, client: TestClient, sample_entry: dict[str, Any]) -> None:
        """Test that only provided fields change."""
        response = client.put(
            f"/api/time-entries/{sample_entry['id']}", json={"description": "Quarterly close"}
        )

        data = response.json()
        assert response.status_code == 200
        assert data["description"] == "Quarterly close"
        assert data["duration"] == sample_entry["duration"]
        assert data["projectId"] == sample_entry["projectId"]

    def test_update_end_time_recomputes_duration(
        self, client: TestClient, sample_entry: dict[str, Any]
    ) -> None:
        response = client.put(
            f"/api/time-entries/{sample_entry['id']}",
            json={"endTime": iso(START + timedelta(hours=1))},
        )
        assert response.json()["duration"] == 3_600_000

    def test_update_duration_moves_end(
        self, client: TestClient, sample_entry: dict[str, Any]
    ) -> None:
        response = client.put(
            f"/api/time-entries/{sample_entry['id']}", json={"duration": 600_000}
        )
        assert response.json()["duration"] == 600_000

    def test_clear_description(self, client: TestClient, sample_entry: dict[str, Any]) -> None:
        """Test that an explicit null removes the description."""
        response = client.put(
            f"/api/time-entries/{sample_entry['id']}", json={"description": None}
        )
        assert response.json()["description"] is None

    def test_move_to_other_project(
        self,
        client: TestClient,
        sample_entry: dict[str, Any],
        projects: list[dict[str, Any]],
    ) -> None:
        response = client.put(
            f"/api/time-entries/{sample_entry['id']}", json={"projectId": projects[1]["id"]}
        )
        assert response.json()["projectName"] == "Client B - Tax Prep"

    def test_unknown_project(self, client: TestClient, sample_entry: dict[str, Any]) -> None:
        response = client.put(
            f"/api/time-entries/{sample_entry['id']}", json={"projectId": "missing"}
        )
        assert response.status_code == 404

    def test_end_before_start(self, client: TestClient, sample_entry: dict[str, Any]) -> None:
        """Test that an update cannot invert the span."""
        response = client.put(
            f"/api/time-entries/{sample_entry['id']}",
            json={"startTime": iso(START + timedelta(hours=2))},
        )

        assert response.status_code == 400
        stored = client.get(f"/api/time-entries/{sample_entry['id']}").json()
        assert stored["startTime"] == sample_entry["startTime"]

    def test_missing_entry(self, client: TestClient) -> None:
        response = client.put("/api/time-entries/nope", json={"description": "x"})
        assert response.status_code == 404


class TestDeleteEntry:
    """Test DELETE /api/time-entries/{id}."""

    def test_delete_entry(self, client: TestClient, sample_entry: dict[str, Any]) -> None:
        response = client.delete(f"/api/time-entries/{sample_entry['id']}")

        assert response.status_code == 200
        assert response.json() == {"success": True, "id": sample_entry["id"]}
        assert client.get("/api/time-entries").json() == []

    def test_delete_missing_entry(self, client: TestClient) -> None:
        response = client.delete("/api/time-entries/nope")

        assert response.status_code == 404
        assert "error" in response.json()
