"""Tests for stats, snapshot, export and reset endpoints."""

from datetime import date, datetime, time, timedelta
from typing import Any

from fastapi.testclient import TestClient  # type: ignore[import-untyped]


def add_entry(client: TestClient, project_id: str, start: datetime, minutes: int) -> dict:
    response = client.post(
        "/api/time-entries",
        json={
            "projectId": project_id,
            "startTime": start.astimezone().isoformat(),
            "endTime": (start + timedelta(minutes=minutes)).astimezone().isoformat(),
        },
    )
    assert response.status_code == 201
    return response.json()


def today_at(hour: int) -> datetime:
    return datetime.combine(date.today(), time(hour, 0))


class TestStats:
    """Test GET /api/stats."""

    def test_empty_store(self, client: TestClient) -> None:
        data = client.get("/api/stats").json()

        assert data["totalEntries"] == 0
        assert data["todayEntries"] == 0
        assert data["todayTotal"] == 0
        assert data["weekTotal"] == 0
        assert data["projectCount"] == 3
        assert data["activeTimer"] is None
        assert data["projectBreakdown"] == []

    def test_today_total(self, client: TestClient, projects: list[dict[str, Any]]) -> None:
        """Test a 25 minute entry today counts 1500000 ms."""
        add_entry(client, projects[0]["id"], today_at(9), 25)

        data = client.get("/api/stats").json()

        assert data["todayTotal"] == 1_500_000
        assert data["todayEntries"] == 1
        assert data["weekTotal"] >= 1_500_000
        assert data["projectBreakdown"] == [
            {
                "projectId": projects[0]["id"],
                "projectName": "Client A - Bookkeeping",
                "color": "#3498db",
                "total": 1_500_000,
                "entries": 1,
            }
        ]

    def test_old_entries_excluded(self, client: TestClient, projects: list[dict[str, Any]]) -> None:
        """Test that entries from weeks ago only count toward the total."""
        add_entry(client, projects[0]["id"], today_at(9) - timedelta(days=30), 10)

        data = client.get("/api/stats").json()

        assert data["totalEntries"] == 1
        assert data["todayTotal"] == 0
        assert data["weekTotal"] == 0

    def test_active_timer(self, client: TestClient, projects: list[dict[str, Any]]) -> None:
        client.post("/api/extension/start-timer", json={"projectId": projects[1]["id"]})

        data = client.get("/api/stats").json()

        assert data["activeTimer"]["projectName"] == "Client B - Tax Prep"
        assert data["todayTotal"] == 0


class TestSnapshot:
    """Test GET /api/snapshot."""

    def test_snapshot(self, client: TestClient, projects: list[dict[str, Any]]) -> None:
        entry = add_entry(client, projects[0]["id"], today_at(9), 25)

        data = client.get("/api/snapshot").json()

        assert data["projects"] == projects
        assert [e["id"] for e in data["entries"]] == [entry["id"]]
        assert data["stats"]["todayTotal"] == 1_500_000


class TestExport:
    """Test GET /api/export."""

    def test_export_attachment(self, client: TestClient, projects: list[dict[str, Any]]) -> None:
        add_entry(client, projects[0]["id"], today_at(9), 25)

        response = client.get("/api/export")

        assert response.status_code == 200
        disposition = response.headers["content-disposition"]
        assert disposition.startswith("attachment;")
        assert "time-tracker-export-" in disposition

        data = response.json()
        assert "exportedAt" in data
        assert data["version"]
        assert data["projects"] == projects
        assert len(data["entries"]) == 1
        assert data["entries"][0]["duration"] == 1_500_000


class TestReset:
    """Test DELETE /api/reset."""

    def test_reset(self, client: TestClient, projects: list[dict[str, Any]]) -> None:
        """Test that reset clears entries and reseeds the defaults."""
        client.post("/api/projects", json={"name": "Research"})
        add_entry(client, projects[0]["id"], today_at(9), 25)

        response = client.delete("/api/reset")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert [p["name"] for p in data["projects"]] == [p["name"] for p in projects]
        assert client.get("/api/time-entries").json() == []
        assert len(client.get("/api/projects").json()) == 3

    def test_reset_takes_backup(self, client: TestClient, test_app) -> None:
        client.delete("/api/reset")

        backups = list(test_app.state.storage.backup_dir.iterdir())
        assert len(backups) == 1
        assert (backups[0] / "entries.csv").exists()
