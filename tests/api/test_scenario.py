"""End-to-end flow across projects, the extension timer and stats."""

from datetime import date, datetime, time, timedelta

from fastapi.testclient import TestClient  # type: ignore[import-untyped]

from time_tracker.core.models import parse_timestamp, span_ms


def test_project_timer_stats_flow(client: TestClient) -> None:
    """Create a project, time it and see it in today's stats."""
    created = client.post("/api/projects", json={"name": "Research"})
    assert created.status_code == 201
    project_id = created.json()["id"]
    assert project_id

    started = client.post("/api/extension/start-timer", json={"projectId": project_id})
    assert started.status_code == 200
    assert started.json()["entry"]["status"] == "running"

    stopped = client.post("/api/extension/stop-timer", json={})
    assert stopped.status_code == 200
    entry = stopped.json()["entry"]
    assert entry["status"] == "completed"
    assert entry["duration"] == span_ms(
        parse_timestamp(entry["startTime"]), parse_timestamp(entry["endTime"])
    )

    stats = client.get("/api/stats").json()
    assert stats["todayTotal"] == entry["duration"]
    assert stats["todayEntries"] == 1
    assert stats["projectBreakdown"][0]["projectName"] == "Research"


def test_today_total_excludes_yesterday(client: TestClient) -> None:
    """Test that only entries started today count toward todayTotal."""
    project_id = client.get("/api/projects").json()[0]["id"]
    today_nine = datetime.combine(date.today(), time(9, 0)).astimezone()
    yesterday = today_nine - timedelta(days=1)

    for start, duration in ((today_nine, 1_500_000), (yesterday, 999_999)):
        response = client.post(
            "/api/time-entries",
            json={"projectId": project_id, "startTime": start.isoformat(), "duration": duration},
        )
        assert response.status_code == 201

    stats = client.get("/api/stats").json()

    assert stats["todayTotal"] == 1_500_000
    assert stats["todayEntries"] == 1
    assert stats["totalEntries"] == 2
