"""HTTP client for the Time Tracker API."""

import logging
from datetime import datetime
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A request failed, either with an error status or in transport.

    Attributes:
        status_code: HTTP status, or None when the server was unreachable
        message: Error message from the ``error`` field of the body
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"HTTP {self.status_code}: {self.message}"


class TrackerClient:
    """Synchronous client for the endpoint table under ``/api``.

    Args:
        base_url: Server root, e.g. ``http://localhost:3000``
        timeout: Request timeout in seconds
        http: Existing httpx client to use instead of creating one
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        timeout: float = 10.0,
        http: Optional[httpx.Client] = None,
    ):
        self._owns_http = http is None
        self._http = http or httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout)

    def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "TrackerClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            ApiError: On transport failure or a non-2xx response
        """
        try:
            response = self._http.request(method, path, json=json, params=params)
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise ApiError(f"Cannot reach server: {e}") from e

        if response.is_error:
            try:
                message = response.json().get("error", response.reason_phrase)
            except ValueError:
                message = response.text or response.reason_phrase
            raise ApiError(message, status_code=response.status_code)

        return response.json()

    # Projects

    def list_projects(self) -> list[dict[str, Any]]:
        return self.request("GET", "/api/projects")

    def create_project(self, name: str, color: Optional[str] = None) -> dict[str, Any]:
        body: dict[str, Any] = {"name": name}
        if color:
            body["color"] = color
        return self.request("POST", "/api/projects", json=body)

    # Entries

    def list_entries(self, limit: Optional[int] = None) -> list[dict[str, Any]]:
        params = {"limit": limit} if limit else None
        return self.request("GET", "/api/time-entries", params=params)

    def create_entry(
        self,
        project_id: str,
        start_time: datetime,
        end_time: Optional[datetime] = None,
        duration_ms: Optional[int] = None,
        description: Optional[str] = None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {"projectId": project_id, "startTime": start_time.isoformat()}
        if end_time is not None:
            body["endTime"] = end_time.isoformat()
        if duration_ms is not None:
            body["duration"] = duration_ms
        if description:
            body["description"] = description
        return self.request("POST", "/api/time-entries", json=body)

    def update_entry(self, entry_id: str, **fields: Any) -> dict[str, Any]:
        return self.request("PUT", f"/api/time-entries/{entry_id}", json=fields)

    def delete_entry(self, entry_id: str) -> dict[str, Any]:
        return self.request("DELETE", f"/api/time-entries/{entry_id}")

    # Aggregates

    def stats(self) -> dict[str, Any]:
        return self.request("GET", "/api/stats")

    def snapshot(self) -> dict[str, Any]:
        return self.request("GET", "/api/snapshot")

    def export(self) -> dict[str, Any]:
        return self.request("GET", "/api/export")

    def reset(self) -> dict[str, Any]:
        return self.request("DELETE", "/api/reset")

    # Extension

    def ping(self) -> dict[str, Any]:
        return self.request("GET", "/api/extension/ping")

    def status(self) -> dict[str, Any]:
        return self.request("GET", "/api/extension/status")

    def start_timer(self, project_id: str, description: Optional[str] = None) -> dict[str, Any]:
        body: dict[str, Any] = {"projectId": project_id}
        if description:
            body["description"] = description
        return self.request("POST", "/api/extension/start-timer", json=body)

    def stop_timer(self, description: Optional[str] = None) -> dict[str, Any]:
        body = {"description": description} if description else {}
        return self.request("POST", "/api/extension/stop-timer", json=body)
