# src/taskflow/tasks/task_api.py

"""
HTTP client for the remote task service (auth + task CRUD).

The service is an opaque collaborator:
- every request carries `Authorization: Bearer <token>` when a token is stored,
- payloads may or may not be wrapped in {"data": ...},
- tasks use `_id` and a 'Done' | 'Pending' status; normalize_task() maps them
  onto Task.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import httpx

from .task_models import Task, TaskDraft
from .task_view import parse_instant

logger = logging.getLogger(__name__)

_KNOWN_FIELDS = {"_id", "id", "title", "description", "deadline", "completed", "status", "createdAt"}


class ApiError(RuntimeError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthExpiredError(ApiError):
    """HTTP 401: the stored token is no longer valid (session already cleared)."""


def _parse_optional_instant(raw: Any) -> datetime | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, str) and len(raw.strip()) == 10:
        # plain date "YYYY-MM-DD" -> midnight local
        try:
            return datetime.fromisoformat(raw.strip()).astimezone()
        except ValueError:
            return None
    return parse_instant(raw)


def normalize_task(raw: dict[str, Any]) -> Task:
    """Map the service's task shape onto Task."""
    task_id = raw.get("_id") or raw.get("id") or ""
    completed = raw.get("status") == "Done" or bool(raw.get("completed"))
    description = raw.get("description")

    return Task(
        id=str(task_id),
        title=str(raw.get("title") or ""),
        description=str(description) if description is not None else None,
        deadline=_parse_optional_instant(raw.get("deadline")),
        completed=completed,
        created_at=_parse_optional_instant(raw.get("createdAt")),
        extra={k: v for k, v in raw.items() if k not in _KNOWN_FIELDS},
    )


def normalize_tasks(raw: Any) -> list[Task]:
    if not isinstance(raw, list):
        return []
    return [normalize_task(item) for item in raw if isinstance(item, dict)]


def _unwrap(body: Any) -> Any:
    """Handle nested ({"data": ...}) or flat responses."""
    if isinstance(body, dict) and body.get("data") is not None:
        return body["data"]
    return body


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        for key in ("error", "message"):
            msg = body.get(key)
            if isinstance(msg, str) and msg.strip():
                return msg.strip()
    return fallback


class TaskApiClient:
    """
    Thin synchronous wrapper over httpx.Client.

    `session` is anything with a `token` attribute and a `clear_auth()` method
    (normally core.session.SessionStore).
    """

    def __init__(
        self,
        base_url: str,
        session: Any,
        *,
        timeout: float = 15.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._session = session
        self._http = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    # ---- low-level ----

    def _request(self, method: str, path: str, *, json: Any = None, fallback: str) -> Any:
        headers: dict[str, str] = {}
        token = getattr(self._session, "token", None)
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = self._http.request(method, path, json=json, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e.__class__.__name__)
            raise ApiError(f"{fallback} (network error: {e.__class__.__name__})") from e

        if response.status_code == 401:
            logger.info("%s %s -> 401, clearing session", method, path)
            self._session.clear_auth()
            raise AuthExpiredError("Session expired. Please log in again.", status_code=401)

        if response.is_error:
            msg = _error_message(response, fallback)
            logger.warning("%s %s -> %s (%s)", method, path, response.status_code, msg)
            raise ApiError(msg, status_code=response.status_code)

        logger.debug("%s %s -> %s", method, path, response.status_code)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(f"{fallback} (invalid JSON response)", status_code=response.status_code) from e

    # ---- auth ----

    def signup(self, *, name: str, email: str, password: str) -> str | None:
        body = self._request(
            "POST",
            "/api/auth/signup",
            json={"name": name, "email": email, "password": password},
            fallback="Signup failed",
        )
        data = _unwrap(body)
        return data.get("token") if isinstance(data, dict) else None

    def login(self, *, email: str, password: str) -> str:
        body = self._request(
            "POST",
            "/api/auth/login",
            json={"email": email, "password": password},
            fallback="Invalid credentials",
        )
        data = _unwrap(body)
        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise ApiError("Login response did not contain a token.")
        return str(token)

    def get_current_user(self) -> dict[str, Any]:
        data = _unwrap(self._request("GET", "/api/auth/me", fallback="Failed to load profile"))
        return data if isinstance(data, dict) else {}

    # ---- tasks ----

    def get_tasks(self) -> list[Task]:
        body = self._request("GET", "/api/tasks", fallback="Failed to load tasks")
        return normalize_tasks(_unwrap(body))

    def create_task(self, draft: TaskDraft) -> Task:
        body = self._request("POST", "/api/tasks", json=draft.to_payload(), fallback="Failed to save task")
        data = _unwrap(body)
        if not isinstance(data, dict):
            raise ApiError("Failed to save task (unexpected response)")
        return normalize_task(data)

    def update_task(self, task_id: str, draft: TaskDraft) -> Task:
        body = self._request(
            "PUT", f"/api/tasks/{task_id}", json=draft.to_payload(), fallback="Failed to save task"
        )
        data = _unwrap(body)
        if not isinstance(data, dict):
            raise ApiError("Failed to save task (unexpected response)")
        return normalize_task(data)

    def delete_task(self, task_id: str) -> Any:
        return self._request("DELETE", f"/api/tasks/{task_id}", fallback="Failed to delete task")
