# tests/test_task_api.py

from __future__ import annotations

import json
from datetime import datetime, timezone

import httpx
import pytest

from taskflow.tasks.task_api import (
    ApiError,
    AuthExpiredError,
    TaskApiClient,
    normalize_task,
    normalize_tasks,
)
from taskflow.tasks.task_models import TaskDraft


class Recorder:
    """Collects requests and answers them from a route table."""

    def __init__(self, routes: dict[tuple[str, str], httpx.Response]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key not in self.routes:
            return httpx.Response(404, json={"message": "Not found"})
        return self.routes[key]


def _client(session, routes) -> tuple[TaskApiClient, Recorder]:
    recorder = Recorder(routes)
    client = TaskApiClient(
        "https://tasks.example.test",
        session,
        transport=httpx.MockTransport(recorder),
    )
    return client, recorder


def test_normalize_task_maps_service_shape() -> None:
    task = normalize_task(
        {
            "_id": "abc",
            "title": "Pay rent",
            "description": "monthly",
            "deadline": "2024-06-12T18:00:00.000Z",
            "status": "Done",
            "createdAt": "2024-06-01T09:30:00Z",
            "priority": 2,
        }
    )

    assert task.id == "abc"
    assert task.completed is True
    assert task.deadline == datetime(2024, 6, 12, 18, 0, tzinfo=timezone.utc)
    assert task.created_at == datetime(2024, 6, 1, 9, 30, tzinfo=timezone.utc)
    assert task.extra == {"priority": 2}


def test_normalize_task_defaults() -> None:
    task = normalize_task({"id": 7, "title": "x", "status": "Pending", "deadline": None})

    assert task.id == "7"
    assert task.completed is False
    assert task.deadline is None
    assert task.created_at is None


def test_plain_date_deadline_becomes_local_midnight() -> None:
    task = normalize_task({"_id": "1", "title": "x", "deadline": "2024-06-12"})

    assert task.deadline is not None
    assert task.deadline.tzinfo is not None
    local = task.deadline.astimezone()
    assert (local.year, local.month, local.day, local.hour) == (2024, 6, 12, 0)


def test_normalize_tasks_ignores_non_lists() -> None:
    assert normalize_tasks({"tasks": []}) == []
    assert normalize_tasks(None) == []
    assert len(normalize_tasks([{"_id": "1", "title": "a"}, "junk"])) == 1


def test_get_tasks_sends_bearer_and_unwraps_data(session) -> None:
    session.set_auth("tok-1", {"name": "Ada"})
    client, recorder = _client(
        session,
        {("GET", "/api/tasks"): httpx.Response(200, json={"data": [{"_id": "1", "title": "a"}]})},
    )

    tasks = client.get_tasks()

    assert [t.id for t in tasks] == ["1"]
    assert recorder.requests[0].headers["Authorization"] == "Bearer tok-1"


def test_flat_response_is_accepted(session) -> None:
    client, _ = _client(
        session,
        {("GET", "/api/tasks"): httpx.Response(200, json=[{"_id": "1", "title": "a"}, {"_id": "2", "title": "b"}])},
    )

    assert [t.title for t in client.get_tasks()] == ["a", "b"]


def test_no_token_no_authorization_header(session) -> None:
    client, recorder = _client(
        session,
        {("POST", "/api/auth/login"): httpx.Response(200, json={"token": "fresh"})},
    )

    assert client.login(email="ada@example.com", password="secret1") == "fresh"
    assert "Authorization" not in recorder.requests[0].headers
    assert json.loads(recorder.requests[0].content) == {"email": "ada@example.com", "password": "secret1"}


def test_login_without_token_is_an_error(session) -> None:
    client, _ = _client(session, {("POST", "/api/auth/login"): httpx.Response(200, json={"data": {}})})

    with pytest.raises(ApiError):
        client.login(email="ada@example.com", password="secret1")


def test_create_task_sends_status_payload(session) -> None:
    session.set_auth("tok", None)
    client, recorder = _client(
        session,
        {
            ("POST", "/api/tasks"): httpx.Response(
                201, json={"data": {"_id": "n1", "title": "New", "status": "Pending"}}
            )
        },
    )
    deadline = datetime(2024, 6, 12, 23, 59, tzinfo=timezone.utc)

    task = client.create_task(TaskDraft(title="New", description="d", deadline=deadline))

    assert task.id == "n1"
    assert json.loads(recorder.requests[0].content) == {
        "title": "New",
        "description": "d",
        "deadline": "2024-06-12T23:59:00+00:00",
        "status": "Pending",
    }


def test_update_and_delete_use_task_path(session) -> None:
    session.set_auth("tok", None)
    client, recorder = _client(
        session,
        {
            ("PUT", "/api/tasks/abc"): httpx.Response(200, json={"_id": "abc", "title": "t", "status": "Done"}),
            ("DELETE", "/api/tasks/abc"): httpx.Response(204),
        },
    )

    assert client.update_task("abc", TaskDraft(title="t", completed=True)).completed is True
    assert client.delete_task("abc") is None
    assert [r.method for r in recorder.requests] == ["PUT", "DELETE"]


def test_401_clears_session_and_raises(session) -> None:
    session.set_auth("stale", {"name": "Ada"})
    session.set_dark_mode(True)
    client, _ = _client(session, {("GET", "/api/tasks"): httpx.Response(401, json={"message": "jwt expired"})})

    with pytest.raises(AuthExpiredError) as exc:
        client.get_tasks()

    assert exc.value.status_code == 401
    assert session.token is None
    assert session.user is None
    assert session.dark_mode is True


def test_error_body_message_is_surfaced(session) -> None:
    client, _ = _client(
        session,
        {("POST", "/api/auth/signup"): httpx.Response(400, json={"error": "User already exists"})},
    )

    with pytest.raises(ApiError) as exc:
        client.signup(name="Ada", email="ada@example.com", password="secret1")

    assert str(exc.value) == "User already exists"
    assert exc.value.status_code == 400


def test_error_without_json_uses_fallback(session) -> None:
    client, _ = _client(session, {("GET", "/api/tasks"): httpx.Response(500, text="<html>oops</html>")})

    with pytest.raises(ApiError, match="Failed to load tasks"):
        client.get_tasks()


def test_network_error_becomes_api_error(session) -> None:
    def boom(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = TaskApiClient("https://tasks.example.test", session, transport=httpx.MockTransport(boom))

    with pytest.raises(ApiError, match="network error"):
        client.get_tasks()
