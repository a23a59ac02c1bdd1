# tests/fakes.py

from __future__ import annotations

import itertools
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from taskflow.core.ports import ChatMessage
from taskflow.tasks.task_api import ApiError, AuthExpiredError
from taskflow.tasks.task_models import Task, TaskDraft


class FakeLLMClient:
    """
    Deterministic LLM client for unit tests.

    - Captures calls for assertions
    - Yields a predefined text as a single chunk (or raises `error`)
    """

    def __init__(self, next_text: str = "ok", error: Exception | None = None) -> None:
        self.next_text = next_text
        self.error = error
        self.calls: list[tuple[list[ChatMessage], str]] = []

    def stream_chat(self, messages: list[ChatMessage], system_prompt: str) -> Iterable[str]:
        self.calls.append((messages, system_prompt))
        if self.error is not None:
            raise self.error
        yield self.next_text


class FakeTaskSource:
    """
    In-memory task service used by dashboard/auth/command tests.

    Mirrors the remote contract: tokens from login, ids assigned on create,
    401 (AuthExpiredError) when `expired` is set.
    """

    def __init__(self, tasks: list[Task] | None = None, session: Any = None) -> None:
        self.tasks: dict[str, Task] = {t.id: t for t in (tasks or [])}
        self.users: dict[str, dict[str, Any]] = {}
        self.session = session
        self.expired = False
        self.fail_with: ApiError | None = None
        self._ids = itertools.count(1)
        self.calls: list[str] = []

    def _check(self, op: str) -> None:
        self.calls.append(op)
        if self.expired:
            if self.session is not None:
                self.session.clear_auth()
            raise AuthExpiredError("Session expired. Please log in again.", status_code=401)
        if self.fail_with is not None:
            raise self.fail_with

    # ---- auth ----

    def signup(self, *, name: str, email: str, password: str) -> str | None:
        self._check("signup")
        if email in self.users:
            raise ApiError("User already exists", status_code=400)
        self.users[email] = {"name": name, "email": email, "password": password}
        return None

    def login(self, *, email: str, password: str) -> str:
        self._check("login")
        user = self.users.get(email)
        if user is None or user["password"] != password:
            raise ApiError("Invalid credentials", status_code=400)
        return f"token-{email}"

    def get_current_user(self) -> dict[str, Any]:
        self._check("me")
        token = getattr(self.session, "token", None) or ""
        email = token.removeprefix("token-")
        user = self.users.get(email, {})
        return {"name": user.get("name"), "email": user.get("email")}

    # ---- tasks ----

    def get_tasks(self) -> list[Task]:
        self._check("get_tasks")
        return list(self.tasks.values())

    def create_task(self, draft: TaskDraft) -> Task:
        self._check("create_task")
        task = Task(
            id=f"t{next(self._ids)}",
            title=draft.title,
            description=draft.description,
            deadline=draft.deadline,
            completed=draft.completed,
            created_at=datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc),
        )
        self.tasks[task.id] = task
        return task

    def update_task(self, task_id: str, draft: TaskDraft) -> Task:
        self._check("update_task")
        old = self.tasks[task_id]
        task = Task(
            id=task_id,
            title=draft.title,
            description=draft.description,
            deadline=draft.deadline,
            completed=draft.completed,
            created_at=old.created_at,
        )
        self.tasks[task_id] = task
        return task

    def delete_task(self, task_id: str) -> Any:
        self._check("delete_task")
        self.tasks.pop(task_id, None)
        return {"success": True}
