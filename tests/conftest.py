# tests/conftest.py

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskflow.core.session import SessionStore
from taskflow.core.state import AppState
from taskflow.tasks.task_models import Task

from .fakes import FakeLLMClient, FakeTaskSource

NOW = datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def now() -> datetime:
    """Fixed 'current time' (Monday 2024-06-10 12:00 UTC) injected into the pipeline."""
    return NOW


@pytest.fixture()
def make_task():
    counter = {"n": 0}

    def _make(
        *,
        id: str | None = None,
        title: str | None = None,
        deadline: datetime | None = None,
        completed: bool = False,
        created_at: datetime | None = NOW,
        description: str | None = None,
        extra: dict | None = None,
    ) -> Task:
        counter["n"] += 1
        tid = id or str(counter["n"])
        return Task(
            id=tid,
            title=title or f"Task {tid}",
            description=description,
            deadline=deadline,
            completed=completed,
            created_at=created_at,
            extra=extra or {},
        )

    return _make


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and core modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="TaskFlow",
        api_base_url="https://tasks.example.test",
        llm_models=["fake-model"],
        data_dir=tmp_path,
        session_path=tmp_path / "session.json",
        page_size=10,
    )


@pytest.fixture()
def session(settings: SimpleNamespace) -> SessionStore:
    return SessionStore(settings.session_path)


@pytest.fixture()
def api(session: SessionStore) -> FakeTaskSource:
    return FakeTaskSource(session=session)


@pytest.fixture()
def state(settings: SimpleNamespace, api: FakeTaskSource, session: SessionStore) -> AppState:
    """AppState wired with deterministic fakes and a real SessionStore on tmp_path."""
    return AppState(
        settings=settings,
        api=api,
        llm=FakeLLMClient(),
        session=session,
    )


@pytest.fixture()
def signed_in_state(state: AppState, api: FakeTaskSource) -> AppState:
    api.users["ada@example.com"] = {"name": "Ada", "email": "ada@example.com", "password": "secret1"}
    state.session.set_auth("token-ada@example.com", {"name": "Ada", "email": "ada@example.com"})
    return state
