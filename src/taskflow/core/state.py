# src/taskflow/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..tasks.task_models import Task, ViewConfig
from .ports import LLMClient, TaskSource
from .session import SessionStore


@dataclass
class AppState:
    """
    Explicit application state, created once in bootstrap and passed around.

    Holds the wiring (settings, API client, LLM client, session) plus the
    dashboard data: the task list as last fetched, the current view config
    and the last error shown to the user.
    """

    settings: Any
    api: TaskSource
    llm: LLMClient
    session: SessionStore

    tasks: list[Task] = field(default_factory=list)
    view: ViewConfig = field(default_factory=ViewConfig)
    loading: bool = False
    error: str | None = None

    @property
    def user(self) -> dict[str, Any] | None:
        return self.session.user

    @property
    def is_authenticated(self) -> bool:
        return self.session.is_authenticated

    @property
    def dark_mode(self) -> bool:
        return self.session.dark_mode
