# src/taskflow/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The dashboard and the insights service depend on Protocols instead of
concrete implementations, so the HTTP client and the LLM provider can be
swapped for fakes in tests.
"""

from typing import Any, Iterable, Protocol

from ..tasks.task_models import Task, TaskDraft

ChatMessage = dict[str, str]
# OpenAI-style chat messages: {"role": "...", "content": "..."}.


class LLMClient(Protocol):
    """Streaming chat completion client (OpenAI-compatible)."""
    def stream_chat(self, messages: list[ChatMessage], system_prompt: str) -> Iterable[str]: ...


class TaskSource(Protocol):
    """Remote task service: auth + task CRUD."""

    def signup(self, *, name: str, email: str, password: str) -> str | None: ...
    def login(self, *, email: str, password: str) -> str: ...
    def get_current_user(self) -> dict[str, Any]: ...

    def get_tasks(self) -> list[Task]: ...
    def create_task(self, draft: TaskDraft) -> Task: ...
    def update_task(self, task_id: str, draft: TaskDraft) -> Task: ...
    def delete_task(self, task_id: str) -> Any: ...
