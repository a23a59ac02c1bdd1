# src/taskflow/llm/offline.py

from __future__ import annotations

from collections.abc import Iterable

from ..core.ports import ChatMessage


class OfflineLLMClient:
    """
    Offline deterministic LLM client used when no API key is configured.

    Replies in the same bullet/bold-title shape a real model is asked for, so
    the insights panel stays usable in demos.
    """

    def stream_chat(self, messages: list[ChatMessage], system_prompt: str) -> Iterable[str]:
        yield "Okay, here are some insights (offline demo mode):\n"
        yield "* **Configure AI insights:** Set TASKFLOW_LLM_API_KEY to get personalised tips.\n"
        yield "* **Start with overdue tasks:** Clear anything past its deadline before taking on new work.\n"
        yield "* **Plan your week:** Review upcoming deadlines every Monday and block time for them."
