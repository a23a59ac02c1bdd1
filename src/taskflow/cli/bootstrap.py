# src/taskflow/cli/bootstrap.py

"""
Composition root for the console app.

Creates the local data directory, then wires the HTTP task client, the LLM
client (offline fallback without a key) and the session file into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import LLMClient
from ..core.session import SessionStore
from ..core.state import AppState
from ..llm.client import OpenAICompatibleLLMClient, friendly_llm_error_message
from ..llm.offline import OfflineLLMClient
from ..tasks.task_api import TaskApiClient
from ..tasks.task_models import ViewConfig

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.session_path.parent.mkdir(parents=True, exist_ok=True)


def create_llm_client(settings) -> LLMClient:
    try:
        return OpenAICompatibleLLMClient(settings)
    except RuntimeError as e:
        # Fallback for demos / local runs without an API key.
        logger.info("AI insights offline: %s", friendly_llm_error_message(e))
        return OfflineLLMClient()


def create_initial_state(*, settings=None) -> AppState:
    """Build AppState; `settings` defaults to the process-wide get_settings()."""
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    session = SessionStore(settings.session_path)
    api = TaskApiClient(settings.api_base_url, session, timeout=settings.api_timeout_seconds)

    return AppState(
        settings=settings,
        api=api,
        llm=create_llm_client(settings),
        session=session,
        view=ViewConfig(page_size=settings.page_size),
    )
