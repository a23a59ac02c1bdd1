# src/taskflow/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

- One frozen Settings object for the whole app, built once at import.
- No secrets required at import time; AI insights fall back to offline mode.
- Every key is a TASKFLOW_* variable; see .env.example for the full list.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKFLOW"

DEFAULT_API_BASE_URL = "https://zylentrix-backend.onrender.com"
DEFAULT_LLM_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_LLM_MODELS = ["gemini-2.0-flash", "gemini-2.0-flash-lite"]

_TRUE = {"1", "true", "yes", "y", "on"}

# A local .env never overrides variables already set in the environment.
load_dotenv(override=False)


class EnvReader:
    """
    Typed access to prefixed environment variables.

    Blank values count as unset. Values that do not parse fall back to the
    default instead of failing at import.
    """

    def __init__(self, prefix: str = ENV_PREFIX, environ: Mapping[str, str] | None = None) -> None:
        self.prefix = prefix
        self._environ = os.environ if environ is None else environ

    def name(self, key: str) -> str:
        return f"{self.prefix}_{key}"

    def raw(self, key: str, *fallback_names: str) -> str | None:
        for name in (self.name(key), *fallback_names):
            value = self._environ.get(name)
            if value is not None and value.strip():
                return value
        return None

    def text(self, key: str, default: str) -> str:
        value = self.raw(key)
        return default if value is None else value.strip()

    def flag(self, key: str, default: bool) -> bool:
        value = self.raw(key)
        return default if value is None else value.strip().lower() in _TRUE

    def integer(self, key: str, default: int, *, minimum: int | None = None) -> int:
        value = self.raw(key)
        try:
            parsed = default if value is None else int(value)
        except ValueError:
            return default
        if minimum is not None and parsed < minimum:
            return default
        return parsed

    def number(self, key: str, default: float) -> float:
        value = self.raw(key)
        try:
            return default if value is None else float(value)
        except ValueError:
            return default

    def items(self, key: str, default: list[str]) -> list[str]:
        """Comma and/or whitespace separated."""
        value = self.raw(key)
        if value is None:
            return list(default)
        return [part for part in value.replace(",", " ").split() if part]

    def path(self, key: str, default: Path) -> Path:
        value = self.raw(key)
        return default if value is None else Path(value.strip()).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    console_enabled: bool

    # ---- Task service ----
    api_base_url: str
    api_timeout_seconds: float

    # ---- LLM (OpenAI-compatible endpoint, Gemini by default) ----
    llm_api_key: str | None
    llm_base_url: str
    llm_models: list[str]
    llm_first_token_timeout_seconds: float
    llm_read_timeout_seconds: float
    llm_connect_timeout_seconds: float

    # ---- Local data (ignored by git) ----
    data_dir: Path
    session_path: Path

    # ---- Dashboard defaults ----
    page_size: int

    @staticmethod
    def from_env(env: EnvReader | None = None) -> "Settings":
        env = env or EnvReader()

        first_token = env.number("LLM_FIRST_TOKEN_TIMEOUT_SECONDS", 20.0)
        data_dir = env.path("DATA_DIR", Path(".local/taskflow"))

        return Settings(
            app_name=env.text("APP_NAME", "TaskFlow"),
            log_level=env.text("LOG_LEVEL", "INFO").upper(),
            console_enabled=env.flag("CONSOLE_ENABLED", True),
            api_base_url=env.text("API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/"),
            api_timeout_seconds=env.number("API_TIMEOUT_SECONDS", 15.0),
            # the web build read a plain Gemini key; accept that name as well
            llm_api_key=env.raw("LLM_API_KEY", "GEMINI_API_KEY"),
            llm_base_url=env.text("LLM_BASE_URL", DEFAULT_LLM_BASE_URL),
            llm_models=env.items("LLM_MODELS", DEFAULT_LLM_MODELS),
            llm_first_token_timeout_seconds=first_token,
            # reading must outlast the first-token wait
            llm_read_timeout_seconds=max(env.number("LLM_READ_TIMEOUT_SECONDS", 25.0), first_token),
            llm_connect_timeout_seconds=env.number("LLM_CONNECT_TIMEOUT_SECONDS", 5.0),
            data_dir=data_dir,
            session_path=env.path("SESSION_PATH", data_dir / "session.json"),
            page_size=env.integer("PAGE_SIZE", 10, minimum=1),
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
