# src/taskflow/llm/client.py

"""
Streaming chat client for OpenAI-compatible endpoints.

Gemini is the default provider (its /v1beta/openai/ endpoint speaks the
OpenAI chat-completions protocol), so the official `openai` SDK is used with a
custom base URL. Models are tried in order; each failure is classified and
decides whether to move on to the next model or to give up.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from typing import Any

import httpx
import openai
from openai import OpenAI

from ..core.ports import ChatMessage

logger = logging.getLogger(__name__)

BAD_MODEL_RETRY_SECONDS = 3600.0

# failure kinds
AUTH = "auth"
NOT_FOUND = "not_found"
RATE_LIMIT = "rate_limit"
NETWORK = "network"
OTHER = "other"

_FINAL_MESSAGES = {
    RATE_LIMIT: "LLM is rate-limited. Try again later.",
    NETWORK: "LLM network/timeout error. Try again later or change models.",
}

_NOT_CONFIGURED = {
    "LLM API key is not set": ("missing API key", "TASKFLOW_LLM_API_KEY"),
    "LLM model list is empty": ("no models", "TASKFLOW_LLM_MODELS"),
    "LLM base URL is not set": ("missing base URL", "TASKFLOW_LLM_BASE_URL"),
}


class FirstTokenTimeout(TimeoutError):
    pass


def classify_failure(exc: BaseException) -> str:
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return AUTH
    if isinstance(exc, openai.NotFoundError):
        return NOT_FOUND
    if isinstance(exc, openai.RateLimitError):
        return RATE_LIMIT
    # APITimeoutError is a subclass of APIConnectionError
    if isinstance(exc, (openai.APIConnectionError, httpx.TimeoutException, TimeoutError)):
        return NETWORK
    return OTHER


def friendly_llm_error_message(err: Exception) -> str:
    msg = str(err).strip() or "LLM error."
    for marker, (what, var) in _NOT_CONFIGURED.items():
        if marker in msg:
            return f"AI insights are not configured ({what}). Set {var} in .env (see .env.example)."
    return msg


def _close_stream(stream: Any) -> None:
    close = getattr(stream, "close", None)
    if callable(close):
        try:
            close()
        except Exception:
            logger.debug("LLM: stream close failed", exc_info=True)


def _chunk_text(chunk: Any) -> str | None:
    if not getattr(chunk, "choices", None):
        return None
    delta = chunk.choices[0].delta
    return getattr(delta, "content", None) if delta is not None else None


class _ModelCooldown:
    """Models that answered 404 are skipped until their cooldown expires."""

    def __init__(self, seconds: float = BAD_MODEL_RETRY_SECONDS) -> None:
        self._seconds = seconds
        self._until: dict[str, float] = {}

    def available(self, model: str) -> bool:
        until = self._until.get(model)
        return until is None or until <= time.monotonic()

    def mark(self, model: str) -> None:
        self._until[model] = time.monotonic() + self._seconds


class OpenAICompatibleLLMClient:
    """
    - Tries models in the configured order.
    - No content within the first-token timeout -> next model.
    - 404 -> model is put on cooldown for an hour, next model.
    - Rate limit / network / other errors -> next model.
    - Authentication errors -> stop immediately.
    """

    def __init__(self, settings: Any) -> None:
        api_key = str(getattr(settings, "llm_api_key", None) or "").strip()
        base_url = str(getattr(settings, "llm_base_url", "") or "").strip()
        models = [m.strip() for m in (getattr(settings, "llm_models", None) or []) if m.strip()]

        if not api_key:
            raise RuntimeError("LLM API key is not set. Set TASKFLOW_LLM_API_KEY in your .env.")
        if not base_url:
            raise RuntimeError("LLM base URL is not set. Set TASKFLOW_LLM_BASE_URL in your .env.")
        if not models:
            raise RuntimeError("LLM model list is empty. Set TASKFLOW_LLM_MODELS in your .env.")

        self._models = models
        self._first_token_timeout = float(getattr(settings, "llm_first_token_timeout_seconds", 20.0))
        connect_s = float(getattr(settings, "llm_connect_timeout_seconds", 5.0))
        self._timeout = httpx.Timeout(
            connect=connect_s,
            read=float(getattr(settings, "llm_read_timeout_seconds", 25.0)),
            write=10.0,
            pool=connect_s,
        )
        # SDK retries off: falling back to the next model is faster.
        self._client = OpenAI(base_url=base_url, api_key=api_key, timeout=self._timeout, max_retries=0)
        self._cooldown = _ModelCooldown()

    @property
    def models(self) -> list[str]:
        return list(self._models)

    def _stream_model(self, model: str, messages: list[ChatMessage], system_prompt: str) -> Iterator[str]:
        """Yield content chunks from one model; raise FirstTokenTimeout if it stays silent."""
        started = time.monotonic()
        stream = self._client.chat.completions.create(
            model=model,
            stream=True,
            messages=[{"role": "system", "content": system_prompt}, *messages],
            timeout=self._timeout,
        )
        got_content = False
        try:
            for chunk in stream:
                if not got_content and time.monotonic() - started > self._first_token_timeout:
                    raise FirstTokenTimeout(f"First token timeout on model: {model}")
                text = _chunk_text(chunk)
                if text:
                    if not got_content:
                        logger.info("LLM: first token from model=%s (%.2fs)", model, time.monotonic() - started)
                    got_content = True
                    yield text
        finally:
            _close_stream(stream)

        if not got_content:
            raise RuntimeError(f"Model returned no content: {model}")

    def stream_chat(self, messages: list[ChatMessage], system_prompt: str) -> Iterator[str]:
        last_error: Exception | None = None

        for model in self._models:
            if not self._cooldown.available(model):
                continue

            logger.info("LLM: trying model=%s (first_token_timeout=%.1fs)", model, self._first_token_timeout)
            produced = False
            try:
                for text in self._stream_model(model, messages, system_prompt):
                    produced = True
                    yield text
                return
            except Exception as e:
                if produced:
                    # the caller already has part of the answer; do not mix models
                    raise RuntimeError(f"LLM stream from {model} was interrupted.") from e

                kind = classify_failure(e)
                last_error = e
                if kind == AUTH:
                    raise RuntimeError("LLM authentication failed. Check TASKFLOW_LLM_API_KEY.") from e
                if kind == NOT_FOUND:
                    self._cooldown.mark(model)
                logger.info("LLM: %s on model=%s (%s), trying next", kind, model, e.__class__.__name__)

        if last_error is None:
            raise RuntimeError("All LLM models failed.")
        message = _FINAL_MESSAGES.get(classify_failure(last_error), "All LLM models failed.")
        raise RuntimeError(message) from last_error
