# src/taskflow/core/session.py

"""
Local session storage: the auth token, the current user and the theme flag.

This is the only state persisted on this machine; everything else lives in the
remote task service. The file may contain a bearer token, so it is written
atomically and kept private (0600) where the platform allows it.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class SessionStore:
    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self.token: str | None = None
        self.user: dict[str, Any] | None = None
        self.dark_mode: bool = False
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            data = json.loads(self._path.read_text("utf-8"))
        except Exception:
            logger.exception("Failed to read session file %s; starting signed out.", self._path)
            return
        if not isinstance(data, dict):
            return

        token = data.get("token")
        self.token = token if isinstance(token, str) and token else None
        user = data.get("user")
        self.user = user if isinstance(user, dict) else None
        self.dark_mode = bool(data.get("dark_mode", False))
        logger.debug("Session loaded from %s (authenticated=%s)", self._path, self.is_authenticated)

    def save(self) -> None:
        payload = {"token": self.token, "user": self.user, "dark_mode": self.dark_mode}
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), "utf-8")
        os.replace(tmp, self._path)
        with contextlib.suppress(Exception):
            os.chmod(self._path, 0o600)

    def set_auth(self, token: str, user: dict[str, Any] | None) -> None:
        self.token = token
        self.user = user
        self.save()

    def clear_auth(self) -> None:
        """Forget token and user; the theme flag survives a logout."""
        self.token = None
        self.user = None
        self.save()

    def set_dark_mode(self, enabled: bool) -> None:
        self.dark_mode = bool(enabled)
        self.save()
