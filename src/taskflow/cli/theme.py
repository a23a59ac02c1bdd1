# src/taskflow/cli/theme.py

"""Color helpers for the console dashboard.

- Disabled when stdout is not a TTY unless FORCE_COLOR=1.
- NO_COLOR disables colors completely.
- Two palettes: light (default terminal colors) and dark (brighter tones).
"""

from __future__ import annotations

import os
import sys

RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"

_PALETTES: dict[str, dict[str, str]] = {
    "light": {
        "header": "\033[34m",
        "done": "\033[32m",
        "overdue": "\033[31m",
        "pending": "\033[33m",
        "accent": "\033[35m",
        "muted": DIM,
    },
    "dark": {
        "header": "\033[94m",
        "done": "\033[92m",
        "overdue": "\033[91m",
        "pending": "\033[93m",
        "accent": "\033[95m",
        "muted": "\033[90m",
    },
}


def colors_enabled() -> bool:
    if os.environ.get("NO_COLOR") is not None:
        return False
    if os.environ.get("FORCE_COLOR", "").lower() in {"1", "true", "yes", "on"}:
        return True
    try:
        return sys.stdout.isatty()
    except Exception:
        return False


class Theme:
    def __init__(self, dark_mode: bool = False, enabled: bool | None = None) -> None:
        self.dark_mode = dark_mode
        self.enabled = colors_enabled() if enabled is None else enabled
        self._palette = _PALETTES["dark" if dark_mode else "light"]

    def color(self, text: str, role: str, *, bold: bool = False) -> str:
        if not self.enabled:
            return text
        style = self._palette.get(role, "")
        if bold:
            style = BOLD + style
        return f"{style}{text}{RESET}"
