# src/taskflow/connectors/console_connector.py

"""
Interactive console for the dashboard.

Every line starting with '/' goes through the command registry; anything else
gets a hint. Input and output are injectable so the loop can be driven from
tests without a terminal.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..cli.commands import CommandRegistry
from ..cli.commands import registry as default_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)

EXIT_COMMANDS = frozenset({"/exit", "/quit", "/q"})

ReadLine = Callable[[str], str]
Write = Callable[[str], None]


def _stamp(text: str) -> str:
    return f"[{datetime.now().astimezone():%H:%M:%S}] {text}"


def _print(text: str) -> None:
    print(text, flush=True)


def build_prompt(state: AppState) -> str:
    """'TaskFlow> ' when signed out, 'TaskFlow (Ada) p2> ' when signed in."""
    app_name = str(getattr(state.settings, "app_name", "TaskFlow"))
    if not state.is_authenticated:
        return f"{app_name}> "
    name = (state.user or {}).get("name") or "me"
    return f"{app_name} ({name}) p{state.view.page}> "


def _greeting(state: AppState) -> str:
    if state.is_authenticated:
        return (
            f"Signed in, {len(state.tasks)} task(s) loaded. "
            "/tasks shows the list, /help lists commands, /exit quits."
        )
    return "Not signed in. Use /login or /signup, /help lists commands, /exit quits."


def run_console_loop(
    state: AppState,
    *,
    read_line: ReadLine = input,
    write: Write = _print,
    commands: CommandRegistry | None = None,
) -> int:
    """Run until /exit, EOF or Ctrl-C. Returns the number of commands handled."""
    commands = commands or default_registry
    handled = 0

    logger.info("Console started (authenticated=%s).", state.is_authenticated)
    write(_stamp(_greeting(state)))

    def emit(text: str) -> None:
        # progress notes for slow calls (network, AI)
        write(_stamp(text))

    while True:
        try:
            line = read_line(build_prompt(state)).strip()
        except (EOFError, KeyboardInterrupt):
            logger.info("Console input closed.")
            write("")
            break

        if not line:
            continue
        if line.lower() in EXIT_COMMANDS:
            break
        if not line.startswith("/"):
            write("Commands start with '/'. Try /help.")
            continue

        try:
            reply = commands.handle(state, line, emit=emit)
        except KeyboardInterrupt:
            logger.info("Command interrupted: %s", line.split()[0])
            reply = "Interrupted."
        except Exception:
            logger.exception("Command handler crashed: %s", line.split()[0])
            reply = "Internal error while handling a command (see the log file)."

        handled += 1
        if reply is not None:
            write(reply + "\n")

    logger.info("Console finished after %d command(s).", handled)
    return handled
