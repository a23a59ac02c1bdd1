# src/taskflow/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, restores a saved session (reloading
tasks when a token is present) and runs the console dashboard.
"""

from __future__ import annotations

import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.dashboard import load_tasks
from ..core.state import AppState
from ..logging_setup import setup_logging
from ..tasks.task_api import AuthExpiredError

logger = logging.getLogger(__name__)


def _restore_session(state: AppState) -> None:
    if not state.is_authenticated:
        return
    try:
        load_tasks(state)
        logger.info("Session restored, %d tasks loaded.", len(state.tasks))
    except AuthExpiredError:
        logger.info("Saved session expired; please log in again.")


def _shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    close = getattr(state.api, "close", None)
    if callable(close):
        try:
            close()
        except Exception:
            logger.debug("API client close failed.", exc_info=True)


def main() -> None:
    settings = get_settings()

    log_file = setup_logging(log_dir=settings.data_dir, console_level=settings.log_level)

    logger.info("Starting %s (log file: %s)...", settings.app_name, log_file)

    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings)
    _restore_session(state)

    try:
        if settings.console_enabled:
            run_console_loop(state)
        else:
            logger.info("Console disabled (TASKFLOW_CONSOLE_ENABLED=false); nothing to run.")
    finally:
        _shutdown(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
