# src/taskflow/logging_setup.py

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FILE_NAME = "taskflow.log"

# Console thresholds for our own loggers that would otherwise interleave with
# the dashboard output (longest prefix wins).
_CONSOLE_THRESHOLDS: dict[str, int] = {
    "taskflow.tasks.task_api": logging.WARNING,
    "taskflow.tasks.task_view": logging.WARNING,
    "taskflow.insights.parser": logging.WARNING,
}


def _level(value: int | str, default: int = logging.INFO) -> int:
    """Accept logging constants or names like 'debug' / 'WARNING'."""
    if isinstance(value, int):
        return value
    resolved = logging.getLevelName(str(value).strip().upper())
    return resolved if isinstance(resolved, int) else default


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the console readable while the REPL is running:
    - taskflow logs pass, except the chatty modules listed above
    - captured Python warnings and third-party libraries only at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name == "taskflow" or name.startswith("taskflow."):
            threshold = logging.NOTSET
            best = ""
            for prefix, level in _CONSOLE_THRESHOLDS.items():
                if name.startswith(prefix) and len(prefix) > len(best):
                    best, threshold = prefix, level
            return record.levelno >= threshold

        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskflow",
    console_level: int | str = logging.INFO,
    file_level: int | str = logging.DEBUG,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
) -> Path:
    """
    Console handler (filtered, stderr) + rotating file handler with everything.
    Call once, before the first log record. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(_level(console_level))
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    fh = RotatingFileHandler(str(log_file), maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
    fh.setLevel(_level(file_level, logging.DEBUG))
    fh.setFormatter(fmt)
    root.addHandler(fh)

    logging.captureWarnings(True)

    # Request/response lines from the HTTP stack are not useful even in the file.
    for noisy in ("httpx", "httpcore", "openai"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return log_file
