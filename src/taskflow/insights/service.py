# src/taskflow/insights/service.py

"""
AI insights: task statistics -> coach prompt -> model reply -> insight cards.

generate_task_insights() never raises; failures come back as
InsightsResult(success=False, error=...), which is what the dashboard shows.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

from ..core.ports import LLMClient
from ..llm.client import friendly_llm_error_message
from ..tasks.task_models import Task
from ..tasks.task_stats import TaskStats, compute_task_stats, upcoming_deadlines
from .parser import InsightEntry, parse_insights
from .prompt import COACH_SYSTEM_PROMPT, build_insights_prompt

logger = logging.getLogger(__name__)

NO_TASKS_MESSAGE = "Please add some tasks first to get AI insights."


@dataclass(slots=True)
class InsightsResult:
    success: bool
    insights: str = ""
    stats: TaskStats | None = None
    entries: list[InsightEntry] = field(default_factory=list)
    error: str | None = None


def generate_task_insights(
    tasks: Sequence[Task],
    llm: LLMClient,
    *,
    now: datetime | None = None,
) -> InsightsResult:
    if not tasks:
        return InsightsResult(success=False, error=NO_TASKS_MESSAGE)

    now = now if now is not None else datetime.now().astimezone()
    stats = compute_task_stats(tasks, now)
    upcoming = upcoming_deadlines(tasks, now, limit=3)
    prompt = build_insights_prompt(tasks, stats, upcoming)

    try:
        text = "".join(llm.stream_chat([{"role": "user", "content": prompt}], COACH_SYSTEM_PROMPT))
    except RuntimeError as e:
        msg = friendly_llm_error_message(e)
        logger.info("Insights: LLM error: %s", msg)
        return InsightsResult(success=False, stats=stats, error=msg)
    except Exception:
        logger.exception("Insights: unexpected LLM failure.")
        return InsightsResult(success=False, stats=stats, error="Failed to generate insights")

    if not text.strip():
        return InsightsResult(success=False, stats=stats, error="The model returned an empty reply.")

    entries = parse_insights(text)
    logger.info("Insights: %d entries from %d chars (tasks=%d)", len(entries), len(text), stats.total)
    return InsightsResult(success=True, insights=text, stats=stats, entries=entries)
