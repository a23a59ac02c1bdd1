# src/taskflow/insights/prompt.py

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Final

from ..tasks.task_models import Task
from ..tasks.task_stats import TaskStats, UpcomingDeadline

COACH_SYSTEM_PROMPT: Final[str] = (
    "You are a productivity coach providing task management insights. "
    "Answer with a short bullet list. Start every bullet with '* ' followed by a "
    "bold title such as '**Plan your week:**' and one or two sentences of advice."
)

_REQUEST: Final[str] = """
Please provide:
1. Specific productivity suggestions based on their current task load
2. Tips to handle overdue tasks if any
3. Deadlines management recommendations
4. General task organization advice

Keep the response concise, friendly, and actionable. Format each insight as a bullet point.
""".strip()


def _local_date(value: datetime) -> str:
    return value.astimezone().strftime("%Y-%m-%d")


def _task_line(index: int, task: Task) -> str:
    status = "Completed" if task.completed else "Pending"
    due = f" (Due: {_local_date(task.deadline)})" if task.deadline is not None else ""
    return f"{index}. {task.title} - {status}{due}"


def build_insights_prompt(
    tasks: Sequence[Task],
    stats: TaskStats,
    upcoming: Sequence[UpcomingDeadline],
) -> str:
    """User message asking for 3-4 actionable insights about the given task list."""
    if upcoming:
        deadlines = "Upcoming Deadlines:\n" + "\n".join(
            f'- "{u.title}" in {u.days_left} day(s)' for u in upcoming
        )
    else:
        deadlines = "No upcoming deadlines"

    task_lines = "\n".join(_task_line(i, t) for i, t in enumerate(tasks, start=1))

    return (
        "Based on the following user's task data, provide 3-4 specific, actionable "
        "insights to help them improve productivity:\n\n"
        "Task Statistics:\n"
        f"- Total Tasks: {stats.total}\n"
        f"- Completed: {stats.completed}\n"
        f"- Pending: {stats.pending}\n"
        f"- Overdue: {stats.overdue}\n\n"
        f"{deadlines}\n\n"
        "Tasks List:\n"
        f"{task_lines}\n\n"
        f"{_REQUEST}"
    )
