# src/taskflow/tasks/task_stats.py

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta

from .task_models import Task
from .task_view import parse_instant

_DAY = timedelta(days=1)


@dataclass(frozen=True, slots=True)
class TaskStats:
    total: int
    completed: int
    pending: int
    overdue: int
    completion_rate: int  # percent, rounded


@dataclass(frozen=True, slots=True)
class UpcomingDeadline:
    title: str
    deadline: datetime
    days_left: int


def is_overdue(task: Task, now: datetime) -> bool:
    """Has a deadline in the past and is not completed."""
    if task.completed or task.deadline is None:
        return False
    deadline = parse_instant(task.deadline)
    return deadline is not None and deadline < now


def compute_task_stats(tasks: Sequence[Task], now: datetime) -> TaskStats:
    now = parse_instant(now) or now
    total = len(tasks)
    completed = sum(1 for t in tasks if t.completed)
    overdue = sum(1 for t in tasks if is_overdue(t, now))
    rate = round(completed / total * 100) if total > 0 else 0
    return TaskStats(
        total=total,
        completed=completed,
        pending=total - completed,
        overdue=overdue,
        completion_rate=rate,
    )


def upcoming_deadlines(tasks: Sequence[Task], now: datetime, limit: int = 3) -> list[UpcomingDeadline]:
    """
    Incomplete tasks with a deadline, nearest first.

    Deadlines already in the past are kept (negative days_left) so the coach
    prompt still sees them.
    """
    now = parse_instant(now) or now
    dated: list[tuple[datetime, Task]] = []
    for t in tasks:
        if t.completed or t.deadline is None:
            continue
        deadline = parse_instant(t.deadline)
        if deadline is not None:
            dated.append((deadline, t))

    dated.sort(key=lambda pair: pair[0])
    return [
        UpcomingDeadline(
            title=t.title,
            deadline=deadline,
            days_left=math.ceil((deadline - now) / _DAY),
        )
        for deadline, t in dated[: max(0, limit)]
    ]
