# src/taskflow/cli/render.py

from __future__ import annotations

from datetime import datetime

from ..insights.service import InsightsResult
from ..tasks.task_models import Task, TaskView, ViewConfig
from ..tasks.task_stats import TaskStats, is_overdue
from ..tasks.task_view import build_page_indicator
from .theme import Theme


def format_date(value: datetime | None) -> str:
    if value is None:
        return "No deadline"
    return value.astimezone().strftime("%b %d, %Y, %I:%M %p")


def status_badge(task: Task, now: datetime, theme: Theme) -> str:
    if task.completed:
        return theme.color("[Done]", "done")
    if is_overdue(task, now):
        return theme.color("[Overdue]", "overdue")
    return theme.color("[Pending]", "pending")


def render_counts(stats: TaskStats, theme: Theme) -> str:
    return (
        f"{theme.color('Total', 'header', bold=True)}: {stats.total}   "
        f"{theme.color('Completed', 'done', bold=True)}: {stats.completed}   "
        f"{theme.color('Pending', 'pending', bold=True)}: {stats.pending}"
    )


def render_view_config(config: ViewConfig) -> str:
    return (
        f"status={config.status_filter.value} deadline={config.deadline_filter.value} "
        f"sort={config.sort_key} {config.sort_order.value} page_size={config.page_size}"
    )


def render_pager(view: TaskView, theme: Theme) -> str:
    pages = view.total_pages
    if pages <= 1:
        return ""
    tokens = []
    for token in build_page_indicator(view.page_number, pages):
        if token == view.page_number:
            tokens.append(theme.color(f"[{token}]", "accent", bold=True))
        else:
            tokens.append(str(token))
    return f"Page {view.page_number} of {pages}:  " + " ".join(tokens)


def render_task(task: Task, now: datetime, theme: Theme) -> list[str]:
    lines = [f"{theme.color(task.id, 'muted')}  {theme.color(task.title, 'header', bold=True)}  {status_badge(task, now, theme)}"]
    if task.description:
        lines.append(f"    {task.description}")
    lines.append(f"    Due: {format_date(task.deadline)}")
    return lines


def render_task_list(view: TaskView, config: ViewConfig, now: datetime, theme: Theme) -> str:
    if not view.page:
        return "No tasks found. Create your first task with /add to get started!"

    out = [theme.color(render_view_config(config), "muted"), ""]
    for task in view.page:
        out.extend(render_task(task, now, theme))
    pager = render_pager(view, theme)
    if pager:
        out.extend(["", pager])
    return "\n".join(out)


def render_insights(result: InsightsResult, theme: Theme) -> str:
    if not result.success:
        return f"[AI] {result.error or 'Failed to generate insights'}"

    out: list[str] = []
    stats = result.stats
    if stats is not None:
        out.append(
            f"Total: {stats.total}  Completed: {stats.completed}  Pending: {stats.pending}  "
            f"Overdue: {stats.overdue}  Completion: {stats.completion_rate}%"
        )
        out.append("")

    if not result.entries:
        # Model ignored the bullet format: show the raw reply instead of nothing.
        out.append(result.insights.strip())
        return "\n".join(out)

    for i, entry in enumerate(result.entries, start=1):
        out.append(theme.color(f"{i}. {entry.title}", "accent", bold=True))
        out.extend(f"   {line}" for line in entry.body)
    return "\n".join(out)


def render_user(user: dict | None) -> str:
    if not user:
        return "Not signed in."
    name = user.get("name") or "User"
    email = user.get("email") or ""
    return f"{name} <{email}>" if email else str(name)

