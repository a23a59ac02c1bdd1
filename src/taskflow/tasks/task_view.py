# src/taskflow/tasks/task_view.py

"""
Task list pipeline: filter -> sort -> paginate.

Everything here is pure:
- the input sequence is never mutated, every stage returns a new list,
- "now" is read at most once per compute_view() call (or injected),
- no global state, no I/O.

Time rules:
- naive datetimes are interpreted as local time,
- "today" compares calendar days in the zone of `now`.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable, Sequence
from dataclasses import fields
from datetime import datetime, timedelta
from typing import Any

from .task_models import (
    DeadlineFilter,
    SortOrder,
    StatusFilter,
    Task,
    TaskView,
    ViewConfig,
)

logger = logging.getLogger(__name__)

ELLIPSIS = "..."
PageToken = int | str

THIS_WEEK_SPAN = timedelta(days=7)
INDICATOR_FULL_LIMIT = 7

# camelCase names used by the task service -> Task attributes
SORT_KEY_ALIASES: dict[str, str] = {
    "createdAt": "created_at",
    "dueDate": "deadline",
}

_TASK_FIELDS = frozenset(f.name for f in fields(Task)) - {"extra"}

# ISO 8601 with a time component: 2024-06-01T10:00, ...T10:00:00.123Z, ...+02:00
_ISO_DATETIME_RE = re.compile(r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}")


def _now_local() -> datetime:
    return datetime.now().astimezone()


def _as_instant(value: datetime) -> datetime:
    """Naive -> local aware, so every instant is comparable."""
    return value if value.tzinfo is not None else value.astimezone()


def parse_instant(value: Any) -> datetime | None:
    """Return an aware datetime for temporal values and ISO date-time strings, else None."""
    if isinstance(value, datetime):
        return _as_instant(value)
    if isinstance(value, str) and _ISO_DATETIME_RE.match(value.strip()):
        raw = value.strip()
        if raw.endswith(("Z", "z")):
            raw = raw[:-1] + "+00:00"
        try:
            return _as_instant(datetime.fromisoformat(raw))
        except ValueError:
            return None
    return None


# ---- stage 1: status ----

def matches_status(task: Task, status: StatusFilter) -> bool:
    if status == StatusFilter.COMPLETED:
        return bool(task.completed)
    if status == StatusFilter.PENDING:
        return not task.completed
    return True


def filter_by_status(tasks: Iterable[Task], status: StatusFilter) -> list[Task]:
    status = StatusFilter.parse(status)
    return [t for t in tasks if matches_status(t, status)]


# ---- stage 2: deadline ----

def matches_deadline(task: Task, deadline_filter: DeadlineFilter, now: datetime) -> bool:
    """
    A task without a deadline only passes the ALL filter.
    `now` must already be aware (see compute_view).
    """
    if deadline_filter == DeadlineFilter.ALL:
        return True
    if task.deadline is None:
        return False

    deadline = _as_instant(task.deadline)

    if deadline_filter == DeadlineFilter.TODAY:
        return deadline.astimezone(now.tzinfo).date() == now.date()
    if deadline_filter == DeadlineFilter.THIS_WEEK:
        return now <= deadline <= now + THIS_WEEK_SPAN
    if deadline_filter == DeadlineFilter.OVERDUE:
        return deadline < now and not task.completed
    return False


def filter_by_deadline(
    tasks: Iterable[Task],
    deadline_filter: DeadlineFilter,
    *,
    now: datetime | None = None,
) -> list[Task]:
    deadline_filter = DeadlineFilter.parse(deadline_filter)
    now = _as_instant(now) if now is not None else _now_local()
    return [t for t in tasks if matches_deadline(t, deadline_filter, now)]


def filter_tasks(
    tasks: Iterable[Task],
    status: StatusFilter,
    deadline_filter: DeadlineFilter,
    *,
    now: datetime | None = None,
) -> list[Task]:
    return filter_by_deadline(filter_by_status(tasks, status), deadline_filter, now=now)


# ---- stage 3: sort ----

def field_value(task: Task, key: str) -> Any:
    """Look up a sort field on the task, then in its extra fields. Missing -> None."""
    attr = SORT_KEY_ALIASES.get(key, key)
    if attr in _TASK_FIELDS:
        return getattr(task, attr)
    extra = task.extra or {}
    if key in extra:
        return extra[key]
    return extra.get(attr)


def _rank(value: Any) -> tuple[int, Any]:
    """
    Total order over heterogeneous values:
    instants < numbers < strings < anything else (by text).
    """
    instant = parse_instant(value)
    if instant is not None:
        return (0, instant)
    if isinstance(value, (int, float)) and not (isinstance(value, float) and math.isnan(value)):
        return (1, value)
    if isinstance(value, str):
        return (2, value)
    return (3, str(value))


def sort_tasks(tasks: Iterable[Task], sort_key: str, sort_order: SortOrder) -> list[Task]:
    """
    Stable sort by `sort_key`. Tasks whose value is missing (None) always go last,
    in their input order, whichever direction is requested.
    """
    sort_order = SortOrder.parse(sort_order)
    present: list[tuple[tuple[int, Any], Task]] = []
    missing: list[Task] = []

    for task in tasks:
        value = field_value(task, sort_key)
        if value is None:
            missing.append(task)
        else:
            present.append((_rank(value), task))

    # sorted() is stable, also with reverse=True.
    ordered = sorted(
        present,
        key=lambda pair: pair[0],
        reverse=sort_order == SortOrder.DESCENDING,
    )
    return [task for _, task in ordered] + missing


# ---- stage 4: paginate ----

def total_pages(total: int, page_size: int) -> int:
    if total <= 0 or page_size <= 0:
        return 0
    return -(-total // page_size)


def paginate(tasks: Sequence[Task], page: int, page_size: int) -> list[Task]:
    start = (page - 1) * page_size
    return list(tasks[start : start + page_size])


def compute_view(
    tasks: Iterable[Task],
    config: ViewConfig,
    *,
    now: datetime | None = None,
) -> TaskView:
    """
    Run the full pipeline once.

    total_matching counts tasks after filtering and before pagination; the page
    slice comes from the very same filtered list. A page past the end is empty.
    """
    now = _as_instant(now) if now is not None else _now_local()

    filtered = filter_tasks(tasks, config.status_filter, config.deadline_filter, now=now)
    ordered = sort_tasks(filtered, config.sort_key, config.sort_order)
    page = paginate(ordered, config.page, config.page_size)

    logger.debug(
        "compute_view status=%s deadline=%s sort=%s/%s page=%s size=%s -> %d of %d",
        config.status_filter.value,
        config.deadline_filter.value,
        config.sort_key,
        config.sort_order.value,
        config.page,
        config.page_size,
        len(page),
        len(filtered),
    )
    return TaskView(
        page=page,
        total_matching=len(filtered),
        page_number=config.page,
        page_size=config.page_size,
    )


def build_page_indicator(current: int, total: int) -> list[PageToken]:
    """
    Page numbers for the pager, with ELLIPSIS for skipped ranges.

    total <= 7: every page. Otherwise first and last are always shown and
    the window depends on whether `current` is near the start, the end, or
    in the middle.
    """
    if total <= 0:
        return []
    if total <= INDICATOR_FULL_LIMIT:
        return list(range(1, total + 1))
    if current <= 3:
        return [1, 2, 3, 4, ELLIPSIS, total]
    if current >= total - 2:
        return [1, ELLIPSIS, total - 3, total - 2, total - 1, total]
    return [1, ELLIPSIS, current - 1, current, current + 1, ELLIPSIS, total]
