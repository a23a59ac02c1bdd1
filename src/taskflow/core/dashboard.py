# src/taskflow/core/dashboard.py

"""
Dashboard actions over AppState.

These replace the browser store's reducers and the modal's "reload on close"
callback: saving or deleting a task returns a RefreshRequest, and the caller
decides when to run load_tasks().
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime

from ..tasks.task_api import ApiError, AuthExpiredError
from ..tasks.task_models import (
    DeadlineFilter,
    InvalidConfigError,
    SortOrder,
    StatusFilter,
    Task,
    TaskDraft,
    TaskView,
)
from ..tasks.task_view import SORT_KEY_ALIASES, compute_view
from .state import AppState

logger = logging.getLogger(__name__)

PAGE_SIZE_OPTIONS: tuple[int, ...] = (10, 20, 50)


@dataclass(frozen=True, slots=True)
class RefreshRequest:
    reason: str
    task_id: str | None = None


# ---- task list ----

def set_tasks(state: AppState, tasks: list[Task]) -> None:
    state.tasks = list(tasks)
    state.loading = False
    state.error = None


def load_tasks(state: AppState) -> list[Task]:
    """
    Fetch the task list. On a service error the list is emptied and the
    message kept in state.error; an expired session propagates.
    """
    state.loading = True
    try:
        tasks = state.api.get_tasks()
    except AuthExpiredError:
        state.loading = False
        raise
    except ApiError as e:
        logger.warning("Failed to load tasks: %s", e)
        state.tasks = []
        state.loading = False
        state.error = str(e)
        return []
    set_tasks(state, tasks)
    logger.debug("Loaded %d tasks", len(tasks))
    return state.tasks


def find_task(state: AppState, task_id: str) -> Task | None:
    for task in state.tasks:
        if task.id == task_id:
            return task
    return None


def save_task(state: AppState, draft: TaskDraft, task_id: str | None = None) -> RefreshRequest:
    """Create (task_id is None) or update a task, mirror it locally, ask for a refresh."""
    if not draft.title.strip():
        raise ValueError("Task title is required")

    if task_id is None:
        created = state.api.create_task(draft)
        state.tasks.insert(0, created)
        logger.info("Task created id=%s", created.id)
        return RefreshRequest(reason="created", task_id=created.id)

    updated = state.api.update_task(task_id, draft)
    for i, task in enumerate(state.tasks):
        if task.id == updated.id:
            state.tasks[i] = updated
            break
    logger.info("Task updated id=%s", updated.id)
    return RefreshRequest(reason="updated", task_id=updated.id)


def delete_task(state: AppState, task_id: str) -> RefreshRequest:
    state.api.delete_task(task_id)
    state.tasks = [t for t in state.tasks if t.id != task_id]
    logger.info("Task deleted id=%s", task_id)
    return RefreshRequest(reason="deleted", task_id=task_id)


def apply_refresh(state: AppState, request: RefreshRequest | None) -> None:
    if request is None:
        return
    logger.debug("Refresh requested (%s id=%s)", request.reason, request.task_id)
    load_tasks(state)


# ---- view mutators ----

def set_filter(
    state: AppState,
    *,
    status: StatusFilter | str | None = None,
    deadline: DeadlineFilter | str | None = None,
) -> None:
    """Changing a filter always returns to page 1."""
    view = state.view
    state.view = replace(
        view,
        status_filter=view.status_filter if status is None else StatusFilter.parse(status),
        deadline_filter=view.deadline_filter if deadline is None else DeadlineFilter.parse(deadline),
        page=1,
    )


def set_sort(state: AppState, *, key: str | None = None, order: SortOrder | str | None = None) -> None:
    view = state.view
    state.view = replace(
        view,
        sort_key=view.sort_key if key is None else key,
        sort_order=view.sort_order if order is None else SortOrder.parse(order),
    )


def toggle_sort(state: AppState, key: str) -> None:
    """Picking the current field again flips the direction; a new field starts ascending."""
    view = state.view
    same = SORT_KEY_ALIASES.get(key, key) == SORT_KEY_ALIASES.get(view.sort_key, view.sort_key)
    if same:
        flipped = SortOrder.ASCENDING if view.sort_order is SortOrder.DESCENDING else SortOrder.DESCENDING
        state.view = replace(view, sort_order=flipped)
    else:
        state.view = replace(view, sort_key=key, sort_order=SortOrder.ASCENDING)


def current_view(state: AppState, *, now: datetime | None = None) -> TaskView:
    return compute_view(state.tasks, state.view, now=now)


def set_page(state: AppState, page: int, *, now: datetime | None = None) -> bool:
    """Move to `page` if it exists; out-of-range requests are ignored (False)."""
    pages = current_view(state, now=now).total_pages
    if page < 1 or page > pages:
        return False
    state.view = replace(state.view, page=page)
    return True


def set_page_size(state: AppState, size: int) -> None:
    if size not in PAGE_SIZE_OPTIONS:
        allowed = ", ".join(str(s) for s in PAGE_SIZE_OPTIONS)
        raise InvalidConfigError(f"page size must be one of {allowed}")
    state.view = replace(state.view, page_size=size, page=1)

