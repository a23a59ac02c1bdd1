# src/taskflow/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any


class InvalidConfigError(ValueError):
    """Raised when a view configuration cannot be honoured (bad page, size or enum)."""


class _ParsableEnum(StrEnum):
    @classmethod
    def parse(cls, raw: Any) -> Any:
        """
        Accept an enum member or its string value (case-insensitive).
        Unknown values are rejected instead of silently mapped to a default.
        """
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, str):
            wanted = raw.strip().lower()
            for member in cls:
                if member.value.lower() == wanted:
                    return member
            aliases = getattr(cls, "_aliases", None)
            table = aliases() if callable(aliases) else {}
            if wanted in table:
                return table[wanted]
        allowed = ", ".join(m.value for m in cls)
        raise InvalidConfigError(f"{cls.__name__}: unknown value {raw!r} (allowed: {allowed})")


class StatusFilter(_ParsableEnum):
    ALL = "all"
    COMPLETED = "completed"
    PENDING = "pending"

    @classmethod
    def _aliases(cls) -> dict[str, StatusFilter]:
        return {"done": cls.COMPLETED, "open": cls.PENDING}


class DeadlineFilter(_ParsableEnum):
    ALL = "all"
    TODAY = "today"
    THIS_WEEK = "thisWeek"
    OVERDUE = "overdue"

    @classmethod
    def _aliases(cls) -> dict[str, DeadlineFilter]:
        return {"week": cls.THIS_WEEK, "this_week": cls.THIS_WEEK}


class SortOrder(_ParsableEnum):
    ASCENDING = "asc"
    DESCENDING = "desc"

    @classmethod
    def _aliases(cls) -> dict[str, SortOrder]:
        return {"ascending": cls.ASCENDING, "descending": cls.DESCENDING}


@dataclass(slots=True)
class Task:
    """
    A task as delivered by the external task service.

    `extra` keeps any field the service sends that has no attribute here,
    so it can still be used as a sort key.
    """

    id: str
    title: str
    created_at: datetime | None
    deadline: datetime | None = None
    completed: bool = False
    description: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class TaskDraft:
    """Form data for creating or editing a task."""

    title: str
    description: str = ""
    deadline: datetime | None = None
    completed: bool = False

    def to_payload(self) -> dict[str, Any]:
        """Backend format: `completed` travels as status 'Done' | 'Pending'."""
        return {
            "title": self.title,
            "description": self.description or "",
            "deadline": self.deadline.isoformat() if self.deadline is not None else None,
            "status": "Done" if self.completed else "Pending",
        }

    @classmethod
    def from_task(cls, task: Task) -> TaskDraft:
        return cls(
            title=task.title,
            description=task.description or "",
            deadline=task.deadline,
            completed=task.completed,
        )


@dataclass(frozen=True, slots=True)
class ViewConfig:
    """Filter, sort and pagination parameters for one rendering of the task list."""

    status_filter: StatusFilter = StatusFilter.ALL
    deadline_filter: DeadlineFilter = DeadlineFilter.ALL
    sort_key: str = "created_at"
    sort_order: SortOrder = SortOrder.DESCENDING
    page: int = 1
    page_size: int = 10

    def __post_init__(self) -> None:
        # frozen: normalise raw strings through object.__setattr__
        object.__setattr__(self, "status_filter", StatusFilter.parse(self.status_filter))
        object.__setattr__(self, "deadline_filter", DeadlineFilter.parse(self.deadline_filter))
        object.__setattr__(self, "sort_order", SortOrder.parse(self.sort_order))

        if not isinstance(self.sort_key, str) or not self.sort_key.strip():
            raise InvalidConfigError("sort_key must be a non-empty field name")
        if isinstance(self.page, bool) or not isinstance(self.page, int) or self.page < 1:
            raise InvalidConfigError(f"page must be an integer >= 1, got {self.page!r}")
        if (
            isinstance(self.page_size, bool)
            or not isinstance(self.page_size, int)
            or self.page_size < 1
        ):
            raise InvalidConfigError(f"page_size must be an integer >= 1, got {self.page_size!r}")


@dataclass(frozen=True, slots=True)
class TaskView:
    page: list[Task]
    total_matching: int
    page_number: int
    page_size: int

    @property
    def total_pages(self) -> int:
        if self.total_matching <= 0:
            return 0
        return -(-self.total_matching // self.page_size)
