# src/taskflow/cli/commands.py

from __future__ import annotations

import inspect
import logging
import shlex
from collections.abc import Callable
from datetime import datetime, time
from typing import cast

from ..core import auth, dashboard
from ..core.state import AppState
from ..insights.service import generate_task_insights
from ..tasks.task_api import ApiError, AuthExpiredError
from ..tasks.task_models import InvalidConfigError, TaskDraft
from ..tasks.task_stats import compute_task_stats
from .render import (
    render_counts,
    render_insights,
    render_task_list,
    render_user,
    render_view_config,
)
from .theme import Theme

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

_YES = {"1", "true", "yes", "y", "on"}
_NO = {"0", "false", "no", "n", "off"}


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /tasks, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError:
            parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return h2(state, args)
        except AuthExpiredError:
            return "Your session has expired. Please /login again."
        except ApiError as e:
            return f"[API] {e}"
        except auth.AuthError as e:
            return f"[AUTH] {e}"
        except (InvalidConfigError, ValueError) as e:
            return f"Invalid input: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _now() -> datetime:
    return datetime.now().astimezone()


def _theme(state: AppState) -> Theme:
    return Theme(dark_mode=state.dark_mode)


def _login_required(state: AppState) -> str | None:
    if not state.is_authenticated:
        return "Please /login (or /signup) first."
    return None


def parse_deadline(raw: str) -> datetime | None:
    """
    YYYY-MM-DD (end of that day), YYYY-MM-DDTHH:MM or 'YYYY-MM-DD HH:MM', local time.
    'none' / '' clears the deadline.
    """
    text = raw.strip()
    if text.lower() in ("", "none", "-"):
        return None
    try:
        if len(text) == 10:
            day = datetime.fromisoformat(text).date()
            return datetime.combine(day, time(23, 59)).astimezone()
        value = datetime.fromisoformat(text)
    except ValueError as e:
        raise ValueError(f"cannot read date {raw!r} (use YYYY-MM-DD or YYYY-MM-DDTHH:MM)") from e
    return value if value.tzinfo is not None else value.astimezone()


def _parse_bool(raw: str) -> bool:
    low = raw.strip().lower()
    if low in _YES:
        return True
    if low in _NO:
        return False
    raise ValueError(f"expected yes/no, got {raw!r}")


def split_options(args: list[str], keys: set[str]) -> tuple[list[str], dict[str, str]]:
    """Separate key=value options (for known keys) from positional words."""
    words: list[str] = []
    options: dict[str, str] = {}
    for arg in args:
        key, sep, value = arg.partition("=")
        if sep and key.lower() in keys:
            options[key.lower()] = value
        else:
            words.append(arg)
    return words, options


def _render_current(state: AppState) -> str:
    now = _now()
    theme = _theme(state)
    view = dashboard.current_view(state, now=now)
    stats = compute_task_stats(state.tasks, now)
    return render_counts(stats, theme) + "\n\n" + render_task_list(view, state.view, now, theme)


# ---- general ----

def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    settings = state.settings
    models = ", ".join(list(getattr(settings, "llm_models", []) or []))
    return (
        "Status:\n"
        f"  Service: {getattr(settings, 'api_base_url', '?')}\n"
        f"  Signed in: {render_user(state.user) if state.is_authenticated else 'no'}\n"
        f"  Theme: {'dark' if state.dark_mode else 'light'}\n"
        f"  View: {render_view_config(state.view)}\n"
        f"  AI models (priority -> fallback): {models}"
    )


def cmd_theme(state: AppState, args: list[str]) -> str:
    """
    /theme        -> toggle
    /theme dark   -> dark mode
    /theme light  -> light mode
    """
    if not args:
        dark = auth.toggle_dark_mode(state)
    else:
        arg = args[0].lower()
        if arg not in ("dark", "light"):
            return "Usage: /theme [dark|light]"
        state.session.set_dark_mode(arg == "dark")
        dark = state.dark_mode
    return f"Switched to {'dark' if dark else 'light'} mode."


# ---- auth ----

def cmd_signup(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if len(args) != 3:
        return 'Usage: /signup "Full Name" email password'
    name, email, password = args
    if emit:
        emit("Creating your account...")
    user = auth.signup(state, name, email, password)
    dashboard.load_tasks(state)
    return f"Welcome, {render_user(user)}! You have {len(state.tasks)} task(s)."


def cmd_login(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if len(args) != 2:
        return "Usage: /login email password"
    email, password = args
    if emit:
        emit("Signing in...")
    user = auth.login(state, email, password)
    dashboard.load_tasks(state)
    return f"Welcome back, {render_user(user)}! You have {len(state.tasks)} task(s)."


def cmd_logout(state: AppState, args: list[str]) -> str:
    auth.logout(state)
    return "Signed out."


def cmd_me(state: AppState, args: list[str]) -> str:
    if msg := _login_required(state):
        return msg
    return render_user(state.user)


# ---- tasks ----

def cmd_tasks(state: AppState, args: list[str]) -> str:
    if msg := _login_required(state):
        return msg
    return _render_current(state)


def cmd_refresh(state: AppState, args: list[str]) -> str:
    if msg := _login_required(state):
        return msg
    dashboard.load_tasks(state)
    if state.error:
        return f"[API] {state.error}"
    return _render_current(state)


def cmd_add(state: AppState, args: list[str]) -> str:
    """/add Title words [due=YYYY-MM-DD[THH:MM]] [desc="..."] [done=yes]"""
    if msg := _login_required(state):
        return msg
    words, opts = split_options(args, {"due", "desc", "done"})
    title = " ".join(words).strip()
    if not title:
        return 'Usage: /add Title words [due=YYYY-MM-DD[THH:MM]] [desc="..."] [done=yes]'

    draft = TaskDraft(
        title=title,
        description=opts.get("desc", ""),
        deadline=parse_deadline(opts["due"]) if "due" in opts else None,
        completed=_parse_bool(opts["done"]) if "done" in opts else False,
    )
    refresh = dashboard.save_task(state, draft)
    dashboard.apply_refresh(state, refresh)
    return f"Task created ({refresh.task_id})."


def cmd_edit(state: AppState, args: list[str]) -> str:
    """/edit <id> [title="..."] [due=...|due=none] [desc="..."] [done=yes|no]"""
    if msg := _login_required(state):
        return msg
    words, opts = split_options(args, {"title", "due", "desc", "done"})
    if len(words) != 1 or not opts:
        return 'Usage: /edit <id> [title="..."] [due=YYYY-MM-DD[THH:MM]|none] [desc="..."] [done=yes|no]'

    task = dashboard.find_task(state, words[0])
    if task is None:
        return f"No task with id {words[0]}."

    base = TaskDraft.from_task(task)
    draft = TaskDraft(
        title=opts.get("title", base.title),
        description=opts.get("desc", base.description),
        deadline=parse_deadline(opts["due"]) if "due" in opts else base.deadline,
        completed=_parse_bool(opts["done"]) if "done" in opts else base.completed,
    )
    refresh = dashboard.save_task(state, draft, task_id=task.id)
    dashboard.apply_refresh(state, refresh)
    return f"Task {task.id} updated."


def _set_completed(state: AppState, args: list[str], completed: bool) -> str:
    if msg := _login_required(state):
        return msg
    if len(args) != 1:
        return f"Usage: /{'done' if completed else 'undo'} <id>"
    task = dashboard.find_task(state, args[0])
    if task is None:
        return f"No task with id {args[0]}."
    if task.completed == completed:
        return f"Task {task.id} is already {'completed' if completed else 'pending'}."

    base = TaskDraft.from_task(task)
    draft = TaskDraft(
        title=base.title,
        description=base.description,
        deadline=base.deadline,
        completed=completed,
    )
    refresh = dashboard.save_task(state, draft, task_id=task.id)
    dashboard.apply_refresh(state, refresh)
    return f"Task {task.id} marked as {'completed' if completed else 'pending'}."


def cmd_done(state: AppState, args: list[str]) -> str:
    return _set_completed(state, args, True)


def cmd_undo(state: AppState, args: list[str]) -> str:
    return _set_completed(state, args, False)


def cmd_delete(state: AppState, args: list[str]) -> str:
    if msg := _login_required(state):
        return msg
    if len(args) != 1:
        return "Usage: /delete <id>"
    if dashboard.find_task(state, args[0]) is None:
        return f"No task with id {args[0]}."
    refresh = dashboard.delete_task(state, args[0])
    dashboard.apply_refresh(state, refresh)
    return f"Task {args[0]} deleted."


# ---- view ----

def cmd_filter(state: AppState, args: list[str]) -> str:
    """
    /filter status=pending deadline=overdue
    /filter pending | completed | all | today | thisWeek | overdue
    /filter reset
    """
    if not args:
        return (
            "Usage: /filter status=all|completed|pending deadline=all|today|thisWeek|overdue\n"
            "       /filter reset"
        )
    if len(args) == 1 and args[0].lower() == "reset":
        dashboard.set_filter(state, status="all", deadline="all")
        return f"Filters cleared. {render_view_config(state.view)}"

    words, opts = split_options(args, {"status", "deadline"})
    status = opts.get("status")
    deadline = opts.get("deadline")
    for word in words:
        low = word.lower()
        if low in ("completed", "done", "pending", "open"):
            status = word
        elif low in ("today", "thisweek", "week", "overdue"):
            deadline = word
        elif low == "all":
            status, deadline = "all", "all"
        else:
            return f"Unknown filter: {word}"

    dashboard.set_filter(state, status=status, deadline=deadline)
    return f"Filter set. {render_view_config(state.view)}"


def cmd_sort(state: AppState, args: list[str]) -> str:
    """/sort <field> [asc|desc]   without a direction, repeating the field flips it"""
    if not args or len(args) > 2:
        return "Usage: /sort <field> [asc|desc]  (fields: created_at, deadline, title, completed)"
    if len(args) == 2:
        dashboard.set_sort(state, key=args[0], order=args[1])
    else:
        dashboard.toggle_sort(state, args[0])
    return f"Sorting by {state.view.sort_key} {state.view.sort_order.value}."


def cmd_page(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /page <number>"
    try:
        page = int(args[0])
    except ValueError:
        return "Usage: /page <number>"
    if not dashboard.set_page(state, page):
        return f"No page {page}."
    return cmd_tasks(state, [])


def cmd_next(state: AppState, args: list[str]) -> str:
    if not dashboard.set_page(state, state.view.page + 1):
        return "Already on the last page."
    return cmd_tasks(state, [])


def cmd_prev(state: AppState, args: list[str]) -> str:
    if not dashboard.set_page(state, state.view.page - 1):
        return "Already on the first page."
    return cmd_tasks(state, [])


def cmd_pagesize(state: AppState, args: list[str]) -> str:
    sizes = "|".join(str(s) for s in dashboard.PAGE_SIZE_OPTIONS)
    if len(args) != 1:
        return f"Usage: /pagesize {sizes}"
    try:
        size = int(args[0])
    except ValueError:
        return f"Usage: /pagesize {sizes}"
    dashboard.set_page_size(state, size)
    return f"Showing {size} tasks per page."


# ---- AI ----

def cmd_insights(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if msg := _login_required(state):
        return msg
    if emit and state.tasks:
        emit("[AI] Analyzing your tasks...")
    logger.debug("Insights requested for %d tasks", len(state.tasks))
    result = generate_task_insights(state.tasks, state.llm, now=_now())
    return render_insights(result, _theme(state))


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show service, account, theme and view settings.")
registry.register("signup", cmd_signup, help_text='Create an account: /signup "Name" email password.')
registry.register("login", cmd_login, help_text="Sign in: /login email password.")
registry.register("logout", cmd_logout, help_text="Sign out (keeps the theme).")
registry.register("me", cmd_me, help_text="Show the signed-in user.")
registry.register("tasks", cmd_tasks, help_text="Show the current page of tasks.", aliases=["ls", "list"])
registry.register("refresh", cmd_refresh, help_text="Reload tasks from the service.")
registry.register("add", cmd_add, help_text="Create a task: /add Title [due=...] [desc=...] [done=yes].")
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <id> [title=...] [due=...] [desc=...] [done=...].")
registry.register("done", cmd_done, help_text="Mark a task completed: /done <id>.")
registry.register("undo", cmd_undo, help_text="Mark a task pending again: /undo <id>.")
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <id>.", aliases=["rm"])
registry.register("filter", cmd_filter, help_text="Filter by status/deadline: /filter status=pending deadline=overdue.")
registry.register("sort", cmd_sort, help_text="Sort tasks: /sort <field> [asc|desc].")
registry.register("page", cmd_page, help_text="Go to a page: /page <n>.")
registry.register("next", cmd_next, help_text="Next page.")
registry.register("prev", cmd_prev, help_text="Previous page.")
registry.register("pagesize", cmd_pagesize, help_text="Tasks per page: /pagesize 10|20|50.")
registry.register("insights", cmd_insights, help_text="Ask the AI coach for productivity insights.", aliases=["ai"])
registry.register("theme", cmd_theme, help_text="Toggle dark/light mode: /theme [dark|light].")
