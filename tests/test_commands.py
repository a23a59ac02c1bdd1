# tests/test_commands.py

from __future__ import annotations

from datetime import datetime

import pytest

from taskflow.cli.commands import CommandRegistry, parse_deadline, registry, split_options
from taskflow.tasks.task_api import ApiError, AuthExpiredError

from .fakes import FakeLLMClient


@pytest.fixture(autouse=True)
def _no_color(monkeypatch) -> None:
    monkeypatch.setenv("NO_COLOR", "1")


def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}
    notes: list[str] = []

    def h2(state, args):
        called["h2"] += 1
        return "h2:" + ",".join(args)

    def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b", aliases=["bee"])

    assert reg.handle(state, '/a x "y z"') == "h2:x,y z"
    assert reg.handle(state, "/BEE", emit=notes.append) == "h3"
    assert called == {"h2": 1, "h3": 1}
    assert notes == ["note"]


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Empty command" in (reg.handle(state, "/") or "")
    assert "Unknown command" in (reg.handle(state, "/nope") or "")


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (AuthExpiredError("expired", status_code=401), "Your session has expired. Please /login again."),
        (ApiError("Failed to load tasks", status_code=500), "[API] Failed to load tasks"),
        (ValueError("bad date"), "Invalid input: bad date"),
    ],
)
def test_command_errors_become_replies(state, error, expected) -> None:
    reg = CommandRegistry()

    def boom(state, args):
        raise error

    reg.register("boom", boom, "boom")

    assert reg.handle(state, "/boom") == expected


def test_help_lists_commands(state) -> None:
    text = registry.handle(state, "/help") or ""

    assert "/add" in text
    assert "/insights" in text
    assert "/pagesize" in text


def test_task_commands_require_login(state) -> None:
    assert registry.handle(state, "/tasks") == "Please /login (or /signup) first."
    assert registry.handle(state, "/add Something") == "Please /login (or /signup) first."


def test_signup_and_login_commands(state, api) -> None:
    notes: list[str] = []

    reply = registry.handle(state, '/signup "Ada Lovelace" ada@example.com secret1', emit=notes.append) or ""

    assert reply.startswith("Welcome, Ada Lovelace <ada@example.com>!")
    assert notes == ["Creating your account..."]

    registry.handle(state, "/logout")
    assert not state.is_authenticated

    assert (registry.handle(state, "/login ada@example.com nope12") or "").startswith("[AUTH]")
    assert (registry.handle(state, "/login ada@example.com secret1") or "").startswith("Welcome back")


def test_task_lifecycle(signed_in_state, api) -> None:
    reply = registry.handle(signed_in_state, '/add Write tests due=2024-06-20 desc="unit and cli"')
    assert reply == "Task created (t1)."

    task = api.tasks["t1"]
    assert task.description == "unit and cli"
    assert task.deadline is not None
    assert task.deadline.astimezone().strftime("%Y-%m-%d %H:%M") == "2024-06-20 23:59"

    listing = registry.handle(signed_in_state, "/tasks") or ""
    assert "Write tests" in listing
    assert "Total: 1" in listing

    assert registry.handle(signed_in_state, "/done t1") == "Task t1 marked as completed."
    assert api.tasks["t1"].completed is True
    assert registry.handle(signed_in_state, "/done t1") == "Task t1 is already completed."

    assert registry.handle(signed_in_state, '/edit t1 title="Write more tests" due=none') == "Task t1 updated."
    assert api.tasks["t1"].title == "Write more tests"
    assert api.tasks["t1"].deadline is None

    assert registry.handle(signed_in_state, "/delete t9") == "No task with id t9."
    assert registry.handle(signed_in_state, "/rm t1") == "Task t1 deleted."
    assert "No tasks found" in (registry.handle(signed_in_state, "/tasks") or "")


def test_add_with_bad_date(signed_in_state, api) -> None:
    reply = registry.handle(signed_in_state, "/add Oops due=tomorrow") or ""

    assert reply.startswith("Invalid input: cannot read date")
    assert api.tasks == {}


def test_filter_sort_and_pagesize(signed_in_state) -> None:
    assert "status=pending" in (registry.handle(signed_in_state, "/filter pending") or "")
    assert "deadline=overdue" in (registry.handle(signed_in_state, "/filter deadline=overdue") or "")
    assert registry.handle(signed_in_state, "/filter bogus") == "Unknown filter: bogus"
    assert (registry.handle(signed_in_state, "/filter status=archived") or "").startswith("Invalid input:")
    assert "status=all deadline=all" in (registry.handle(signed_in_state, "/filter reset") or "")

    assert registry.handle(signed_in_state, "/sort deadline asc") == "Sorting by deadline asc."
    assert registry.handle(signed_in_state, "/sort deadline") == "Sorting by deadline desc."
    assert registry.handle(signed_in_state, "/sort title") == "Sorting by title asc."
    assert registry.handle(signed_in_state, "/pagesize 20") == "Showing 20 tasks per page."
    assert (registry.handle(signed_in_state, "/pagesize 7") or "").startswith("Invalid input:")
    assert signed_in_state.view.page_size == 20


def test_paging_commands(signed_in_state, api) -> None:
    for i in range(12):
        registry.handle(signed_in_state, f"/add Task{i}")

    assert signed_in_state.view.page == 1
    assert "Page 2 of 2" in (registry.handle(signed_in_state, "/next") or "")
    assert registry.handle(signed_in_state, "/next") == "Already on the last page."
    assert registry.handle(signed_in_state, "/page 5") == "No page 5."
    assert "Page 1 of 2" in (registry.handle(signed_in_state, "/prev") or "")


def test_expired_session_on_refresh(signed_in_state, api) -> None:
    api.expired = True

    assert registry.handle(signed_in_state, "/refresh") == "Your session has expired. Please /login again."
    assert not signed_in_state.is_authenticated


def test_insights_command(signed_in_state) -> None:
    signed_in_state.llm = FakeLLMClient(next_text="* **Start small:** Finish one task today.")
    registry.handle(signed_in_state, "/add Plan trip")
    notes: list[str] = []

    reply = registry.handle(signed_in_state, "/insights", emit=notes.append) or ""

    assert "1. Start small" in reply
    assert "Finish one task today." in reply
    assert notes == ["[AI] Analyzing your tasks..."]


def test_insights_without_tasks(signed_in_state) -> None:
    assert registry.handle(signed_in_state, "/ai") == "[AI] Please add some tasks first to get AI insights."


def test_theme_command(state) -> None:
    assert registry.handle(state, "/theme") == "Switched to dark mode."
    assert registry.handle(state, "/theme light") == "Switched to light mode."
    assert registry.handle(state, "/theme blue") == "Usage: /theme [dark|light]"


def test_parse_deadline() -> None:
    day = parse_deadline("2024-06-20")
    assert day is not None and (day.hour, day.minute) == (23, 59)
    assert parse_deadline("none") is None
    timed = parse_deadline("2024-06-20T09:30")
    assert isinstance(timed, datetime) and timed.tzinfo is not None
    with pytest.raises(ValueError):
        parse_deadline("next week")


def test_split_options_keeps_unknown_keys_as_words() -> None:
    words, opts = split_options(["Fix", "a=b", "due=2024-01-01"], {"due"})

    assert words == ["Fix", "a=b"]
    assert opts == {"due": "2024-01-01"}
