"""Pure task filtering - date windows and text search, no I/O."""

import re
from datetime import date, timedelta
from enum import Enum

from .tasks import Task

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class Window(Enum):
    """Date window a task list can be narrowed to."""

    ALL = "all"
    TODAY = "today"
    WEEK = "week"  # Sunday through Saturday
    MONTH = "month"


def parse_date(value: str | None) -> date | None:
    """Parse a YYYY-MM-DD string. Returns None for anything else."""
    if not value or not _ISO_DATE.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def week_bounds(as_of: date) -> tuple[date, date]:
    """Sunday and Saturday of the week containing as_of."""
    # date.weekday() is Monday=0; shift so Sunday=0
    start = as_of - timedelta(days=(as_of.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


def is_today(value: str | None, as_of: date | None = None) -> bool:
    d = parse_date(value)
    if d is None:
        return False
    return d == (as_of or date.today())


def is_this_week(value: str | None, as_of: date | None = None) -> bool:
    d = parse_date(value)
    if d is None:
        return False
    start, end = week_bounds(as_of or date.today())
    return start <= d <= end


def is_this_month(value: str | None, as_of: date | None = None) -> bool:
    d = parse_date(value)
    if d is None:
        return False
    as_of = as_of or date.today()
    return d.year == as_of.year and d.month == as_of.month


_WINDOW_PREDICATES = {
    Window.TODAY: is_today,
    Window.WEEK: is_this_week,
    Window.MONTH: is_this_month,
}


def in_window(task: Task, window: Window | str, as_of: date | None = None) -> bool:
    """
    Check whether a task's date falls in the window. ALL always matches.

    window may be a Window or its string value; unknown names raise ValueError.
    """
    window = Window(window)
    if window is Window.ALL:
        return True
    return _WINDOW_PREDICATES[window](task.date, as_of)


def matches_query(task: Task, query: str) -> bool:
    """
    Case-insensitive substring match against title, desc, tags and priority.

    An empty query matches every task.
    """
    q = query.lower()
    if not q:
        return True
    return (
        q in task.title.lower()
        or q in task.desc.lower()
        or any(q in tag.lower() for tag in task.tags)
        or q in task.priority.lower()
    )


def search(tasks: list[Task], query: str) -> list[Task]:
    """Filter tasks by free-text query."""
    return [t for t in tasks if matches_query(t, query)]


def filter_by_window(
    tasks: list[Task],
    window: Window | str = Window.ALL,
    as_of: date | None = None,
) -> list[Task]:
    """Filter tasks to a date window, evaluated against as_of (default today)."""
    window = Window(window)
    if window is Window.ALL:
        return list(tasks)
    as_of = as_of or date.today()
    return [t for t in tasks if in_window(t, window, as_of)]


def filter_by_project(tasks: list[Task], project_id: int) -> list[Task]:
    """Filter tasks linked to a project id."""
    return [t for t in tasks if t.project == project_id]


def apply(
    tasks: list[Task],
    query: str = "",
    window: Window | str = Window.ALL,
    as_of: date | None = None,
) -> list[Task]:
    """
    Combined view: text search first, then the date window.

    Pure function - the input list is never modified.
    """
    return filter_by_window(search(tasks, query), window, as_of)
