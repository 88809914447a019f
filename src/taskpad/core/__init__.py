"""Functional core - pure business logic with no I/O."""

from .tasks import Task, Project, parse_tags, next_id
from .filters import (
    Window,
    parse_date,
    is_today,
    is_this_week,
    is_this_month,
    matches_query,
    search,
    filter_by_window,
    filter_by_project,
    apply,
)

__all__ = [
    # Records
    "Task",
    "Project",
    "parse_tags",
    "next_id",
    # Filters
    "Window",
    "parse_date",
    "is_today",
    "is_this_week",
    "is_this_month",
    "matches_query",
    "search",
    "filter_by_window",
    "filter_by_project",
    "apply",
]
