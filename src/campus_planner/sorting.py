from __future__ import annotations

from datetime import date
from typing import Any, Callable, Iterable

from campus_planner.models import Task

SORT_ORDERS = ("asc", "desc")

_SORT_KEYS: dict[str, Callable[[Task], Any]] = {
    "dueDate": lambda task: date.fromisoformat(task.due_date),
    "title": lambda task: task.title.casefold(),
    "duration": lambda task: int(task.duration),
}
_ALIASES = {"due_date": "dueDate", "due": "dueDate"}

SORT_FIELDS = tuple(_SORT_KEYS)


def sort_tasks(tasks: Iterable[Task], field: str, order: str = "asc") -> list[Task]:
    """Return a new list ordered by ``field``; equal keys keep input order."""
    name = _ALIASES.get(field, field)
    if name not in _SORT_KEYS:
        raise ValueError(f"unknown sort field: {field}")
    if order not in SORT_ORDERS:
        raise ValueError(f"sort order must be one of {', '.join(SORT_ORDERS)}")
    return sorted(tasks, key=_SORT_KEYS[name], reverse=order == "desc")
