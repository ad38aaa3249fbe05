"""
Task list helpers: counters and ordering for the tasks page.
"""

from datetime import date
from typing import Iterable, Optional, Union

from finance_tracker.models.report import TodoStats
from finance_tracker.models.todo import Todo, TodoSortKey, TodoStatus

_STATUS_ORDER = {
    TodoStatus.URGENT: 0,
    TodoStatus.IN_PROGRESS: 1,
    TodoStatus.PENDING: 2,
    TodoStatus.COMPLETED: 3,
}


def todo_stats(todos: Iterable[Todo]) -> TodoStats:
    stats = TodoStats()
    for todo in todos:
        stats.total += 1
        if todo.status == TodoStatus.COMPLETED:
            stats.completed += 1
        elif todo.status == TodoStatus.PENDING:
            stats.pending += 1
        elif todo.status == TodoStatus.IN_PROGRESS:
            stats.in_progress += 1
        elif todo.status == TodoStatus.URGENT:
            stats.urgent += 1
    return stats


def sort_todos(
    todos: Iterable[Todo],
    sort_by: Union[TodoSortKey, str] = TodoSortKey.CREATED_AT,
    status_filter: Optional[Union[TodoStatus, str]] = None,
) -> list[Todo]:
    """
    Order tasks for display, urgent tasks always on top.

    Within each group: newest first for created_at, earliest due first
    (undated last) for due_date, workflow order for status, and
    alphabetical for text.
    """
    sort_by = TodoSortKey(sort_by)
    if status_filter:
        status_filter = TodoStatus(status_filter)
        todos = [todo for todo in todos if todo.status == status_filter]
    todos = list(todos)

    if sort_by == TodoSortKey.CREATED_AT:
        todos.sort(key=lambda t: t.created_at, reverse=True)
    elif sort_by == TodoSortKey.DUE_DATE:
        todos.sort(key=lambda t: (t.due_date is None, t.due_date or date.min))
    elif sort_by == TodoSortKey.STATUS:
        todos.sort(key=lambda t: _STATUS_ORDER[t.status])
    else:
        todos.sort(key=lambda t: t.text.casefold())

    # Stable: keeps the order above inside each group
    todos.sort(key=lambda t: not t.is_urgent)
    return todos
