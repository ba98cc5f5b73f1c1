"""Helpers for presenting task lists"""

from datetime import datetime, UTC
from typing import Iterable, List

SORT_FIELDS = ("due_date", "priority", "title", "created_at")


def calculate_task_progress(task) -> int:
    """Percent of subtasks completed, or 0/100 for a task without subtasks."""
    subtasks = list(task.subtasks or [])
    if not subtasks:
        return 100 if task.completed else 0
    done = sum(1 for subtask in subtasks if subtask.completed)
    return round(done / len(subtasks) * 100)


def filter_tasks_by_query(tasks: Iterable, query: str) -> List:
    """Case-insensitive match on task and subtask titles and descriptions."""
    tasks = list(tasks)
    needle = query.strip().lower()
    if not needle:
        return tasks

    def matches(item) -> bool:
        return needle in item.title.lower() or needle in (item.description or "").lower()

    return [
        task
        for task in tasks
        if matches(task) or any(matches(subtask) for subtask in task.subtasks)
    ]


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def sort_tasks(tasks: Iterable, sort_by: str = "created_at", order: str = "desc") -> List:
    """Sort tasks; tasks without a due date sort after dated ones."""
    if sort_by not in SORT_FIELDS:
        raise ValueError(f"Cannot sort tasks by {sort_by!r}")

    def key(task):
        if sort_by == "due_date":
            # Undated tasks last when ascending
            if task.due_date is None:
                return (1, 0.0)
            return (0, _aware(task.due_date).timestamp())
        if sort_by == "priority":
            return task.priority
        if sort_by == "title":
            return task.title.lower()
        return _aware(task.created_at).timestamp() if task.created_at else 0.0

    return sorted(tasks, key=key, reverse=(order == "desc"))
