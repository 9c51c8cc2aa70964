"""
Task aggregation engine.

Pure functions over lists of tasks: derive progress, sort, filter, search,
bucket by due date, and apply single-task or bulk mutations. Nothing here
holds state or does I/O; every function returns a new list and leaves the
input list and its tasks untouched.

Tasks are always addressed by id.
"""

from collections import Counter
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Set

from tasktide.models.task import PRIORITY_RANK, Attachment, Subtask, Task


# Valid sort keys ("none" keeps input order)
SORT_KEYS = ("none", "priority", "dueDate", "progress")

# Accepted spellings for sort keys
SORT_KEY_ALIASES = {"due_date": "dueDate"}

# Valid completion filters
COMPLETION_FILTERS = ("all", "completed", "incomplete")

# Supported first days of the week, mapped to datetime.weekday() values
WEEK_STARTS = {"sunday": 6, "monday": 0}


def compute_progress(subtasks: List[Subtask]) -> float:
    """Completed share of subtasks; 0.0 for an empty list."""
    if not subtasks:
        return 0.0
    return sum(1 for sub in subtasks if sub.completed) / len(subtasks)


def _with_subtasks(task: Task, subtasks: List[Subtask]) -> Task:
    """Copy of task with new subtasks and a recomputed completed flag."""
    return replace(task, subtasks=subtasks, completed=compute_progress(subtasks) == 1.0)


def _update_one(tasks: List[Task], task_id: str, change) -> List[Task]:
    """
    Apply change to the task with task_id.

    change receives the task and returns its replacement, or None to leave
    the list unchanged.
    """
    result = []
    for task in tasks:
        if task.id == task_id:
            updated = change(task)
            if updated is None:
                return list(tasks)
            result.append(updated)
        else:
            result.append(task)
    return result


# =============================================================================
# Mutations
# =============================================================================

def toggle_subtask(tasks: List[Task], task_id: str, subtask_index: int) -> List[Task]:
    """
    Flip one subtask's completed flag and recompute its task.

    An unknown task_id or an out-of-range index leaves the list unchanged.
    """
    def change(task: Task) -> Optional[Task]:
        if not 0 <= subtask_index < len(task.subtasks):
            return None
        subtasks = [
            replace(sub, completed=not sub.completed) if i == subtask_index else sub
            for i, sub in enumerate(task.subtasks)
        ]
        return _with_subtasks(task, subtasks)

    return _update_one(tasks, task_id, change)


def add_subtask(tasks: List[Task], task_id: str, name: str) -> List[Task]:
    """Append an incomplete subtask named name to the task."""
    name = (name or "").strip()
    if not name:
        raise ValueError("Subtask name must not be empty")

    return _update_one(
        tasks, task_id, lambda task: _with_subtasks(task, task.subtasks + [Subtask(name=name)])
    )


def remove_subtask(tasks: List[Task], task_id: str, subtask_index: int) -> List[Task]:
    """Remove the subtask at subtask_index; out of range leaves the list unchanged."""
    def change(task: Task) -> Optional[Task]:
        if not 0 <= subtask_index < len(task.subtasks):
            return None
        subtasks = [sub for i, sub in enumerate(task.subtasks) if i != subtask_index]
        return _with_subtasks(task, subtasks)

    return _update_one(tasks, task_id, change)


def add_attachment(tasks: List[Task], task_id: str, attachment: Attachment) -> List[Task]:
    return _update_one(
        tasks, task_id, lambda task: replace(task, attachments=task.attachments + [attachment])
    )


def remove_attachment(tasks: List[Task], task_id: str, index: int) -> List[Task]:
    def change(task: Task) -> Optional[Task]:
        if not 0 <= index < len(task.attachments):
            return None
        return replace(task, attachments=[a for i, a in enumerate(task.attachments) if i != index])

    return _update_one(tasks, task_id, change)


def replace_task(tasks: List[Task], updated: Task) -> List[Task]:
    """Swap in updated for the task with the same id, recomputing completion."""
    return _update_one(tasks, updated.id, lambda task: _with_subtasks(updated, list(updated.subtasks)))


def mark_complete(tasks: List[Task], task_ids: Iterable[str]) -> List[Task]:
    """Bulk-complete tasks: every subtask and the task itself become completed."""
    selected = set(task_ids)
    result = []
    for task in tasks:
        if task.id in selected:
            subtasks = [replace(sub, completed=True) for sub in task.subtasks]
            task = replace(task, subtasks=subtasks, completed=True)
        result.append(task)
    return result


def delete_tasks(tasks: List[Task], task_ids: Iterable[str]) -> List[Task]:
    selected = set(task_ids)
    return [task for task in tasks if task.id not in selected]


# =============================================================================
# Views
# =============================================================================

def _priority_rank(task: Task) -> int:
    try:
        return PRIORITY_RANK[task.priority]
    except KeyError:
        raise ValueError(f"Task {task.id} has invalid priority {task.priority!r}")


def _timestamp(value: datetime) -> float:
    if not isinstance(value, datetime):
        raise TypeError(f"due_date must be a datetime, got {type(value).__name__}")
    return value.timestamp()


def sort_tasks(tasks: List[Task], key: Optional[str]) -> List[Task]:
    """
    Return tasks reordered by key.

    Args:
        tasks: Tasks to sort
        key: "priority" (High first), "dueDate" or "due_date" (earliest first),
             "progress" (most complete first) or "none"/""/None (input order)

    All orderings are stable.
    """
    key = SORT_KEY_ALIASES.get(key, key) or "none"
    if key not in SORT_KEYS:
        raise ValueError(f"Invalid sort key. Must be one of: {', '.join(SORT_KEYS)}")

    if key == "priority":
        return sorted(tasks, key=_priority_rank)
    if key == "dueDate":
        return sorted(tasks, key=lambda t: _timestamp(t.due_date))
    if key == "progress":
        return sorted(tasks, key=lambda t: compute_progress(t.subtasks), reverse=True)
    return list(tasks)


def filter_tasks(
    tasks: List[Task],
    category: Optional[str] = None,
    completion: str = "all",
) -> List[Task]:
    """Keep tasks matching category (exact) and the completion filter."""
    if completion not in COMPLETION_FILTERS:
        raise ValueError(
            f"Invalid completion filter. Must be one of: {', '.join(COMPLETION_FILTERS)}"
        )

    result = []
    for task in tasks:
        if category and task.category != category:
            continue
        if completion == "completed" and not task.completed:
            continue
        if completion == "incomplete" and task.completed:
            continue
        result.append(task)
    return result


def search_by_title(tasks: List[Task], query: Optional[str]) -> Optional[List[Task]]:
    """
    Case-insensitive substring search on titles.

    Returns None for a blank query, meaning no search is active. That is
    distinct from an empty list, which means nothing matched.
    """
    if not query or not query.strip():
        return None
    needle = query.lower()
    return [task for task in tasks if needle in task.title.lower()]


def compute_categories(tasks: List[Task]) -> Set[str]:
    return {task.category for task in tasks}


# =============================================================================
# Due dates
# =============================================================================

@dataclass
class DueDateBuckets:
    """Tasks grouped for the home screen sections."""

    due_today: List[Task] = field(default_factory=list)
    due_this_week: List[Task] = field(default_factory=list)
    upcoming: List[Task] = field(default_factory=list)


def local_day(value: datetime) -> date:
    """Calendar day of value in local time; naive datetimes are taken as local."""
    if not isinstance(value, datetime):
        raise TypeError(f"due_date must be a datetime, got {type(value).__name__}")
    if value.tzinfo is not None:
        value = value.astimezone()
    return value.date()


def week_bounds(day: date, week_start: str = "sunday") -> tuple:
    """First and last day of the week containing day."""
    if week_start not in WEEK_STARTS:
        raise ValueError(f"Invalid week start. Must be one of: {', '.join(WEEK_STARTS)}")
    offset = (day.weekday() - WEEK_STARTS[week_start]) % 7
    first = day - timedelta(days=offset)
    return first, first + timedelta(days=6)


def bucket_by_due_date(
    tasks: List[Task],
    now: datetime,
    week_start: str = "sunday",
) -> DueDateBuckets:
    """
    Partition tasks into due today, due later this week, and upcoming.

    Tasks due before today land in no bucket; see overdue_tasks().
    """
    today = local_day(now)
    _, end_of_week = week_bounds(today, week_start)

    buckets = DueDateBuckets()
    for task in tasks:
        day = local_day(task.due_date)
        if day == today:
            buckets.due_today.append(task)
        elif today < day <= end_of_week:
            buckets.due_this_week.append(task)
        elif day > end_of_week:
            buckets.upcoming.append(task)
    return buckets


def overdue_tasks(tasks: List[Task], now: datetime) -> List[Task]:
    """Tasks due on a day before now's day, which bucket_by_due_date() leaves out."""
    today = local_day(now)
    return [task for task in tasks if local_day(task.due_date) < today]


def tasks_for_date(tasks: List[Task], day: date) -> List[Task]:
    """Tasks due on the given local calendar day."""
    return [task for task in tasks if local_day(task.due_date) == day]


def count_by_due_date(tasks: List[Task]) -> dict:
    """Number of tasks due per local calendar day, for calendar markers."""
    return dict(Counter(local_day(task.due_date) for task in tasks))
