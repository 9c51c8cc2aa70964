"""
Task Service for Tasktide.

Owns the in-memory task list and applies validated mutations to it through
the aggregation engine. The list is only replaced once a mutation has fully
succeeded, so a failed call never leaves a half-updated list behind.
"""

import logging
from dataclasses import replace
from datetime import date, datetime

from tasktide import engine
from tasktide.models.task import TASK_PRIORITIES, Attachment, Subtask, Task, timestamp_id

logger = logging.getLogger(__name__)


def _coerce_subtasks(subtasks) -> list[Subtask]:
    """Accept Subtask objects, dicts, or plain names."""
    result = []
    for sub in subtasks or []:
        if isinstance(sub, Subtask):
            result.append(replace(sub))
        elif isinstance(sub, dict):
            result.append(Subtask.from_dict(sub))
        else:
            result.append(Subtask(name=str(sub)))
    return result


def _coerce_attachments(attachments) -> list[Attachment]:
    return [a if isinstance(a, Attachment) else Attachment.from_dict(a) for a in attachments or []]


def validate_task(task: Task) -> None:
    """
    Check a task before it is added or saved.

    Raises:
        ValueError: If a required field is missing or invalid
    """
    if not task.title or not task.title.strip():
        raise ValueError("Task title is required")
    if not isinstance(task.due_date, datetime):
        raise ValueError("Task due date is required")
    if task.priority not in TASK_PRIORITIES:
        raise ValueError(f"Invalid priority. Must be one of: {', '.join(TASK_PRIORITIES)}")
    if not task.category or not task.category.strip():
        raise ValueError("Task category is required")
    if not task.subtasks:
        raise ValueError("Add at least one subtask")

    seen = set()
    for sub in task.subtasks:
        name = sub.name.strip() if sub.name else ""
        if not name:
            raise ValueError("Subtask name must not be empty")
        if name in seen:
            raise ValueError(f"Subtask '{name}' already exists")
        seen.add(name)


class TaskService:
    """
    Service for managing the task list.

    Mutation methods return the updated Task, or None when the task (or the
    addressed subtask/attachment) does not exist.
    """

    def __init__(self, tasks=None, config=None):
        """
        Initialize task service.

        Args:
            tasks: Optional initial tasks (e.g. restored from a snapshot)
            config: Optional TasktideConfig. If not provided, uses global config.
        """
        self._tasks: list[Task] = list(tasks or [])
        self._config = config

    @property
    def config(self):
        """Get the configuration."""
        if self._config is None:
            from tasktide.config import get_config
            self._config = get_config()
        return self._config

    @property
    def tasks(self) -> list[Task]:
        """Snapshot of the current task list."""
        return list(self._tasks)

    def _new_id(self) -> str:
        """Timestamp id, bumped while it collides with an existing task."""
        task_id = int(timestamp_id())
        taken = {task.id for task in self._tasks}
        while str(task_id) in taken:
            task_id += 1
        return str(task_id)

    def _commit(self, tasks: list[Task], task_id: str) -> Task | None:
        self._tasks = tasks
        return self.get(task_id)

    def get(self, task_id: str) -> Task | None:
        """Get a task by ID."""
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def create(
        self,
        title: str,
        due_date: datetime,
        priority: str = "Medium",
        category: str = "",
        subtasks=None,
        attachments=None,
    ) -> Task:
        """
        Create a new task.

        Args:
            title: Task title
            due_date: When the task is due
            priority: Priority (High, Medium, Low)
            category: Category label; a new value creates a new category
            subtasks: Subtasks as Subtask objects, dicts or names (at least one)
            attachments: Optional attachments

        Returns:
            Created Task object

        Raises:
            ValueError: If validation fails
        """
        subtask_list = _coerce_subtasks(subtasks)
        task = Task(
            id=self._new_id(),
            title=title.strip() if title else "",
            due_date=due_date,
            priority=priority,
            category=category.strip() if category else "",
            subtasks=subtask_list,
            attachments=_coerce_attachments(attachments),
            completed=engine.compute_progress(subtask_list) == 1.0,
        )
        validate_task(task)

        self._tasks = self._tasks + [task]
        logger.info(f"Created task: {task.id} - {task.title}")
        return task

    def update(
        self,
        task_id: str,
        title: str | None = None,
        due_date: datetime | None = None,
        priority: str | None = None,
        category: str | None = None,
        subtasks=None,
        attachments=None,
    ) -> Task | None:
        """
        Update a task's fields.

        Returns:
            Updated Task or None if not found

        Raises:
            ValueError: If the updated task would be invalid
        """
        current = self.get(task_id)
        if current is None:
            logger.warning(f"Cannot update task {task_id}: not found")
            return None

        changes = {}
        if title is not None:
            changes["title"] = title.strip()
        if due_date is not None:
            changes["due_date"] = due_date
        if priority is not None:
            changes["priority"] = priority
        if category is not None:
            changes["category"] = category.strip()
        if subtasks is not None:
            changes["subtasks"] = _coerce_subtasks(subtasks)
        if attachments is not None:
            changes["attachments"] = _coerce_attachments(attachments)

        if not changes:
            return current

        updated = replace(current, **changes)
        validate_task(updated)
        return self._commit(engine.replace_task(self._tasks, updated), task_id)

    def delete(self, task_id: str) -> bool:
        """Delete a task."""
        if self.get(task_id) is None:
            logger.warning(f"Cannot delete task {task_id}: not found")
            return False
        self._tasks = engine.delete_tasks(self._tasks, [task_id])
        logger.info(f"Deleted task: {task_id}")
        return True

    def delete_many(self, task_ids) -> int:
        """Delete every selected task; returns how many were removed."""
        before = len(self._tasks)
        self._tasks = engine.delete_tasks(self._tasks, task_ids)
        removed = before - len(self._tasks)
        logger.info(f"Deleted {removed} tasks")
        return removed

    def mark_complete(self, task_ids) -> int:
        """Complete every selected task and all of its subtasks."""
        selected = set(task_ids)
        count = sum(1 for task in self._tasks if task.id in selected)
        self._tasks = engine.mark_complete(self._tasks, selected)
        logger.info(f"Marked {count} tasks complete")
        return count

    def toggle_subtask(self, task_id: str, subtask_index: int) -> Task | None:
        """Flip a subtask; returns None if the task or index does not exist."""
        task = self.get(task_id)
        if task is None or not 0 <= subtask_index < len(task.subtasks):
            logger.warning(f"Cannot toggle subtask {subtask_index} of task {task_id}: not found")
            return None
        return self._commit(engine.toggle_subtask(self._tasks, task_id, subtask_index), task_id)

    def add_subtask(self, task_id: str, name: str) -> Task | None:
        task = self.get(task_id)
        if task is None:
            logger.warning(f"Cannot add subtask to task {task_id}: not found")
            return None
        name = (name or "").strip()
        if any(sub.name == name for sub in task.subtasks):
            raise ValueError(f"Subtask '{name}' already exists")
        return self._commit(engine.add_subtask(self._tasks, task_id, name), task_id)

    def remove_subtask(self, task_id: str, subtask_index: int) -> Task | None:
        """
        Remove a subtask.

        Raises:
            ValueError: If it is the task's only subtask
        """
        task = self.get(task_id)
        if task is None or not 0 <= subtask_index < len(task.subtasks):
            logger.warning(f"Cannot remove subtask {subtask_index} of task {task_id}: not found")
            return None
        if len(task.subtasks) == 1:
            raise ValueError("A task must keep at least one subtask")
        return self._commit(engine.remove_subtask(self._tasks, task_id, subtask_index), task_id)

    def add_attachment(self, task_id: str, attachment) -> Task | None:
        if self.get(task_id) is None:
            logger.warning(f"Cannot attach file to task {task_id}: not found")
            return None
        if not isinstance(attachment, Attachment):
            attachment = Attachment.from_dict(attachment)
        return self._commit(engine.add_attachment(self._tasks, task_id, attachment), task_id)

    def remove_attachment(self, task_id: str, index: int) -> Task | None:
        task = self.get(task_id)
        if task is None or not 0 <= index < len(task.attachments):
            logger.warning(f"Cannot remove attachment {index} of task {task_id}: not found")
            return None
        return self._commit(engine.remove_attachment(self._tasks, task_id, index), task_id)

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def categories(self) -> list[str]:
        """Distinct categories, sorted for a selection list."""
        return sorted(engine.compute_categories(self._tasks))

    def list_view(
        self,
        sort_key: str | None = None,
        category: str | None = None,
        completion: str = "all",
    ) -> list[Task]:
        """Filtered and sorted tasks for the flat list view."""
        filtered = engine.filter_tasks(self._tasks, category=category, completion=completion)
        return engine.sort_tasks(filtered, sort_key)

    def sections(
        self,
        now: datetime | None = None,
        category: str | None = None,
        completion: str = "all",
    ) -> engine.DueDateBuckets:
        """Filtered tasks grouped into due today, this week, and upcoming."""
        filtered = engine.filter_tasks(self._tasks, category=category, completion=completion)
        return engine.bucket_by_due_date(filtered, now or datetime.now(), self.config.week_start)

    def overdue(self, now: datetime | None = None) -> list[Task]:
        return engine.overdue_tasks(self._tasks, now or datetime.now())

    def search(self, query: str | None) -> list[Task]:
        """
        Search tasks by title.

        A blank query returns every task or none, per search.empty_query.
        """
        results = engine.search_by_title(self._tasks, query)
        if results is None:
            return self.tasks if self.config.empty_search == "all" else []
        return results

    def for_date(self, day: date) -> list[Task]:
        """Tasks due on a calendar day."""
        return engine.tasks_for_date(self._tasks, day)

    def marked_dates(self) -> dict:
        """Number of tasks due per calendar day."""
        return engine.count_by_due_date(self._tasks)

    def snapshot(self) -> list[dict]:
        """Serialize every task, e.g. for saving between sessions."""
        return [task.to_dict() for task in self._tasks]

    @classmethod
    def from_snapshot(cls, data, config=None) -> "TaskService":
        """Restore a service from snapshot()."""
        return cls(tasks=[Task.from_dict(dict(item)) for item in data], config=config)
