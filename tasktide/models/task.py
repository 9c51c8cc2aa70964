"""
Task model for Tasktide.

Tasks are the core work items: a title, a due date, a priority, a category,
an ordered list of subtasks and optional file attachments.
"""

import json
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List


# Valid priority values, highest first
TASK_PRIORITIES = ("High", "Medium", "Low")

# Sort rank per priority (lower sorts first)
PRIORITY_RANK = {"High": 1, "Medium": 2, "Low": 3}


def timestamp_id() -> str:
    """Build a task id from the current time in milliseconds."""
    return str(int(time.time() * 1000))


def _parse_datetime(value, field_name: str) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            pass
    raise ValueError(f"Invalid {field_name}: {value!r} is not an ISO-8601 timestamp")


@dataclass
class Subtask:
    """A named, independently completable item within a task."""

    name: str
    completed: bool = False

    def to_dict(self) -> dict:
        return {"name": self.name, "completed": self.completed}

    @classmethod
    def from_dict(cls, data: dict) -> "Subtask":
        return cls(name=data.get("name", ""), completed=bool(data.get("completed", False)))


@dataclass
class Attachment:
    """
    A file reference attached to a task.

    The uri is an opaque location handle owned by the platform file picker;
    it is stored and returned without inspection.
    """

    name: str
    uri: str
    mime_type: Optional[str] = None
    size: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "uri": self.uri,
            "mime_type": self.mime_type,
            "size": self.size,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Attachment":
        return cls(
            name=data.get("name", ""),
            uri=data.get("uri", ""),
            mime_type=data.get("mime_type", data.get("mimeType")),
            size=data.get("size"),
        )


@dataclass
class Task:
    """
    A task or work item.

    Attributes:
        title: Task title
        due_date: When the task is due (local time when naive)
        id: Unique identifier derived from the creation timestamp
        priority: Priority level (High, Medium, Low)
        category: Free-form category label
        subtasks: Ordered subtasks
        attachments: Ordered file attachments
        completed: True when every subtask is completed
        created_at: When the task was created
    """

    title: str
    due_date: datetime
    id: str = field(default_factory=timestamp_id)
    priority: str = "Medium"
    category: str = ""
    subtasks: List[Subtask] = field(default_factory=list)
    attachments: List[Attachment] = field(default_factory=list)
    completed: bool = False
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if self.created_at is None:
            self.created_at = datetime.now()

    @property
    def progress(self) -> float:
        """Fraction of subtasks completed, 0.0 when there are none."""
        if not isinstance(self.subtasks, list):
            raise TypeError(
                f"Task {self.id} has malformed subtasks: expected a list, "
                f"got {type(self.subtasks).__name__}"
            )
        if not self.subtasks:
            return 0.0
        done = sum(1 for sub in self.subtasks if sub.completed)
        return done / len(self.subtasks)

    @property
    def completed_subtasks(self) -> int:
        return sum(1 for sub in self.subtasks if sub.completed)

    @property
    def percentage(self) -> int:
        """Progress as a rounded percentage for display."""
        return round(self.progress * 100)

    def to_dict(self) -> dict:
        """Convert to dictionary for storage/serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "priority": self.priority,
            "category": self.category,
            "subtasks": [sub.to_dict() for sub in self.subtasks],
            "attachments": [att.to_dict() for att in self.attachments],
            "completed": self.completed,
            "progress": self.progress,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """Create Task from dictionary (e.g., a stored snapshot)."""
        due_date = _parse_datetime(data.get("due_date"), "due_date")
        if due_date is None:
            raise ValueError(f"Task {data.get('id')!r} has no due_date")

        # Lists may arrive JSON-encoded from key-value storage
        subtasks = data.get("subtasks") or []
        if isinstance(subtasks, str):
            subtasks = json.loads(subtasks)
        attachments = data.get("attachments") or []
        if isinstance(attachments, str):
            attachments = json.loads(attachments)

        task_id = data.get("id")
        return cls(
            id=str(task_id) if task_id is not None else timestamp_id(),
            title=data.get("title", ""),
            due_date=due_date,
            priority=data.get("priority", "Medium"),
            category=data.get("category", ""),
            subtasks=[s if isinstance(s, Subtask) else Subtask.from_dict(s) for s in subtasks],
            attachments=[
                a if isinstance(a, Attachment) else Attachment.from_dict(a) for a in attachments
            ],
            completed=bool(data.get("completed", False)),
            created_at=_parse_datetime(data.get("created_at"), "created_at"),
        )
