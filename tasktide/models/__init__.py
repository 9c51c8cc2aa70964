"""
Core data models for Tasktide.
"""

from tasktide.models.task import Attachment, Subtask, Task
from tasktide.models.timer import PomodoroTimer

__all__ = [
    "Task",
    "Subtask",
    "Attachment",
    "PomodoroTimer",
]
