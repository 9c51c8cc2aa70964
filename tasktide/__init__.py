"""
Tasktide Core Library

To-do list core: tasks with subtasks, progress tracking, due-date views,
UI preferences and a Pomodoro timer.
"""

__version__ = "0.1.0"

from tasktide.config import TasktideConfig, load_config
from tasktide.db import DatabaseAdapter, get_adapter

__all__ = [
    "load_config",
    "TasktideConfig",
    "get_adapter",
    "DatabaseAdapter",
]
