"""
Pytest configuration and fixtures for tasktide tests.
"""

import tempfile
from datetime import datetime
from pathlib import Path

import pytest


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory."""
    config_dir = tmp_path / ".tasktide"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def now():
    """A fixed Wednesday afternoon."""
    return datetime(2024, 5, 15, 14, 30)


@pytest.fixture
def make_task():
    """Factory for tasks with sensible defaults."""
    from tasktide.models.task import Subtask, Task

    def _make(task_id="1", title="Task", due_date=None, priority="Medium",
              category="Work", subtasks=None, completed=False):
        if subtasks is None:
            subtasks = [Subtask(name="step")]
        return Task(
            id=task_id,
            title=title,
            due_date=due_date or datetime(2024, 5, 15, 9, 0),
            priority=priority,
            category=category,
            subtasks=subtasks,
            completed=completed,
        )

    return _make


@pytest.fixture
def sample_task_data():
    """Sample task data for testing."""
    return {
        "title": "Plan trip",
        "due_date": datetime(2024, 5, 17, 12, 0),
        "priority": "High",
        "category": "Personal",
        "subtasks": ["Book flights", "Reserve hotel"],
    }


@pytest.fixture
def task_config():
    """Default configuration, independent of the user's config file."""
    from tasktide.config import TasktideConfig

    return TasktideConfig()


@pytest.fixture
async def sqlite_adapter():
    """Create a temporary SQLite adapter for testing."""
    from tasktide.db.sqlite import SQLiteAdapter

    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        adapter = SQLiteAdapter(str(db_path))
        await adapter.connect()

        yield adapter

        await adapter.close()
