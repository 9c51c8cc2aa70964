"""
Preference Service for Tasktide.

Key-value storage for UI preferences (sort order, filters, view mode,
expanded tasks, theme) in the local SQLite database. Storage failures are
logged and reads fall back to defaults; they never reach the task list.
"""

import json
import logging
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from tasktide.db import get_adapter
from tasktide.engine import COMPLETION_FILTERS, SORT_KEY_ALIASES, SORT_KEYS

logger = logging.getLogger(__name__)


# Fixed preference keys
SORT_OPTION = "sortOption"
FILTER_CATEGORY = "filterCategory"
TASK_FILTER = "taskFilter"
VIEW_MODE = "viewMode"
EXPANDED_TASKS = "expandedTasks"
THEME = "theme"

PREFERENCE_KEYS = (SORT_OPTION, FILTER_CATEGORY, TASK_FILTER, VIEW_MODE, EXPANDED_TASKS, THEME)

# Valid values for the enumerated preferences
VIEW_MODES = ("detailed", "simplified")
THEMES = ("light", "dark")

# Errors that degrade a preference read/write instead of propagating
STORAGE_ERRORS = (sqlite3.Error, OSError)


@dataclass
class ViewPreferences:
    """Home screen preferences as one object."""

    sort_option: str = "none"
    filter_category: str = ""
    task_filter: str = "all"
    view_mode: str = "detailed"
    expanded_tasks: dict = field(default_factory=dict)
    theme: str = "light"


class PreferenceService:
    """
    Service for reading and writing UI preferences.

    Values are stored as strings; maps are stored JSON-encoded.
    """

    def __init__(self, adapter=None):
        """
        Initialize preference service.

        Args:
            adapter: Optional DatabaseAdapter. If not provided, uses global adapter.
        """
        self._adapter = adapter

    @property
    def adapter(self):
        """Get the database adapter."""
        if self._adapter is None:
            self._adapter = get_adapter()
        return self._adapter

    @staticmethod
    def _check_key(key: str) -> None:
        if key not in PREFERENCE_KEYS:
            raise ValueError(f"Invalid preference key. Must be one of: {', '.join(PREFERENCE_KEYS)}")

    async def ensure_schema(self) -> bool:
        """Create the preferences table if needed. Returns False if storage is unavailable."""
        try:
            await self.adapter.execute(
                """
                CREATE TABLE IF NOT EXISTS preferences (
                    key TEXT PRIMARY KEY,
                    value TEXT,
                    updated_at TEXT
                )
                """
            )
        except STORAGE_ERRORS as e:
            logger.warning(f"Preference storage unavailable: {e}")
            return False
        return True

    async def get(self, key: str, default: str | None = None) -> str | None:
        """Get a stored value, or default if missing or unreadable."""
        self._check_key(key)
        try:
            value = await self.adapter.fetchval(
                "SELECT value FROM preferences WHERE key = $1", key
            )
        except STORAGE_ERRORS as e:
            logger.warning(f"Could not read preference '{key}': {e}")
            return default
        return default if value is None else value

    async def set(self, key: str, value: str) -> bool:
        """
        Store a value.

        Returns:
            True if saved, False if storage failed
        """
        self._check_key(key)
        try:
            await self.adapter.execute(
                """
                INSERT INTO preferences (key, value, updated_at)
                VALUES ($1, $2, $3)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                key, str(value), datetime.now().isoformat(),
            )
        except STORAGE_ERRORS as e:
            logger.warning(f"Could not save preference '{key}': {e}")
            return False
        return True

    async def delete(self, key: str) -> bool:
        """Remove a stored value."""
        self._check_key(key)
        try:
            result = await self.adapter.execute("DELETE FROM preferences WHERE key = $1", key)
        except STORAGE_ERRORS as e:
            logger.warning(f"Could not delete preference '{key}': {e}")
            return False
        return result != "DELETE 0"

    async def get_json(self, key: str, default: Any = None) -> Any:
        """Get a JSON-encoded value; bad JSON falls back to default."""
        raw = await self.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring malformed JSON in preference '{key}': {e}")
            return default

    async def set_json(self, key: str, value: Any) -> bool:
        return await self.set(key, json.dumps(value))

    async def toggle_theme(self) -> str:
        """Switch between light and dark and return the new theme."""
        current = await self.get(THEME, "light")
        new_theme = "dark" if current == "light" else "light"
        await self.set(THEME, new_theme)
        return new_theme

    async def set_task_expanded(self, task_id: str, expanded: bool = True) -> dict:
        """Record whether a task card is expanded; returns the full map."""
        expanded_tasks = await self.get_json(EXPANDED_TASKS, {})
        if not isinstance(expanded_tasks, dict):
            expanded_tasks = {}
        expanded_tasks[str(task_id)] = expanded
        await self.set_json(EXPANDED_TASKS, expanded_tasks)
        return expanded_tasks

    async def load_view_preferences(self) -> ViewPreferences:
        """Load every home screen preference, filling in defaults."""
        defaults = ViewPreferences()

        sort_option = await self.get(SORT_OPTION, defaults.sort_option)
        if sort_option not in SORT_KEYS and sort_option not in SORT_KEY_ALIASES:
            sort_option = defaults.sort_option
        task_filter = await self.get(TASK_FILTER, defaults.task_filter)
        view_mode = await self.get(VIEW_MODE, defaults.view_mode)
        theme = await self.get(THEME, defaults.theme)
        expanded = await self.get_json(EXPANDED_TASKS, {})

        return ViewPreferences(
            sort_option=sort_option,
            filter_category=await self.get(FILTER_CATEGORY, defaults.filter_category),
            task_filter=task_filter if task_filter in COMPLETION_FILTERS else defaults.task_filter,
            view_mode=view_mode if view_mode in VIEW_MODES else defaults.view_mode,
            expanded_tasks=expanded if isinstance(expanded, dict) else {},
            theme=theme if theme in THEMES else defaults.theme,
        )

    async def save_view_preferences(self, prefs: ViewPreferences) -> bool:
        """Save every home screen preference. Returns False if any write failed."""
        results = [
            await self.set(SORT_OPTION, prefs.sort_option),
            await self.set(FILTER_CATEGORY, prefs.filter_category),
            await self.set(TASK_FILTER, prefs.task_filter),
            await self.set(VIEW_MODE, prefs.view_mode),
            await self.set_json(EXPANDED_TASKS, prefs.expanded_tasks),
            await self.set(THEME, prefs.theme),
        ]
        return all(results)
