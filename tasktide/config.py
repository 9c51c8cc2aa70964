"""
Tasktide Configuration

Loads settings from ~/.tasktide/config.yaml with environment variable overrides.
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional, Dict
import os
import logging

import yaml

from tasktide.engine import WEEK_STARTS
from tasktide.models.timer import DEFAULT_PRESETS

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".tasktide"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

# What a blank search query shows: every task, or nothing
EMPTY_SEARCH_MODES = ("all", "none")


@dataclass
class DatabaseConfig:
    """Local preference database settings."""

    type: str = "sqlite"
    sqlite_path: str = "~/.tasktide/tasktide.db"


@dataclass
class CalendarConfig:
    """Calendar settings."""

    week_start: str = "sunday"  # "sunday" or "monday"


@dataclass
class SearchConfig:
    """Search settings."""

    empty_query: str = "all"  # "all" or "none"


@dataclass
class TimerConfig:
    """Pomodoro timer preset lengths in minutes."""

    presets: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_PRESETS))
    custom_minutes: int = 25


@dataclass
class TasktideConfig:
    """
    Complete Tasktide configuration.

    Loaded from ~/.tasktide/config.yaml with environment variable overrides.
    """

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    calendar: CalendarConfig = field(default_factory=CalendarConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    timer: TimerConfig = field(default_factory=TimerConfig)

    # Convenience accessors
    @property
    def week_start(self) -> str:
        return self.calendar.week_start

    @property
    def empty_search(self) -> str:
        return self.search.empty_query

    def to_dict(self) -> dict:
        """Convert to dictionary for display."""
        return asdict(self)


def _choice(value, allowed, default: str, name: str) -> str:
    """Return value lower-cased if allowed, else warn and use default."""
    if value is None:
        return default
    value = str(value).strip().lower()
    if value not in allowed:
        logger.warning(f"Invalid {name} '{value}', using '{default}'. Must be one of: {', '.join(allowed)}")
        return default
    return value


def _parse_database_config(data: dict) -> DatabaseConfig:
    """Parse database configuration from YAML data."""
    db_data = data.get("database", {})
    sqlite_config = db_data.get("sqlite", {})

    return DatabaseConfig(
        type=db_data.get("type", "sqlite"),
        sqlite_path=sqlite_config.get("path", "~/.tasktide/tasktide.db"),
    )


def _parse_calendar_config(data: dict) -> CalendarConfig:
    """Parse calendar configuration from YAML data."""
    calendar_data = data.get("calendar", {})

    return CalendarConfig(
        week_start=_choice(calendar_data.get("week_start"), tuple(WEEK_STARTS), "sunday", "calendar.week_start"),
    )


def _parse_search_config(data: dict) -> SearchConfig:
    """Parse search configuration from YAML data."""
    search_data = data.get("search", {})

    return SearchConfig(
        empty_query=_choice(search_data.get("empty_query"), EMPTY_SEARCH_MODES, "all", "search.empty_query"),
    )


def _parse_timer_config(data: dict) -> TimerConfig:
    """Parse timer configuration from YAML data."""
    timer_data = data.get("timer", {})

    presets = dict(DEFAULT_PRESETS)
    for name, minutes in (timer_data.get("presets") or {}).items():
        if name not in DEFAULT_PRESETS:
            logger.warning(f"Ignoring unknown timer preset '{name}'")
            continue
        if not isinstance(minutes, int) or minutes <= 0:
            logger.warning(f"Ignoring invalid length for timer preset '{name}': {minutes!r}")
            continue
        presets[name] = minutes

    custom_minutes = timer_data.get("custom_minutes", 25)
    if not isinstance(custom_minutes, int) or custom_minutes <= 0:
        logger.warning(f"Invalid timer.custom_minutes {custom_minutes!r}, using 25")
        custom_minutes = 25

    return TimerConfig(presets=presets, custom_minutes=custom_minutes)


def load_config(config_path: Optional[Path] = None) -> TasktideConfig:
    """
    Load configuration from file with environment variable overrides.

    Args:
        config_path: Optional path to config file. Defaults to ~/.tasktide/config.yaml

    Returns:
        TasktideConfig instance
    """
    config_file = config_path or CONFIG_FILE
    config = TasktideConfig()

    if config_file.exists():
        try:
            with open(config_file, 'r') as f:
                data = yaml.safe_load(f) or {}

            config.database = _parse_database_config(data)
            config.calendar = _parse_calendar_config(data)
            config.search = _parse_search_config(data)
            config.timer = _parse_timer_config(data)

        except yaml.YAMLError as e:
            logger.warning(f"Could not parse config file at {config_file}: {e}")
        except (OSError, AttributeError) as e:
            logger.warning(f"Unexpected error loading config from {config_file}: {e}")

    # Environment variable overrides
    if os.environ.get("TASKTIDE_DB_PATH"):
        config.database.type = "sqlite"
        config.database.sqlite_path = os.environ["TASKTIDE_DB_PATH"]

    if os.environ.get("TASKTIDE_WEEK_START"):
        config.calendar.week_start = _choice(
            os.environ["TASKTIDE_WEEK_START"], tuple(WEEK_STARTS), config.calendar.week_start, "TASKTIDE_WEEK_START"
        )

    if os.environ.get("TASKTIDE_EMPTY_SEARCH"):
        config.search.empty_query = _choice(
            os.environ["TASKTIDE_EMPTY_SEARCH"], EMPTY_SEARCH_MODES, config.search.empty_query, "TASKTIDE_EMPTY_SEARCH"
        )

    return config


def save_config(config: TasktideConfig, config_path: Optional[Path] = None) -> None:
    """
    Save configuration to file.

    Args:
        config: TasktideConfig instance to save
        config_path: Optional path to config file. Defaults to ~/.tasktide/config.yaml
    """
    config_file = config_path or CONFIG_FILE

    # Ensure config directory exists
    config_file.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "database": {
            "type": config.database.type,
            "sqlite": {"path": config.database.sqlite_path},
        },
        "calendar": {"week_start": config.calendar.week_start},
        "search": {"empty_query": config.search.empty_query},
        "timer": {
            "presets": dict(config.timer.presets),
            "custom_minutes": config.timer.custom_minutes,
        },
    }

    with open(config_file, 'w') as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    logger.info(f"Configuration saved to {config_file}")


# Cached config instance
_config: Optional[TasktideConfig] = None


def get_config() -> TasktideConfig:
    """Get cached config instance, loading if needed."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> TasktideConfig:
    """Force reload config from file."""
    global _config
    _config = load_config()
    return _config
