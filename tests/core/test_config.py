"""
Tests for tasktide configuration.
"""

import pytest
from pathlib import Path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the caller's environment out of config tests."""
    for name in ("TASKTIDE_DB_PATH", "TASKTIDE_WEEK_START", "TASKTIDE_EMPTY_SEARCH"):
        monkeypatch.delenv(name, raising=False)


def test_default_config():
    """Test default configuration values."""
    from tasktide.config import TasktideConfig

    config = TasktideConfig()

    assert config.database.type == "sqlite"
    assert config.database.sqlite_path == "~/.tasktide/tasktide.db"
    assert config.week_start == "sunday"
    assert config.empty_search == "all"
    assert config.timer.presets == {"pomodoro": 25, "short_break": 5, "long_break": 15}


def test_load_config_without_file():
    """Test loading config when no file exists."""
    from tasktide.config import load_config

    config = load_config(Path("/nonexistent/config.yaml"))

    assert config.database.type == "sqlite"
    assert config.week_start == "sunday"


def test_load_config_from_yaml(temp_config_dir):
    """Test loading settings from a YAML file."""
    from tasktide.config import load_config

    config_file = temp_config_dir / "config.yaml"
    config_file.write_text(
        "database:\n"
        "  sqlite:\n"
        "    path: /tmp/prefs.db\n"
        "calendar:\n"
        "  week_start: Monday\n"
        "search:\n"
        "  empty_query: none\n"
        "timer:\n"
        "  presets:\n"
        "    pomodoro: 50\n"
        "    short_break: -1\n"
        "    siesta: 90\n"
        "  custom_minutes: 10\n"
    )

    config = load_config(config_file)

    assert config.database.sqlite_path == "/tmp/prefs.db"
    assert config.week_start == "monday"
    assert config.empty_search == "none"
    assert config.timer.presets == {"pomodoro": 50, "short_break": 5, "long_break": 15}
    assert config.timer.custom_minutes == 10


def test_invalid_values_fall_back(temp_config_dir, caplog):
    """Test invalid choices log a warning and keep defaults."""
    from tasktide.config import load_config

    config_file = temp_config_dir / "config.yaml"
    config_file.write_text("calendar:\n  week_start: friday\n")

    config = load_config(config_file)

    assert config.week_start == "sunday"
    assert "calendar.week_start" in caplog.text


def test_malformed_yaml(temp_config_dir):
    """Test an unparseable file yields defaults."""
    from tasktide.config import load_config

    config_file = temp_config_dir / "config.yaml"
    config_file.write_text("calendar: [unclosed\n")

    config = load_config(config_file)

    assert config.week_start == "sunday"


def test_load_config_with_env_override(monkeypatch):
    """Test environment variable overrides."""
    from tasktide.config import load_config

    monkeypatch.setenv("TASKTIDE_DB_PATH", "/tmp/tasktide-test.db")
    monkeypatch.setenv("TASKTIDE_WEEK_START", "monday")
    monkeypatch.setenv("TASKTIDE_EMPTY_SEARCH", "none")

    config = load_config(Path("/nonexistent/config.yaml"))

    assert config.database.sqlite_path == "/tmp/tasktide-test.db"
    assert config.week_start == "monday"
    assert config.empty_search == "none"


def test_save_and_reload(temp_config_dir):
    """Test saved configuration loads back unchanged."""
    from tasktide.config import TasktideConfig, load_config, save_config

    config = TasktideConfig()
    config.calendar.week_start = "monday"
    config.timer.presets["long_break"] = 20
    config_file = temp_config_dir / "nested" / "config.yaml"

    save_config(config, config_file)
    loaded = load_config(config_file)

    assert loaded.to_dict() == config.to_dict()


def test_get_config_caches_until_reload(temp_config_dir, monkeypatch):
    """Test the cached config only picks up file changes after reload_config."""
    from tasktide import config as config_module

    config_file = temp_config_dir / "config.yaml"
    config_file.write_text("calendar:\n  week_start: sunday\n")
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_file)
    monkeypatch.setattr(config_module, "_config", None)

    first = config_module.get_config()
    assert first.week_start == "sunday"

    config_file.write_text("calendar:\n  week_start: monday\n")
    assert config_module.get_config() is first
    assert config_module.get_config().week_start == "sunday"

    reloaded = config_module.reload_config()
    assert reloaded.week_start == "monday"
    assert config_module.get_config() is reloaded
