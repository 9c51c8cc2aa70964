"""
Tests for Preference Service.
"""

import sqlite3

import pytest


@pytest.fixture
async def preference_service(sqlite_adapter):
    """Create a PreferenceService with a temporary SQLite database."""
    from tasktide.services.preferences import PreferenceService

    service = PreferenceService(adapter=sqlite_adapter)
    assert await service.ensure_schema() is True
    return service


class BrokenAdapter:
    """Adapter whose every query fails like a locked or corrupt database."""

    placeholder_style = "qmark"

    async def execute(self, query, *args):
        raise sqlite3.OperationalError("database is locked")

    async def fetchval(self, query, *args):
        raise sqlite3.OperationalError("database is locked")


class TestPreferenceValues:
    """Tests for get/set/delete."""

    @pytest.mark.asyncio
    async def test_get_missing_returns_default(self, preference_service):
        """Test unknown values fall back to the default."""
        assert await preference_service.get("sortOption") is None
        assert await preference_service.get("sortOption", "none") == "none"

    @pytest.mark.asyncio
    async def test_set_and_get(self, preference_service):
        """Test storing and overwriting a value."""
        assert await preference_service.set("sortOption", "priority") is True
        assert await preference_service.get("sortOption") == "priority"

        await preference_service.set("sortOption", "progress")
        assert await preference_service.get("sortOption") == "progress"

    @pytest.mark.asyncio
    async def test_delete(self, preference_service):
        """Test removing a value."""
        await preference_service.set("filterCategory", "Work")

        assert await preference_service.delete("filterCategory") is True
        assert await preference_service.get("filterCategory") is None
        assert await preference_service.delete("filterCategory") is False

    @pytest.mark.asyncio
    async def test_unknown_key(self, preference_service):
        """Test that keys outside the fixed set raise error."""
        with pytest.raises(ValueError) as exc:
            await preference_service.set("fontSize", "12")

        assert "Invalid preference key" in str(exc.value)

    @pytest.mark.asyncio
    async def test_json_values(self, preference_service):
        """Test JSON-encoded maps."""
        await preference_service.set_json("expandedTasks", {"1700000000000": True})

        assert await preference_service.get_json("expandedTasks") == {"1700000000000": True}
        assert await preference_service.get("expandedTasks") == '{"1700000000000": true}'

    @pytest.mark.asyncio
    async def test_malformed_json(self, preference_service):
        """Test malformed JSON falls back to the default."""
        await preference_service.set("expandedTasks", "{not json")

        assert await preference_service.get_json("expandedTasks", {}) == {}


class TestPreferenceHelpers:
    """Tests for theme, expanded tasks and view preferences."""

    @pytest.mark.asyncio
    async def test_toggle_theme(self, preference_service):
        """Test theme flips between light and dark."""
        assert await preference_service.toggle_theme() == "dark"
        assert await preference_service.toggle_theme() == "light"
        assert await preference_service.get("theme") == "light"

    @pytest.mark.asyncio
    async def test_set_task_expanded(self, preference_service):
        """Test expanded task state accumulates per task."""
        await preference_service.set_task_expanded("1")
        expanded = await preference_service.set_task_expanded("2", False)

        assert expanded == {"1": True, "2": False}
        assert await preference_service.get_json("expandedTasks") == expanded

    @pytest.mark.asyncio
    async def test_view_preferences_defaults(self, preference_service):
        """Test an empty store loads defaults."""
        from tasktide.services.preferences import ViewPreferences

        assert await preference_service.load_view_preferences() == ViewPreferences()

    @pytest.mark.asyncio
    async def test_view_preferences_round_trip(self, preference_service):
        """Test saving and loading all view preferences."""
        from tasktide.services.preferences import ViewPreferences

        prefs = ViewPreferences(
            sort_option="dueDate",
            filter_category="Work",
            task_filter="incomplete",
            view_mode="simplified",
            expanded_tasks={"42": True},
            theme="dark",
        )

        assert await preference_service.save_view_preferences(prefs) is True
        assert await preference_service.load_view_preferences() == prefs

    @pytest.mark.asyncio
    async def test_invalid_stored_values(self, preference_service):
        """Test unknown stored values load as defaults."""
        await preference_service.set("sortOption", "alphabetical")
        await preference_service.set("taskFilter", "done")
        await preference_service.set("viewMode", "grid")
        await preference_service.set("theme", "solarized")

        prefs = await preference_service.load_view_preferences()

        assert prefs.sort_option == "none"
        assert prefs.task_filter == "all"
        assert prefs.view_mode == "detailed"
        assert prefs.theme == "light"

    @pytest.mark.asyncio
    async def test_loaded_preferences_drive_task_views(self, preference_service, make_task):
        """Test stored preferences, valid or not, can be fed straight to the task list."""
        from tasktide.services.tasks import TaskService

        task_service = TaskService(tasks=[make_task(task_id="a"), make_task(task_id="b")])

        await preference_service.set("sortOption", "dueDate")
        await preference_service.set("taskFilter", "done")
        prefs = await preference_service.load_view_preferences()

        result = task_service.list_view(prefs.sort_option, prefs.filter_category, prefs.task_filter)

        assert prefs.sort_option == "dueDate"
        assert prefs.task_filter == "all"
        assert len(result) == 2


class TestPreferenceStorageFailures:
    """Tests for degraded behaviour when storage fails."""

    @pytest.mark.asyncio
    async def test_failures_degrade(self, caplog):
        """Test storage errors are logged and defaults returned."""
        from tasktide.services.preferences import PreferenceService, ViewPreferences

        service = PreferenceService(adapter=BrokenAdapter())

        assert await service.ensure_schema() is False
        assert await service.get("theme", "light") == "light"
        assert await service.set("theme", "dark") is False
        assert await service.delete("theme") is False
        assert await service.load_view_preferences() == ViewPreferences()
        assert await service.save_view_preferences(ViewPreferences()) is False
        assert "database is locked" in caplog.text
