"""
Database adapter factory.

Creates the appropriate adapter based on configuration.
"""

import logging

from tasktide.db.interface import DatabaseAdapter

logger = logging.getLogger(__name__)

# Global adapter instance (singleton pattern)
_adapter: DatabaseAdapter | None = None


def get_adapter(config=None) -> DatabaseAdapter:
    """
    Get or create the database adapter based on configuration.

    Uses singleton pattern - returns same adapter instance on subsequent calls.

    Args:
        config: Optional TasktideConfig. If not provided, loads from default location.

    Returns:
        DatabaseAdapter instance

    Raises:
        ValueError: If database configuration is invalid
    """
    global _adapter

    if _adapter is not None:
        return _adapter

    if config is None:
        from tasktide.config import load_config
        config = load_config()

    db_type = config.database.type.lower()

    if db_type == "sqlite":
        from tasktide.db.sqlite import SQLiteAdapter

        path = config.database.sqlite_path
        _adapter = SQLiteAdapter(path)
        logger.info(f"Using SQLite adapter: {path}")

    else:
        raise ValueError(
            f"Unknown database type: {db_type}. "
            "Only 'sqlite' is supported."
        )

    return _adapter


async def init_adapter(config=None) -> DatabaseAdapter:
    """
    Initialize the database adapter and connect.

    Args:
        config: Optional TasktideConfig

    Returns:
        Connected DatabaseAdapter instance
    """
    adapter = get_adapter(config)
    await adapter.connect()
    return adapter


async def close_adapter() -> None:
    """Close the global adapter connection."""
    global _adapter

    if _adapter is not None:
        await _adapter.close()
        _adapter = None


def reset_adapter() -> None:
    """
    Reset the global adapter instance.

    Useful for testing or when configuration changes.
    """
    global _adapter
    _adapter = None
