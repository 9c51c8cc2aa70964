"""
Local storage layer for UI preferences.
"""

from tasktide.db.factory import close_adapter, get_adapter, init_adapter, reset_adapter
from tasktide.db.interface import DatabaseAdapter

__all__ = [
    "DatabaseAdapter",
    "get_adapter",
    "init_adapter",
    "close_adapter",
    "reset_adapter",
]
