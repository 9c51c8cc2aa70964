"""
Abstract database adapter interface.

The preference store talks to local storage only through this interface.
"""

import re
from abc import ABC, abstractmethod
from typing import Any


class DatabaseAdapter(ABC):
    """
    Abstract base class for database adapters.

    Implementations must support:
    - Connection lifecycle (connect, close)
    - Basic queries (execute, fetch, fetchrow, fetchval)
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize connection."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close connection."""
        pass

    @abstractmethod
    async def execute(self, query: str, *args) -> str:
        """
        Execute a query and return status.

        Args:
            query: SQL query with $1, $2 or ? placeholders
            *args: Query parameters

        Returns:
            Status string (e.g., "INSERT 0 1")
        """
        pass

    @abstractmethod
    async def fetch(self, query: str, *args) -> list[dict]:
        """
        Fetch multiple rows as list of dicts.

        Args:
            query: SQL SELECT query
            *args: Query parameters

        Returns:
            List of row dicts
        """
        pass

    @abstractmethod
    async def fetchrow(self, query: str, *args) -> dict | None:
        """
        Fetch single row as dict.

        Returns:
            Row dict or None if no results
        """
        pass

    @abstractmethod
    async def fetchval(self, query: str, *args) -> Any:
        """
        Fetch single value.

        Returns:
            The value or None
        """
        pass

    @property
    @abstractmethod
    def placeholder_style(self) -> str:
        """
        Return the placeholder style for this adapter.

        Returns:
            "dollar" ($1, $2, ...) or "qmark" (?, ?, ...)
        """
        pass

    def format_query(self, query: str) -> str:
        """
        Convert query placeholders to the adapter's style.

        Input uses $1, $2 style; qmark adapters get ? instead.
        """
        if self.placeholder_style == "dollar":
            return query
        return re.sub(r'\$\d+', '?', query)
