"""Database capability protocol.

The schema engine only needs to run DDL statements and one introspection
query; connection lifecycle belongs to the caller.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Database(Protocol):
    """Database capability protocol."""

    def execute(self, sql: str) -> None:
        """Execute a single statement that returns no rows."""
        ...

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[Any]:
        """Run a query with positional parameters and return its rows.

        Rows must expose their columns by name (``keys()`` and ``row[name]``).
        """
        ...
