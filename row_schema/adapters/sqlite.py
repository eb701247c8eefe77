"""SQLite adapter using stdlib sqlite3."""

from __future__ import annotations

import sqlite3
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from row_schema.core.config import MappingConfig
from row_schema.core.exceptions import StatementExecutionError


class SqliteDatabase:
    """Database capability over a ``sqlite3.Connection``.

    Rows are returned as ``sqlite3.Row``. Driver errors are re-raised as
    StatementExecutionError.
    """

    def __init__(self, connection: sqlite3.Connection) -> None:
        connection.row_factory = sqlite3.Row
        self._connection = connection

    @classmethod
    def connect(
        cls,
        database: Path | str = ":memory:",
        config: MappingConfig | None = None,
    ) -> SqliteDatabase:
        """Open *database* and enable foreign keys unless the config says otherwise."""
        config = config or MappingConfig()
        connection = sqlite3.connect(str(database))
        if config.enable_foreign_keys:
            connection.execute("PRAGMA foreign_keys = ON")
        return cls(connection)

    @property
    def connection(self) -> sqlite3.Connection:
        return self._connection

    def execute(self, sql: str) -> None:
        """Execute a single statement and commit."""
        try:
            self._connection.execute(sql)
            self._connection.commit()
        except sqlite3.Error as e:
            raise StatementExecutionError(sql, str(e)) from e

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[sqlite3.Row]:
        """Run a query and return all rows."""
        try:
            return self._connection.execute(sql, tuple(params)).fetchall()
        except sqlite3.Error as e:
            raise StatementExecutionError(sql, str(e)) from e

    def close(self) -> None:
        self._connection.close()
