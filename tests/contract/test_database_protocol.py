"""Contract tests for Database protocol compliance."""

from __future__ import annotations

import sqlite3

import pytest

from row_schema.adapters.protocol import Database
from row_schema.adapters.sqlite import SqliteDatabase
from row_schema.core.config import MappingConfig
from row_schema.core.exceptions import DatabaseError, StatementExecutionError


class TestSqliteDatabaseProtocol:
    def test_implements_protocol(self, db: SqliteDatabase) -> None:
        assert isinstance(db, Database)

    def test_rows_expose_columns_by_name(self, db: SqliteDatabase) -> None:
        rows = db.query("SELECT 1 AS val, ? AS other", ("x",))
        assert rows[0]["val"] == 1
        assert list(rows[0].keys()) == ["val", "other"]

    def test_execute_then_query(self, db: SqliteDatabase) -> None:
        db.execute("CREATE TABLE t (a INTEGER)")
        db.connection.execute("INSERT INTO t (a) VALUES (5)")
        assert [row["a"] for row in db.query("SELECT a FROM t")] == [5]

    def test_foreign_keys_enabled_by_default(self, db: SqliteDatabase) -> None:
        assert db.query("PRAGMA foreign_keys")[0][0] == 1

    def test_foreign_keys_can_be_left_off(self) -> None:
        database = SqliteDatabase.connect(config=MappingConfig(enable_foreign_keys=False))
        try:
            assert database.query("PRAGMA foreign_keys")[0][0] == 0
        finally:
            database.close()

    def test_wraps_existing_connection(self) -> None:
        connection = sqlite3.connect(":memory:")
        database = SqliteDatabase(connection)
        try:
            assert database.connection is connection
            assert connection.row_factory is sqlite3.Row
        finally:
            database.close()

    def test_execute_error(self, db: SqliteDatabase) -> None:
        with pytest.raises(StatementExecutionError, match="NOT VALID SQL") as exc_info:
            db.execute("NOT VALID SQL")
        assert exc_info.value.sql == "NOT VALID SQL"
        assert isinstance(exc_info.value, DatabaseError)

    def test_query_error(self, db: SqliteDatabase) -> None:
        with pytest.raises(StatementExecutionError):
            db.query("SELECT * FROM missing")
