"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from row_schema.adapters.sqlite import SqliteDatabase
from row_schema.core.engine import SchemaEngine


@pytest.fixture
def engine() -> SchemaEngine:
    """Engine with its own codec registry and descriptor cache."""
    return SchemaEngine()


@pytest.fixture
def db() -> Iterator[SqliteDatabase]:
    """SQLite in-memory database with foreign keys enabled."""
    database = SqliteDatabase.connect(":memory:")
    yield database
    database.close()
