"""Schema layer - CREATE / DROP statement generation."""

from __future__ import annotations

from row_schema.schema.ddl import create_statements, drop_statements

__all__ = [
    "create_statements",
    "drop_statements",
]
