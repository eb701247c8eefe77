"""Schema statement generation.

Builds the SQLite statements creating and dropping an entity's table and
indexes. Every identifier goes through ``quote_identifier``.

Statement layout::

    CREATE TABLE t (a INTEGER PRIMARY KEY AUTOINCREMENT, b TEXT NOT NULL UNIQUE,
                    UNIQUE(c, d), FOREIGN KEY (e) REFERENCES u ON DELETE CASCADE)
    CREATE UNIQUE INDEX ix ON t (c, d)
    DROP INDEX IF EXISTS ix
    DROP TABLE IF EXISTS t
"""

from __future__ import annotations

from collections.abc import Iterable

from row_schema.core.enums import ForeignAction, StorageType
from row_schema.core.exceptions import ConfigurationError, UnsupportedStorageTypeError
from row_schema.core.sanitizer import quote_identifier
from row_schema.mapping.descriptor import (
    EntityDescriptor,
    FieldDescriptor,
    IndexConstraintDescriptor,
)


def create_statements(descriptor: EntityDescriptor) -> list[str]:
    """Return the CREATE TABLE statement followed by one CREATE INDEX per index.

    Raises:
        UnsupportedStorageTypeError: If a codec reports an unknown storage type.
        ConfigurationError: If a default literal is rejected by its codec.
    """
    # https://www.sqlite.org/lang_createtable.html
    parts = [_column_definition(descriptor, fd) for fd in descriptor.fields]
    parts.extend(_table_constraints(descriptor))
    statements = [f"CREATE TABLE {quote_identifier(descriptor.name)} ({', '.join(parts)})"]
    statements.extend(_index_statement(descriptor, ix) for ix in descriptor.indexes)
    return statements


def drop_statements(table_name: str, live_index_names: Iterable[str]) -> list[str]:
    """Return one DROP INDEX per live index, then DROP TABLE.

    *live_index_names* must already exclude indexes created implicitly by
    the engine. Index drops are sorted by name.
    """
    # https://www.sqlite.org/lang_droptable.html
    statements = [
        f"DROP INDEX IF EXISTS {quote_identifier(name)}" for name in sorted(set(live_index_names))
    ]
    statements.append(f"DROP TABLE IF EXISTS {quote_identifier(table_name)}")
    return statements


def _storage_type(descriptor: EntityDescriptor, fd: FieldDescriptor) -> StorageType:
    reported = fd.codec.storage_type
    try:
        return StorageType(reported)
    except ValueError:
        raise UnsupportedStorageTypeError(reported, descriptor.name, fd.column) from None


def _column_definition(descriptor: EntityDescriptor, fd: FieldDescriptor) -> str:
    tokens = [quote_identifier(fd.column), _storage_type(descriptor, fd).value]

    if fd.primary_key:
        tokens.append("PRIMARY KEY")
        if fd.generated_id:
            tokens.append("AUTOINCREMENT")
        return " ".join(tokens)

    tokens.append("NULL" if fd.nullable else "NOT NULL")
    if fd.unique:
        tokens.append("UNIQUE")
    if fd.default is not None:
        try:
            literal = fd.codec.to_sql_literal(fd.default)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                descriptor.name, fd.attribute, f"invalid default {fd.default!r}: {e}"
            ) from e
        tokens.append(f"DEFAULT {literal}")
    return " ".join(tokens)


def _table_constraints(descriptor: EntityDescriptor) -> list[str]:
    constraints = [
        f"UNIQUE({_column_list(ix)})"
        for ix in descriptor.indexes
        if ix.unique and not ix.single_field
    ]
    for fd in descriptor.fields:
        if not fd.is_foreign:
            continue
        target = fd.foreign_key.entity_name  # type: ignore[union-attr]
        clause = (
            f"FOREIGN KEY ({quote_identifier(fd.column)}) REFERENCES {quote_identifier(target)}"
        )
        if fd.on_delete is not ForeignAction.NO_ACTION:
            clause += f" ON DELETE {fd.on_delete.sql}"
        if fd.on_update is not ForeignAction.NO_ACTION:
            clause += f" ON UPDATE {fd.on_update.sql}"
        constraints.append(clause)
    return constraints


def _index_statement(descriptor: EntityDescriptor, ix: IndexConstraintDescriptor) -> str:
    # https://www.sqlite.org/lang_createindex.html
    unique = "UNIQUE " if ix.unique else ""
    return (
        f"CREATE {unique}INDEX {quote_identifier(ix.name)} "
        f"ON {quote_identifier(descriptor.name)} ({_column_list(ix)})"
    )


def _column_list(ix: IndexConstraintDescriptor) -> str:
    return ", ".join(quote_identifier(column) for column in ix.columns)
