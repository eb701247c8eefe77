"""RowSchema exception hierarchy.

Every failure is raised as a RowSchema-specific exception carrying the
entity and field/column it concerns. Nothing is recovered locally.
"""

from __future__ import annotations

from typing import Any


def _type_name(tp: Any) -> str:
    return getattr(tp, "__qualname__", None) or getattr(tp, "__name__", None) or repr(tp)


class RowSchemaError(Exception):
    """Base exception for all RowSchema errors."""


# --- Configuration ---


class ConfigurationError(RowSchemaError):
    """Raised when entity metadata is missing, dangling or contradictory."""

    def __init__(self, entity_name: str, field_name: str | None, detail: str) -> None:
        self.entity_name = entity_name
        self.field_name = field_name
        where = f"entity '{entity_name}'"
        if field_name is not None:
            where += f" field '{field_name}'"
        super().__init__(f"Invalid configuration for {where}: {detail}")


class NoCodecError(RowSchemaError):
    """Raised when no codec can be resolved for a declared type."""

    def __init__(self, declared_type: Any) -> None:
        self.declared_type = declared_type
        super().__init__(f"No codec found for type {_type_name(declared_type)}")


class UnsupportedKindError(RowSchemaError):
    """Raised when a primitive type has no nullable wrapper mapping."""

    def __init__(self, declared_type: Any) -> None:
        self.declared_type = declared_type
        super().__init__(
            f"Unsupported primitive to wrapper conversion: {_type_name(declared_type)}"
        )


class IdentifierError(RowSchemaError):
    """Raised when a table, column or index name cannot be escaped."""

    def __init__(self, identifier: str, detail: str) -> None:
        self.identifier = identifier
        super().__init__(f"Invalid SQL identifier {identifier!r}: {detail}")


# --- Mapping ---


class MappingError(RowSchemaError):
    """Base for row conversion errors."""


class AccessError(MappingError):
    """Raised when reading or writing a record attribute is rejected."""

    def __init__(self, entity_name: str, attribute: str, detail: str) -> None:
        self.entity_name = entity_name
        self.attribute = attribute
        super().__init__(
            f"Couldn't access field '{attribute}' of entity '{entity_name}': {detail}"
        )


class InstantiationError(MappingError):
    """Raised when a record type cannot be default-constructed."""

    def __init__(self, type_name: str, detail: str, entity_name: str | None = None,
                 field_name: str | None = None) -> None:
        self.type_name = type_name
        self.entity_name = entity_name
        self.field_name = field_name
        msg = f"The instance for class {type_name} cannot be created"
        if field_name is not None:
            msg += f" for foreign field '{field_name}' in entity '{entity_name}'"
        super().__init__(f"{msg}: {detail}")


class ColumnValueError(MappingError):
    """Raised when a codec rejects a field value."""

    def __init__(self, entity_name: str, column: str, detail: str) -> None:
        self.entity_name = entity_name
        self.column = column
        super().__init__(f"Bad value for entity '{entity_name}' column '{column}': {detail}")


# --- Schema ---


class SchemaError(RowSchemaError):
    """Base for schema statement generation errors."""


class UnsupportedStorageTypeError(SchemaError):
    """Raised when a codec reports a storage type outside StorageType."""

    def __init__(self, storage_type: Any, entity_name: str, column: str) -> None:
        self.storage_type = storage_type
        self.entity_name = entity_name
        self.column = column
        super().__init__(
            f"Storage type {storage_type!r} unknown or not supported for field "
            f"'{column}' in entity '{entity_name}'"
        )


# --- Database ---


class DatabaseError(RowSchemaError):
    """Base for database capability errors."""


class StatementExecutionError(DatabaseError):
    """Raised when the database rejects a statement."""

    def __init__(self, sql: str, detail: str) -> None:
        self.sql = sql
        super().__init__(f"Statement failed: {detail} [{sql}]")
