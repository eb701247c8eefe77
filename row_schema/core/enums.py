"""Storage, type-kind and foreign-action enumerations."""

from __future__ import annotations

from enum import Enum


class StorageType(str, Enum):
    """SQLite column storage classes."""

    INTEGER = "INTEGER"
    TEXT = "TEXT"
    REAL = "REAL"
    NUMERIC = "NUMERIC"
    NONE = "NONE"


class TypeKind(Enum):
    """Semantic kind of a declared field type."""

    LONG = "long"
    LONG_NULLABLE = "long_nullable"
    INTEGER = "integer"
    INTEGER_NULLABLE = "integer_nullable"
    DOUBLE = "double"
    DOUBLE_NULLABLE = "double_nullable"
    BOOLEAN = "boolean"
    BOOLEAN_NULLABLE = "boolean_nullable"
    STRING = "string"
    DATE_AS_STRING = "date_as_string"
    DATE_AS_TIMESTAMP = "date_as_timestamp"
    ENUM_AS_STRING = "enum_as_string"
    ENUM_AS_INTEGER = "enum_as_integer"
    UNKNOWN = "unknown"

    @property
    def storage_type(self) -> StorageType:
        return _KIND_STORAGE[self]

    @property
    def nullable(self) -> bool:
        """False only for the primitive scalar kinds."""
        return self not in (TypeKind.LONG, TypeKind.INTEGER, TypeKind.DOUBLE, TypeKind.BOOLEAN)


_KIND_STORAGE: dict[TypeKind, StorageType] = {
    TypeKind.LONG: StorageType.INTEGER,
    TypeKind.LONG_NULLABLE: StorageType.INTEGER,
    TypeKind.INTEGER: StorageType.INTEGER,
    TypeKind.INTEGER_NULLABLE: StorageType.INTEGER,
    TypeKind.DOUBLE: StorageType.REAL,
    TypeKind.DOUBLE_NULLABLE: StorageType.REAL,
    TypeKind.BOOLEAN: StorageType.INTEGER,
    TypeKind.BOOLEAN_NULLABLE: StorageType.INTEGER,
    TypeKind.STRING: StorageType.TEXT,
    TypeKind.DATE_AS_STRING: StorageType.TEXT,
    TypeKind.DATE_AS_TIMESTAMP: StorageType.INTEGER,
    TypeKind.ENUM_AS_STRING: StorageType.TEXT,
    TypeKind.ENUM_AS_INTEGER: StorageType.INTEGER,
    TypeKind.UNKNOWN: StorageType.NONE,
}


class ForeignAction(Enum):
    """ON DELETE / ON UPDATE actions for foreign key clauses."""

    NO_ACTION = "NO ACTION"
    RESTRICT = "RESTRICT"
    SET_NULL = "SET NULL"
    SET_DEFAULT = "SET DEFAULT"
    CASCADE = "CASCADE"

    @property
    def sql(self) -> str:
        return self.value
