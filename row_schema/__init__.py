"""RowSchema - declarative record-to-row mapping and SQLite schema generation."""

from __future__ import annotations

from row_schema.adapters.protocol import Database
from row_schema.adapters.sqlite import SqliteDatabase
from row_schema.core.codecs import (
    BaseCodec,
    BooleanCodec,
    Codec,
    DateAsStringCodec,
    DateAsTimestampCodec,
    DecimalAsStringCodec,
    DoubleCodec,
    EnumAsIntegerCodec,
    EnumAsStringCodec,
    IntegerCodec,
    StringCodec,
)
from row_schema.core.config import MappingConfig
from row_schema.core.engine import SchemaEngine
from row_schema.core.enums import ForeignAction, StorageType, TypeKind
from row_schema.core.exceptions import (
    AccessError,
    ColumnValueError,
    ConfigurationError,
    DatabaseError,
    IdentifierError,
    InstantiationError,
    MappingError,
    NoCodecError,
    RowSchemaError,
    SchemaError,
    StatementExecutionError,
    UnsupportedKindError,
    UnsupportedStorageTypeError,
)
from row_schema.core.registry import CodecRegistry
from row_schema.core.sanitizer import quote_identifier, quote_literal
from row_schema.core.types import Int32, TypeRegistry
from row_schema.mapping.descriptor import (
    DescriptorCache,
    EntityDescriptor,
    FieldDescriptor,
    IndexConstraintDescriptor,
)
from row_schema.mapping.row import RowCodec
from row_schema.mapping.spec import EntitySpec, FieldSpec, IndexSpec
from row_schema.schema.ddl import create_statements, drop_statements

__all__ = [
    # Engine
    "SchemaEngine",
    "MappingConfig",
    # Declarations
    "EntitySpec",
    "FieldSpec",
    "IndexSpec",
    # Descriptors
    "DescriptorCache",
    "EntityDescriptor",
    "FieldDescriptor",
    "IndexConstraintDescriptor",
    # Types and codecs
    "TypeRegistry",
    "CodecRegistry",
    "Int32",
    "Codec",
    "BaseCodec",
    "IntegerCodec",
    "DoubleCodec",
    "BooleanCodec",
    "StringCodec",
    "DateAsStringCodec",
    "DateAsTimestampCodec",
    "EnumAsStringCodec",
    "EnumAsIntegerCodec",
    "DecimalAsStringCodec",
    # Rows
    "RowCodec",
    # Schema
    "create_statements",
    "drop_statements",
    "quote_identifier",
    "quote_literal",
    # Database
    "Database",
    "SqliteDatabase",
    # Enums
    "StorageType",
    "TypeKind",
    "ForeignAction",
    # Exceptions
    "RowSchemaError",
    "ConfigurationError",
    "NoCodecError",
    "UnsupportedKindError",
    "IdentifierError",
    "MappingError",
    "AccessError",
    "InstantiationError",
    "ColumnValueError",
    "SchemaError",
    "UnsupportedStorageTypeError",
    "DatabaseError",
    "StatementExecutionError",
]
