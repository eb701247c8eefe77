"""Mapping configuration.

MappingConfig is a frozen Pydantic model; one instance is shared by the
type registry, the codec registry and the schema engine.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from row_schema.core.enums import TypeKind

_DATE_KINDS = (TypeKind.DATE_AS_STRING, TypeKind.DATE_AS_TIMESTAMP)
_ENUM_KINDS = (TypeKind.ENUM_AS_STRING, TypeKind.ENUM_AS_INTEGER)


class MappingConfig(BaseModel):
    """Configuration for type classification and schema introspection.

    Attributes:
        date_kind: How ``datetime`` fields are stored by default. Strings keep
            the column readable and searchable with ``LIKE``.
        enum_kind: How ``Enum`` fields are stored by default. Names survive
            reordering of the enum members.
        autoindex_prefix: Prefix of index names generated by the engine
            itself; such indexes are never dropped explicitly.
        enable_foreign_keys: Turn on foreign key enforcement when the sqlite
            adapter opens a connection.
    """

    model_config = ConfigDict(frozen=True)

    date_kind: TypeKind = TypeKind.DATE_AS_STRING
    enum_kind: TypeKind = TypeKind.ENUM_AS_STRING
    autoindex_prefix: str = "sqlite_autoindex_"
    enable_foreign_keys: bool = True

    @field_validator("date_kind")
    @classmethod
    def _check_date_kind(cls, value: TypeKind) -> TypeKind:
        if value not in _DATE_KINDS:
            raise ValueError(f"date_kind must be one of {[k.name for k in _DATE_KINDS]}")
        return value

    @field_validator("enum_kind")
    @classmethod
    def _check_enum_kind(cls, value: TypeKind) -> TypeKind:
        if value not in _ENUM_KINDS:
            raise ValueError(f"enum_kind must be one of {[k.name for k in _ENUM_KINDS]}")
        return value
