"""Entity declarations.

The declarations are the already-discovered description of a record type:
its table name, its fields in column order and its indexes. They are plain
validated data; the DescriptorCache resolves them into descriptors.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from row_schema.core.enums import ForeignAction


class FieldSpec(BaseModel):
    """Declaration of one record attribute mapped to one column."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    attribute: str = Field(min_length=1)
    declared_type: Any
    column: str | None = None
    nullable: bool = True
    default: str | None = None
    id: bool = False
    generated_id: bool = False
    foreign: bool = False
    on_delete: ForeignAction = ForeignAction.NO_ACTION
    on_update: ForeignAction = ForeignAction.NO_ACTION
    unique: bool = False

    @model_validator(mode="before")
    @classmethod
    def _generated_id_is_id(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("generated_id"):
            data = {**data, "id": True}
        return data

    @property
    def column_name(self) -> str:
        return self.column or self.attribute


class IndexSpec(BaseModel):
    """Declaration of an index over one or more attributes, in order."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    fields: list[str]
    unique: bool = False


class EntitySpec(BaseModel):
    """Declaration of a record type mapped to a table.

    Attributes:
        name: Table name.
        fields: Field declarations in column order.
        indexes: Index declarations.
        factory: Zero-argument constructor for fresh instances; the record
            type itself is called when omitted.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(min_length=1)
    fields: list[FieldSpec]
    indexes: list[IndexSpec] = []
    factory: Callable[[], Any] | None = None
