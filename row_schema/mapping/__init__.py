"""Mapping layer - entity declarations, descriptors and row conversion."""

from __future__ import annotations

from row_schema.mapping.descriptor import (
    DescriptorCache,
    EntityDescriptor,
    FieldDescriptor,
    IndexConstraintDescriptor,
    entity_spec_of,
)
from row_schema.mapping.protocol import (
    MappingRowReader,
    RowReader,
    SequenceRowReader,
    as_row_reader,
)
from row_schema.mapping.row import RowCodec
from row_schema.mapping.spec import EntitySpec, FieldSpec, IndexSpec

__all__ = [
    "EntitySpec",
    "FieldSpec",
    "IndexSpec",
    "DescriptorCache",
    "EntityDescriptor",
    "FieldDescriptor",
    "IndexConstraintDescriptor",
    "entity_spec_of",
    "RowReader",
    "MappingRowReader",
    "SequenceRowReader",
    "as_row_reader",
    "RowCodec",
]
