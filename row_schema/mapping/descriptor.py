"""Entity descriptors and the descriptor cache.

Descriptors are frozen dataclasses resolved once per record type from its
EntitySpec and the codec registry. A foreign field points at the primary
key descriptor of its target entity, never at the whole entity, so
mutually-referencing entities resolve without recursion.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import structlog

from row_schema.core.codecs import Codec
from row_schema.core.enums import ForeignAction, StorageType
from row_schema.core.exceptions import (
    ConfigurationError,
    InstantiationError,
    NoCodecError,
    UnsupportedKindError,
)
from row_schema.core.registry import CodecRegistry
from row_schema.core.types import unwrap_optional
from row_schema.mapping.spec import EntitySpec, FieldSpec


@dataclass(frozen=True)
class FieldDescriptor:
    """Resolved mapping of one attribute to one column."""

    entity_name: str
    attribute: str
    column: str
    declared_type: Any  # target record type for foreign fields
    codec: Codec
    primary_key: bool = False
    generated_id: bool = False
    nullable: bool = True
    default: str | None = None
    unique: bool = False
    foreign_key: FieldDescriptor | None = None  # target primary key
    on_delete: ForeignAction = ForeignAction.NO_ACTION
    on_update: ForeignAction = ForeignAction.NO_ACTION

    @property
    def is_foreign(self) -> bool:
        return self.foreign_key is not None

    @property
    def storage_type(self) -> Any:
        return self.codec.storage_type


@dataclass(frozen=True)
class IndexConstraintDescriptor:
    """Resolved index; field order is the index column order."""

    name: str
    entity_name: str
    fields: tuple[FieldDescriptor, ...]
    unique: bool = False

    @property
    def single_field(self) -> bool:
        return len(self.fields) == 1

    @property
    def columns(self) -> list[str]:
        return [f.column for f in self.fields]


@dataclass(frozen=True)
class EntityDescriptor:
    """Immutable structural summary of an entity."""

    record_type: type
    name: str
    fields: tuple[FieldDescriptor, ...]
    indexes: tuple[IndexConstraintDescriptor, ...] = ()
    factory: Callable[[], Any] | None = field(default=None, compare=False)

    @property
    def primary_key(self) -> FieldDescriptor | None:
        for fd in self.fields:
            if fd.primary_key:
                return fd
        return None

    def field_for_column(self, column: str) -> FieldDescriptor | None:
        for fd in self.fields:
            if fd.column == column:
                return fd
        return None

    def columns(self, include_id: bool = True, include_foreign_keys: bool = True) -> list[str]:
        """Column names in declaration order.

        Args:
            include_id: Include the primary key column.
            include_foreign_keys: Include foreign key columns.
        """
        return [
            fd.column
            for fd in self.fields
            if (include_id or not fd.primary_key)
            and (include_foreign_keys or not fd.is_foreign)
        ]

    def new_instance(self) -> Any:
        """Construct a fresh record with the declared or default constructor.

        Raises:
            InstantiationError: If the constructor cannot be called without
                arguments or rejects its defaults (pydantic ``ValidationError``).
        """
        factory = self.factory or self.record_type
        try:
            return factory()
        except (TypeError, ValueError) as e:
            raise InstantiationError(self.record_type.__qualname__, str(e)) from e


def entity_spec_of(record_type: type) -> EntitySpec:
    """Default spec source: the ``__entity__`` class attribute."""
    spec = getattr(record_type, "__entity__", None)
    if not isinstance(spec, EntitySpec):
        raise ConfigurationError(
            getattr(record_type, "__qualname__", repr(record_type)),
            None,
            "record type does not declare an EntitySpec in __entity__",
        )
    return spec


class DescriptorCache:
    """Resolves and memoizes EntityDescriptors per record type.

    Lookups of finished descriptors take no lock. The first resolution of a
    type, including every entity it reaches through foreign fields, runs
    under a single re-entrant lock and is published only once complete.
    The cache empties itself whenever the codec registry changes.

    Args:
        codecs: Codec registry consulted for every field.
        source: Returns the EntitySpec of a record type.
    """

    def __init__(
        self,
        codecs: CodecRegistry | None = None,
        source: Callable[[type], EntitySpec] = entity_spec_of,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._codecs = codecs or CodecRegistry()
        self._source = source
        self._logger = logger or structlog.get_logger(__name__)
        self._lock = threading.RLock()
        self._cache: dict[type, EntityDescriptor] = {}
        self._version = self._codecs.version

    @property
    def codecs(self) -> CodecRegistry:
        return self._codecs

    def describe(self, record_type: type) -> EntityDescriptor:
        """Return the descriptor of *record_type*, building it on first use.

        Raises:
            ConfigurationError: If the declaration cannot be resolved.
        """
        if self._version != self._codecs.version:
            self.clear()
        descriptor = self._cache.get(record_type)
        if descriptor is not None:
            return descriptor

        with self._lock:
            descriptor = self._cache.get(record_type)
            if descriptor is None:
                staged: dict[type, EntityDescriptor] = {}
                descriptor = self._build(record_type, staged, {})
                self._cache = {**self._cache, **staged}
        return descriptor

    def evict(self, record_type: type) -> None:
        with self._lock:
            if record_type in self._cache:
                cache = dict(self._cache)
                del cache[record_type]
                self._cache = cache

    def clear(self) -> None:
        with self._lock:
            self._cache = {}
            self._version = self._codecs.version

    def __contains__(self, record_type: type) -> bool:
        return record_type in self._cache

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def _build(
        self,
        record_type: type,
        staged: dict[type, EntityDescriptor],
        pending: dict[type, FieldDescriptor | None],
    ) -> EntityDescriptor:
        spec = self._source(record_type)
        entity = spec.name

        unique_attributes = {
            ix.fields[0] for ix in spec.indexes if ix.unique and len(ix.fields) == 1
        }
        attributes = [fs.attribute for fs in spec.fields]
        for attribute in attributes:
            if attributes.count(attribute) > 1:
                raise ConfigurationError(entity, attribute, "attribute declared twice")

        resolved: dict[str, FieldDescriptor] = {}
        primary: FieldDescriptor | None = None
        for fs in spec.fields:
            if fs.foreign:
                if fs.id:
                    raise ConfigurationError(
                        entity, fs.attribute, "a primary key cannot be a foreign field"
                    )
                continue
            fd = self._plain_field(entity, fs, fs.attribute in unique_attributes)
            if fd.primary_key:
                if primary is not None:
                    raise ConfigurationError(
                        entity,
                        fs.attribute,
                        f"second primary key, '{primary.attribute}' is already the id",
                    )
                primary = fd
            resolved[fs.attribute] = fd

        # Entities reaching this one through foreign fields link to its
        # primary key while the rest of it is still being resolved.
        pending[record_type] = primary
        try:
            for fs in spec.fields:
                if fs.foreign:
                    target_key = self._target_primary_key(entity, fs, staged, pending)
                    resolved[fs.attribute] = self._foreign_field(
                        entity, fs, target_key, fs.attribute in unique_attributes
                    )
        finally:
            del pending[record_type]

        fields = tuple(resolved[fs.attribute] for fs in spec.fields)
        self._check_columns(entity, fields)
        indexes = self._indexes(spec, resolved)

        descriptor = EntityDescriptor(
            record_type=record_type,
            name=entity,
            fields=fields,
            indexes=indexes,
            factory=spec.factory,
        )
        staged[record_type] = descriptor
        self._logger.debug(
            "entity_described",
            entity=entity,
            columns=[fd.column for fd in fields],
            indexes=[ix.name for ix in indexes],
        )
        return descriptor

    def _resolve_codec(
        self, entity: str, attribute: str, declared_type: Any, as_wrapper: bool
    ) -> Codec:
        try:
            return self._codecs.resolve(declared_type, as_wrapper)
        except (NoCodecError, UnsupportedKindError) as e:
            raise ConfigurationError(entity, attribute, str(e)) from e

    def _plain_field(self, entity: str, fs: FieldSpec, unique: bool) -> FieldDescriptor:
        codec = self._resolve_codec(entity, fs.attribute, fs.declared_type, fs.nullable)
        if fs.generated_id and codec.storage_type != StorageType.INTEGER:
            raise ConfigurationError(
                entity, fs.attribute, "a generated primary key must be stored as INTEGER"
            )
        return FieldDescriptor(
            entity_name=entity,
            attribute=fs.attribute,
            column=fs.column_name,
            declared_type=fs.declared_type,
            codec=codec,
            primary_key=fs.id,
            generated_id=fs.generated_id,
            nullable=fs.nullable and not fs.generated_id,
            default=fs.default,
            unique=fs.unique or unique,
        )

    def _target_primary_key(
        self,
        entity: str,
        fs: FieldSpec,
        staged: dict[type, EntityDescriptor],
        pending: dict[type, FieldDescriptor | None],
    ) -> FieldDescriptor:
        target, _ = unwrap_optional(fs.declared_type)
        if not isinstance(target, type):
            raise ConfigurationError(
                entity, fs.attribute, f"foreign target {target!r} is not a record type"
            )
        if target in pending:
            target_key = pending[target]
        else:
            descriptor = self._cache.get(target) or staged.get(target)
            if descriptor is None:
                descriptor = self._build(target, staged, pending)
            target_key = descriptor.primary_key
        if target_key is None:
            raise ConfigurationError(
                entity,
                fs.attribute,
                f"foreign target {target.__qualname__} has no primary key",
            )
        return target_key

    def _foreign_field(
        self, entity: str, fs: FieldSpec, target_key: FieldDescriptor, unique: bool
    ) -> FieldDescriptor:
        codec = self._resolve_codec(entity, fs.attribute, target_key.declared_type, True)
        return FieldDescriptor(
            entity_name=entity,
            attribute=fs.attribute,
            column=fs.column_name,
            declared_type=unwrap_optional(fs.declared_type)[0],
            codec=codec,
            nullable=fs.nullable,
            default=fs.default,
            unique=fs.unique or unique,
            foreign_key=target_key,
            on_delete=fs.on_delete,
            on_update=fs.on_update,
        )

    def _check_columns(self, entity: str, fields: tuple[FieldDescriptor, ...]) -> None:
        seen: set[str] = set()
        for fd in fields:
            if fd.column in seen:
                raise ConfigurationError(
                    entity, fd.attribute, f"column '{fd.column}' is mapped twice"
                )
            seen.add(fd.column)

    def _indexes(
        self, spec: EntitySpec, resolved: dict[str, FieldDescriptor]
    ) -> tuple[IndexConstraintDescriptor, ...]:
        indexes: list[IndexConstraintDescriptor] = []
        names: set[str] = set()
        for ix in spec.indexes:
            if ix.name in names:
                raise ConfigurationError(spec.name, None, f"index '{ix.name}' declared twice")
            names.add(ix.name)
            if not ix.fields:
                raise ConfigurationError(spec.name, None, f"index '{ix.name}' has no fields")
            members: list[FieldDescriptor] = []
            for attribute in ix.fields:
                fd = resolved.get(attribute)
                if fd is None:
                    raise ConfigurationError(
                        spec.name, attribute, f"index '{ix.name}' references an unknown field"
                    )
                if fd.generated_id:
                    raise ConfigurationError(
                        spec.name,
                        attribute,
                        f"generated primary key cannot be part of index '{ix.name}'",
                    )
                if any(m.attribute == attribute for m in members):
                    raise ConfigurationError(
                        spec.name, attribute, f"field listed twice in index '{ix.name}'"
                    )
                members.append(fd)
            indexes.append(
                IndexConstraintDescriptor(
                    name=ix.name, entity_name=spec.name, fields=tuple(members), unique=ix.unique
                )
            )
        return tuple(indexes)
