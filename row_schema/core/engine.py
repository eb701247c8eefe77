"""Schema engine.

The SchemaEngine wires a type registry, a codec registry, a descriptor cache
and a row codec together, and runs generated schema statements against a
Database.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, TypeVar

import structlog

from row_schema.adapters.protocol import Database
from row_schema.core.codecs import Codec
from row_schema.core.config import MappingConfig
from row_schema.core.registry import CodecRegistry
from row_schema.core.types import TypeRegistry
from row_schema.mapping.descriptor import DescriptorCache, EntityDescriptor
from row_schema.mapping.row import RowCodec
from row_schema.schema.ddl import create_statements, drop_statements

T = TypeVar("T")

_INDEX_NAMES_SQL = "SELECT name FROM sqlite_master WHERE type = ? AND tbl_name = ?"


class SchemaEngine:
    """Entry point for describing entities, converting rows and managing tables.

    Each engine owns its registries, so engines built in tests do not share
    codec overrides or cached descriptors.
    """

    def __init__(
        self,
        config: MappingConfig | None = None,
        codecs: CodecRegistry | None = None,
        descriptors: DescriptorCache | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._config = config or MappingConfig()
        self._logger = logger or structlog.get_logger(__name__)
        if descriptors is not None:
            codecs = descriptors.codecs
        self._codecs = codecs or CodecRegistry(TypeRegistry(self._config), logger=logger)
        self._descriptors = descriptors or DescriptorCache(self._codecs, logger=logger)
        self._rows = RowCodec(self._descriptors, logger=logger)

    @classmethod
    def from_config(cls, config: MappingConfig) -> SchemaEngine:
        """Create a SchemaEngine with fresh registries for *config*."""
        return cls(config)

    @property
    def config(self) -> MappingConfig:
        return self._config

    @property
    def codecs(self) -> CodecRegistry:
        return self._codecs

    @property
    def descriptors(self) -> DescriptorCache:
        return self._descriptors

    # --- Codecs ---

    def register_codec(self, declared_type: Any, codec: Codec) -> None:
        self._codecs.register(declared_type, codec)

    def unregister_codec(self, declared_type: Any) -> None:
        self._codecs.unregister(declared_type)

    # --- Mapping ---

    def describe(self, record_type: type) -> EntityDescriptor:
        return self._descriptors.describe(record_type)

    def columns(
        self, record_type: type, *, include_id: bool = True, include_foreign_keys: bool = True
    ) -> set[str]:
        return self._rows.columns(
            record_type, include_id=include_id, include_foreign_keys=include_foreign_keys
        )

    def to_row(
        self,
        record: Any,
        columns: Iterable[str] | None = None,
        *,
        include_id: bool = False,
        include_foreign_keys: bool = True,
        row: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        return self._rows.to_row(
            record,
            columns,
            include_id=include_id,
            include_foreign_keys=include_foreign_keys,
            row=row,
        )

    def from_row(self, row: Any, target: T, columns: Iterable[str] | None = None) -> T:
        return self._rows.from_row(row, target, columns)

    def load(self, row: Any, record_type: type[T], columns: Iterable[str] | None = None) -> T:
        return self._rows.load(row, record_type, columns)

    def load_many(
        self, rows: Iterable[Any], record_type: type[T], columns: Iterable[str] | None = None
    ) -> list[T]:
        return self._rows.load_many(rows, record_type, columns)

    # --- Schema ---

    def create_statements(self, record_type: type) -> list[str]:
        return create_statements(self.describe(record_type))

    def drop_statements(self, table_name: str, live_index_names: Iterable[str]) -> list[str]:
        return drop_statements(table_name, live_index_names)

    def table_index_names(self, db: Database, table_name: str) -> set[str]:
        """Query the names of the explicit indexes of *table_name*.

        Indexes SQLite creates for UNIQUE and PRIMARY KEY constraints carry
        the configured autoindex prefix and are left out.
        """
        prefix = self._config.autoindex_prefix
        rows = db.query(_INDEX_NAMES_SQL, ("index", table_name))
        return {row["name"] for row in rows if not str(row["name"]).startswith(prefix)}

    def create_table(self, db: Database, record_type: type) -> None:
        """Create the table and indexes of *record_type*.

        Fails if the table or one of its indexes already exists.
        """
        descriptor = self.describe(record_type)
        for statement in create_statements(descriptor):
            self._logger.debug("schema_statement", entity=descriptor.name, statement=statement)
            db.execute(statement)
        self._logger.info("table_created", entity=descriptor.name)

    def drop_table(self, db: Database, table: type | str) -> None:
        """Drop the explicit indexes and the table of an entity type or table name."""
        table_name = table if isinstance(table, str) else self.describe(table).name
        statements = drop_statements(table_name, self.table_index_names(db, table_name))
        for statement in statements:
            self._logger.debug("schema_statement", entity=table_name, statement=statement)
            db.execute(statement)
        self._logger.info("table_dropped", entity=table_name)
