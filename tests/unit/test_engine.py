"""Unit tests for SchemaEngine wiring."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from row_schema.core.codecs import BaseCodec, StringCodec
from row_schema.core.config import MappingConfig
from row_schema.core.engine import SchemaEngine
from row_schema.core.enums import StorageType, TypeKind
from row_schema.core.registry import CodecRegistry
from row_schema.mapping.descriptor import DescriptorCache
from row_schema.mapping.spec import EntitySpec, FieldSpec

# --- Test models ---


class Money:
    def __init__(self, cents: int = 0) -> None:
        self.cents = cents

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Money) and other.cents == self.cents


class MoneyCodec(BaseCodec):
    storage_type = StorageType.INTEGER

    def to_storage(self, value: Any) -> int:
        return value.cents

    def from_storage(self, raw: Any) -> Money:
        return Money(int(raw))

    def literal_to_sql(self, literal: str) -> str:
        return str(int(literal))


@dataclass
class Invoice:
    id: int | None = None
    total: Money | None = None


Invoice.__entity__ = EntitySpec(  # type: ignore[attr-defined]
    name="invoice",
    fields=[
        FieldSpec(attribute="id", declared_type=int, generated_id=True),
        FieldSpec(attribute="total", declared_type=Money | None),
    ],
)


class FakeDatabase:
    """Records statements and answers the index query with fixed names."""

    def __init__(self, index_names: list[str]) -> None:
        self.index_names = index_names
        self.executed: list[str] = []
        self.queries: list[tuple[str, tuple[Any, ...]]] = []

    def execute(self, sql: str) -> None:
        self.executed.append(sql)

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[Any]:
        self.queries.append((sql, tuple(params)))
        return [{"name": name} for name in self.index_names]


# --- Tests ---


class TestConstruction:
    def test_defaults(self) -> None:
        engine = SchemaEngine()
        assert engine.config == MappingConfig()
        assert engine.descriptors.codecs is engine.codecs

    def test_from_config(self) -> None:
        config = MappingConfig(enum_kind=TypeKind.ENUM_AS_INTEGER)
        engine = SchemaEngine.from_config(config)
        assert engine.config is config
        assert engine.codecs.types.config is config

    def test_descriptor_cache_brings_its_registry(self) -> None:
        codecs = CodecRegistry()
        engine = SchemaEngine(descriptors=DescriptorCache(codecs))
        assert engine.codecs is codecs

    def test_engines_do_not_share_overrides(self) -> None:
        first, second = SchemaEngine(), SchemaEngine()
        first.register_codec(Money, MoneyCodec())
        assert Money in first.codecs
        assert Money not in second.codecs


class TestCustomCodecs:
    def test_registered_codec_is_used(self) -> None:
        engine = SchemaEngine()
        codec = MoneyCodec()
        engine.register_codec(Money, codec)

        assert engine.describe(Invoice).field_for_column("total").codec is codec  # type: ignore[union-attr]
        row = engine.to_row(Invoice(total=Money(1250)))
        assert row == {"total": 1250}
        assert engine.load(row, Invoice).total == Money(1250)

    def test_register_replaces_cached_default(self) -> None:
        engine = SchemaEngine()
        engine.register_codec(Money, StringCodec())
        assert engine.create_statements(Invoice)[0].endswith("total TEXT NULL)")

        engine.register_codec(Money, MoneyCodec())
        assert engine.create_statements(Invoice)[0].endswith("total INTEGER NULL)")

    def test_unregister_reverts(self) -> None:
        engine = SchemaEngine()
        engine.register_codec(Money, StringCodec())
        engine.describe(Invoice)
        engine.unregister_codec(Money)
        engine.register_codec(Money, MoneyCodec())
        assert isinstance(
            engine.describe(Invoice).field_for_column("total").codec,  # type: ignore[union-attr]
            MoneyCodec,
        )


class TestTableOperations:
    def test_index_names_skip_autoindexes(self) -> None:
        db = FakeDatabase(["ix_invoice_total", "sqlite_autoindex_invoice_1"])
        engine = SchemaEngine()
        assert engine.table_index_names(db, "invoice") == {"ix_invoice_total"}
        assert db.queries[0][1] == ("index", "invoice")

    def test_custom_autoindex_prefix(self) -> None:
        db = FakeDatabase(["auto_1", "ix_a"])
        engine = SchemaEngine(MappingConfig(autoindex_prefix="auto_"))
        assert engine.table_index_names(db, "invoice") == {"ix_a"}

    def test_create_table_runs_statements_in_order(self) -> None:
        engine = SchemaEngine()
        engine.register_codec(Money, MoneyCodec())
        db = FakeDatabase([])
        engine.create_table(db, Invoice)
        assert db.executed == engine.create_statements(Invoice)

    def test_drop_table(self) -> None:
        db = FakeDatabase(["ix_b", "sqlite_autoindex_invoice_1", "ix_a"])
        SchemaEngine().drop_table(db, "invoice")
        assert db.executed == [
            "DROP INDEX IF EXISTS ix_a",
            "DROP INDEX IF EXISTS ix_b",
            "DROP TABLE IF EXISTS invoice",
        ]
