"""Codecs - bidirectional converters between field values and column values.

The built-in codecs cover one TypeKind each. Custom codecs only have to
satisfy the ``Codec`` protocol and are registered on a CodecRegistry.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from functools import lru_cache
from typing import Any, Protocol, runtime_checkable

from row_schema.core.enums import StorageType, TypeKind
from row_schema.core.sanitizer import quote_literal

NULL_SQL = "NULL"

# naive, in UTC
_EPOCH = datetime(1970, 1, 1)
_MICROSECOND = timedelta(microseconds=1)


@runtime_checkable
class Codec(Protocol):
    """Codec protocol.

    ``write`` raises ``ValueError`` or ``TypeError`` for values it cannot
    store; callers attach the entity and column to the error.
    """

    @property
    def storage_type(self) -> StorageType:
        """Column storage class used in CREATE TABLE."""
        ...

    def read(self, raw: Any) -> Any:
        """Convert a raw column value (possibly None) to a field value."""
        ...

    def write(self, key: str, row: dict[str, Any], value: Any) -> None:
        """Store *value* under *key* in *row*."""
        ...

    def to_sql_literal(self, literal: str | None) -> str:
        """Render a declared default literal as SQL text for a DEFAULT clause."""
        ...


class BaseCodec:
    """Null handling shared by the built-in codecs.

    Subclasses implement ``to_storage``, ``from_storage`` and
    ``literal_to_sql``; ``None`` never reaches them.
    """

    storage_type: StorageType = StorageType.NONE
    nullable: bool = True
    zero: Any = None

    def read(self, raw: Any) -> Any:
        if raw is None:
            return None if self.nullable else self.zero
        return self.from_storage(raw)

    def write(self, key: str, row: dict[str, Any], value: Any) -> None:
        if value is None:
            if not self.nullable:
                raise ValueError(f"{type(self).__name__} cannot store None")
            row[key] = None
            return
        row[key] = self.to_storage(value)

    def to_sql_literal(self, literal: str | None) -> str:
        if literal is None:
            return NULL_SQL
        return self.literal_to_sql(literal)

    def to_storage(self, value: Any) -> Any:
        raise NotImplementedError

    def from_storage(self, raw: Any) -> Any:
        raise NotImplementedError

    def literal_to_sql(self, literal: str) -> str:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(nullable={self.nullable})"


class IntegerCodec(BaseCodec):
    """Range-checked integer stored as INTEGER."""

    storage_type = StorageType.INTEGER
    zero = 0

    def __init__(self, nullable: bool = True, bits: int = 64) -> None:
        self.nullable = nullable
        self.bits = bits
        self._max = 2 ** (bits - 1) - 1
        self._min = -(2 ** (bits - 1))

    def _check(self, value: int) -> int:
        if not self._min <= value <= self._max:
            raise ValueError(f"{value} does not fit in a {self.bits}-bit integer")
        return value

    def to_storage(self, value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"expected int, got {type(value).__name__}: {value!r}")
        return self._check(value)

    def from_storage(self, raw: Any) -> int:
        return int(raw)

    def literal_to_sql(self, literal: str) -> str:
        return str(self._check(int(literal.strip())))


class DoubleCodec(BaseCodec):
    storage_type = StorageType.REAL
    zero = 0.0

    def __init__(self, nullable: bool = True) -> None:
        self.nullable = nullable

    def to_storage(self, value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"expected float, got {type(value).__name__}: {value!r}")
        return float(value)

    def from_storage(self, raw: Any) -> float:
        return float(raw)

    def literal_to_sql(self, literal: str) -> str:
        value = float(literal.strip())
        if not math.isfinite(value):
            raise ValueError(f"non-finite default {literal!r}")
        return repr(value)


class BooleanCodec(BaseCodec):
    """Boolean stored as INTEGER 1/0."""

    storage_type = StorageType.INTEGER
    zero = False

    _TRUE = frozenset(["true", "1"])
    _FALSE = frozenset(["false", "0"])

    def __init__(self, nullable: bool = True) -> None:
        self.nullable = nullable

    def to_storage(self, value: Any) -> int:
        if not isinstance(value, bool):
            raise TypeError(f"expected bool, got {type(value).__name__}: {value!r}")
        return 1 if value else 0

    def from_storage(self, raw: Any) -> bool:
        return bool(int(raw))

    def literal_to_sql(self, literal: str) -> str:
        text = literal.strip().lower()
        if text in self._TRUE:
            return "1"
        if text in self._FALSE:
            return "0"
        raise ValueError(f"{literal!r} is not a boolean literal")


class StringCodec(BaseCodec):
    storage_type = StorageType.TEXT

    def to_storage(self, value: Any) -> str:
        if not isinstance(value, str):
            raise TypeError(f"expected str, got {type(value).__name__}: {value!r}")
        return value

    def from_storage(self, raw: Any) -> str:
        return str(raw)

    def literal_to_sql(self, literal: str) -> str:
        return quote_literal(literal)


class DateAsStringCodec(BaseCodec):
    """``datetime`` stored as an ISO 8601 string.

    Aware values are normalized to UTC; naive values are stored without an
    offset and read back naive. Microseconds are always kept.
    """

    storage_type = StorageType.TEXT

    def to_storage(self, value: Any) -> str:
        if not isinstance(value, datetime):
            raise TypeError(f"expected datetime, got {type(value).__name__}: {value!r}")
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.isoformat(timespec="microseconds")

    def from_storage(self, raw: Any) -> datetime:
        return datetime.fromisoformat(str(raw))

    def literal_to_sql(self, literal: str) -> str:
        return quote_literal(self.to_storage(datetime.fromisoformat(literal.strip())))


class DateAsTimestampCodec(BaseCodec):
    """``datetime`` stored as INTEGER microseconds since the epoch.

    Faster to compare than strings but not searchable with ``LIKE``. Values
    are read back naive, in UTC: naive values round-trip exactly, aware
    values are converted to UTC and lose their offset.
    """

    storage_type = StorageType.INTEGER

    def to_storage(self, value: Any) -> int:
        if not isinstance(value, datetime):
            raise TypeError(f"expected datetime, got {type(value).__name__}: {value!r}")
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return (value - _EPOCH) // _MICROSECOND

    def from_storage(self, raw: Any) -> datetime:
        return _EPOCH + timedelta(microseconds=int(raw))

    def literal_to_sql(self, literal: str) -> str:
        return str(int(literal.strip()))


class EnumAsStringCodec(BaseCodec):
    """Enum member stored by name."""

    storage_type = StorageType.TEXT

    def __init__(self, enum_type: type[Enum]) -> None:
        self.enum_type = enum_type

    def to_storage(self, value: Any) -> str:
        if not isinstance(value, self.enum_type):
            raise TypeError(f"expected {self.enum_type.__name__}, got {value!r}")
        return value.name

    def from_storage(self, raw: Any) -> Enum:
        try:
            return self.enum_type[str(raw)]
        except KeyError:
            raise ValueError(f"{raw!r} is not a member of {self.enum_type.__name__}") from None

    def literal_to_sql(self, literal: str) -> str:
        return quote_literal(self.from_storage(literal.strip()).name)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.enum_type.__name__})"


class EnumAsIntegerCodec(BaseCodec):
    """Enum member stored by declaration position.

    Reordering the enum members changes the meaning of stored rows.
    """

    storage_type = StorageType.INTEGER

    def __init__(self, enum_type: type[Enum]) -> None:
        self.enum_type = enum_type
        self._members = list(enum_type)

    def to_storage(self, value: Any) -> int:
        if not isinstance(value, self.enum_type):
            raise TypeError(f"expected {self.enum_type.__name__}, got {value!r}")
        return self._members.index(value)

    def from_storage(self, raw: Any) -> Enum:
        position = int(raw)
        if not 0 <= position < len(self._members):
            raise ValueError(f"{raw!r} is not an ordinal of {self.enum_type.__name__}")
        return self._members[position]

    def literal_to_sql(self, literal: str) -> str:
        try:
            member = self.enum_type[literal.strip()]
        except KeyError:
            raise ValueError(
                f"{literal!r} is not a member of {self.enum_type.__name__}"
            ) from None
        return str(self._members.index(member))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.enum_type.__name__})"


class DecimalAsStringCodec(BaseCodec):
    """``Decimal`` stored as TEXT to keep every digit."""

    storage_type = StorageType.TEXT

    def to_storage(self, value: Any) -> str:
        if not isinstance(value, Decimal):
            raise TypeError(f"expected Decimal, got {type(value).__name__}: {value!r}")
        return str(value)

    def from_storage(self, raw: Any) -> Decimal:
        try:
            return Decimal(str(raw))
        except InvalidOperation:
            raise ValueError(f"{raw!r} is not a decimal") from None

    def literal_to_sql(self, literal: str) -> str:
        return quote_literal(str(self.from_storage(literal.strip())))


_KIND_CODECS: dict[TypeKind, Codec] = {
    TypeKind.LONG: IntegerCodec(nullable=False),
    TypeKind.LONG_NULLABLE: IntegerCodec(),
    TypeKind.INTEGER: IntegerCodec(nullable=False, bits=32),
    TypeKind.INTEGER_NULLABLE: IntegerCodec(bits=32),
    TypeKind.DOUBLE: DoubleCodec(nullable=False),
    TypeKind.DOUBLE_NULLABLE: DoubleCodec(),
    TypeKind.BOOLEAN: BooleanCodec(nullable=False),
    TypeKind.BOOLEAN_NULLABLE: BooleanCodec(),
    TypeKind.STRING: StringCodec(),
    TypeKind.DATE_AS_STRING: DateAsStringCodec(),
    TypeKind.DATE_AS_TIMESTAMP: DateAsTimestampCodec(),
}


@lru_cache(maxsize=None)
def _enum_codec(kind: TypeKind, enum_type: type[Enum]) -> Codec:
    if kind is TypeKind.ENUM_AS_INTEGER:
        return EnumAsIntegerCodec(enum_type)
    return EnumAsStringCodec(enum_type)


def codec_for_kind(kind: TypeKind, base_type: Any) -> Codec | None:
    """Return the default codec for *kind*, or None for ``TypeKind.UNKNOWN``.

    Enum kinds need *base_type* to build a codec bound to that enum.
    """
    if kind in (TypeKind.ENUM_AS_STRING, TypeKind.ENUM_AS_INTEGER):
        return _enum_codec(kind, base_type)
    return _KIND_CODECS.get(kind)
