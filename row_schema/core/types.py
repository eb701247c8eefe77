"""Type classification.

Maps a declared field type to its TypeKind. Bare ``int``/``float``/``bool``
annotations are primitives: they never hold ``None``. Their ``Optional``
forms are the nullable wrappers.
"""

from __future__ import annotations

import types
import typing
from datetime import datetime
from enum import Enum
from typing import Any, NewType

from row_schema.core.config import MappingConfig
from row_schema.core.enums import TypeKind
from row_schema.core.exceptions import UnsupportedKindError

# 32-bit integer column; plain ``int`` maps to a 64-bit column.
Int32 = NewType("Int32", int)

_PRIMITIVE_KINDS: dict[Any, TypeKind] = {
    int: TypeKind.LONG,
    Int32: TypeKind.INTEGER,
    float: TypeKind.DOUBLE,
    bool: TypeKind.BOOLEAN,
}

_WRAPPER_KINDS: dict[Any, TypeKind] = {
    int: TypeKind.LONG_NULLABLE,
    Int32: TypeKind.INTEGER_NULLABLE,
    float: TypeKind.DOUBLE_NULLABLE,
    bool: TypeKind.BOOLEAN_NULLABLE,
}

# complex is a scalar with no column mapping at all
_PRIMITIVES = frozenset([int, Int32, float, bool, complex])


def unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """Split ``Optional[X]`` / ``X | None`` into ``(X, True)``.

    Any other annotation is returned as ``(annotation, False)``.
    """
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) == 1 and len(args) < len(typing.get_args(annotation)):
            return args[0], True
    return annotation, False


def is_primitive(annotation: Any) -> bool:
    return annotation in _PRIMITIVES


def is_enum_type(annotation: Any) -> bool:
    return isinstance(annotation, type) and issubclass(annotation, Enum)


class TypeRegistry:
    """Classifies declared types into TypeKinds.

    Args:
        config: Supplies the default kinds for dates and enums.
    """

    def __init__(self, config: MappingConfig | None = None) -> None:
        self._config = config or MappingConfig()

    @property
    def config(self) -> MappingConfig:
        return self._config

    def classify(self, annotation: Any, treat_primitive_as_wrapper: bool = False) -> TypeKind:
        """Return the TypeKind for *annotation*.

        Unmapped types yield ``TypeKind.UNKNOWN``.

        Raises:
            UnsupportedKindError: If a primitive must be substituted by its
                wrapper and has none.
        """
        base, optional = unwrap_optional(annotation)

        if is_primitive(base):
            if optional or treat_primitive_as_wrapper:
                kind = _WRAPPER_KINDS.get(base)
                if kind is None:
                    if optional:
                        return TypeKind.UNKNOWN
                    raise UnsupportedKindError(base)
                return kind
            return _PRIMITIVE_KINDS.get(base, TypeKind.UNKNOWN)

        if base is str:
            return TypeKind.STRING
        if isinstance(base, type) and issubclass(base, datetime):
            return self._config.date_kind
        if is_enum_type(base):
            return self._config.enum_kind
        return TypeKind.UNKNOWN
