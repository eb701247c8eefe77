"""Codec registry - resolves the codec used for a declared type.

Resolution order:
    1. custom codec registered for the exact type
    2. library default for the exact type (``Decimal``)
    3. default codec of the type's TypeKind
"""

from __future__ import annotations

import threading
from decimal import Decimal
from typing import Any

import structlog

from row_schema.core.codecs import Codec, DecimalAsStringCodec, codec_for_kind
from row_schema.core.exceptions import NoCodecError
from row_schema.core.types import TypeRegistry, unwrap_optional

_LIBRARY_DEFAULTS: dict[Any, Codec] = {
    Decimal: DecimalAsStringCodec(),
}


class CodecRegistry:
    """Holds custom codec overrides on top of the built-in defaults.

    Overrides are published copy-on-write: readers always see a complete
    table, writers serialize on a lock. ``version`` increases on every
    mutation so descriptor caches can tell their entries went stale.

    Args:
        types: Type classifier used for the kind-derived defaults.
    """

    def __init__(
        self,
        types: TypeRegistry | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._types = types or TypeRegistry()
        self._custom: dict[Any, Codec] = {}
        self._lock = threading.Lock()
        self._version = 0
        self._logger = logger or structlog.get_logger(__name__)

    @property
    def types(self) -> TypeRegistry:
        return self._types

    @property
    def version(self) -> int:
        return self._version

    def register(self, declared_type: Any, codec: Codec) -> None:
        """Register *codec* for *declared_type*, shadowing any default.

        Built-in types such as ``datetime`` or ``bool`` may be overridden too.
        """
        if not isinstance(codec, Codec):
            raise TypeError(f"{codec!r} does not implement the Codec protocol")
        base, _ = unwrap_optional(declared_type)
        with self._lock:
            custom = dict(self._custom)
            custom[base] = codec
            self._custom = custom
            self._version += 1
        self._logger.info("codec_registered", declared_type=repr(base), codec=repr(codec))

    def unregister(self, declared_type: Any) -> None:
        """Remove the custom codec for *declared_type*, if any."""
        base, _ = unwrap_optional(declared_type)
        with self._lock:
            if base not in self._custom:
                return
            custom = dict(self._custom)
            del custom[base]
            self._custom = custom
            self._version += 1
        self._logger.info("codec_unregistered", declared_type=repr(base))

    def custom_codec(self, declared_type: Any) -> Codec | None:
        base, _ = unwrap_optional(declared_type)
        return self._custom.get(base)

    def resolve(self, declared_type: Any, treat_primitive_as_wrapper: bool = False) -> Codec:
        """Return the codec for *declared_type*.

        Raises:
            NoCodecError: If no custom, library or kind-derived codec exists.
            UnsupportedKindError: If a primitive without wrapper must be
                treated as a wrapper.
        """
        base, _ = unwrap_optional(declared_type)
        codec = self._custom.get(base)
        if codec is not None:
            return codec
        codec = _LIBRARY_DEFAULTS.get(base)
        if codec is not None:
            return codec
        kind = self._types.classify(declared_type, treat_primitive_as_wrapper)
        codec = codec_for_kind(kind, base)
        if codec is not None:
            return codec
        raise NoCodecError(declared_type)

    def __contains__(self, declared_type: Any) -> bool:
        return self.custom_codec(declared_type) is not None
