"""Row codec - converts records to column maps and rows back to records.

Foreign fields are stored as the primary key value of the linked record.
Reading a row links a fresh instance of the target type when the record has
none yet, so one row yields an object graph one hop deep.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, TypeVar

import structlog

from row_schema.core.exceptions import AccessError, ColumnValueError, InstantiationError
from row_schema.mapping.descriptor import DescriptorCache, EntityDescriptor, FieldDescriptor
from row_schema.mapping.protocol import as_row_reader

T = TypeVar("T")

_MISSING = object()


class RowCodec:
    """Bidirectional record/row converter.

    Args:
        descriptors: Cache resolving record types to descriptors.
    """

    def __init__(
        self,
        descriptors: DescriptorCache,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._descriptors = descriptors
        self._logger = logger or structlog.get_logger(__name__)

    def columns(
        self,
        record_type: type,
        *,
        include_id: bool = True,
        include_foreign_keys: bool = True,
    ) -> set[str]:
        """Return the set of all columns of *record_type*.

        Args:
            include_id: Include the primary key column, generated or not.
            include_foreign_keys: Include foreign key columns; leave them out
                when writing back references separately.
        """
        descriptor = self._descriptors.describe(record_type)
        return set(descriptor.columns(include_id, include_foreign_keys))

    def to_row(
        self,
        record: Any,
        columns: Iterable[str] | None = None,
        *,
        include_id: bool = False,
        include_foreign_keys: bool = True,
        row: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Convert *record* into a column-name to value map.

        Args:
            record: Instance of a declared record type.
            columns: Columns to write. Defaults to every column selected by
                *include_id* and *include_foreign_keys*.
            include_id: Write the primary key when *columns* is omitted.
            include_foreign_keys: Write foreign keys when *columns* is omitted.
            row: Existing map to fill; it is not cleared first.

        Raises:
            AccessError: If an attribute of the record cannot be read.
            ColumnValueError: If a codec rejects a value.
        """
        descriptor = self._descriptors.describe(type(record))
        selected = self._select(descriptor, columns, include_id, include_foreign_keys)
        if row is None:
            row = {}

        for fd in descriptor.fields:
            if fd.column not in selected:
                continue
            if fd.is_foreign:
                linked = self._get(descriptor, record, fd.attribute)
                value = None if linked is None else self._get(
                    descriptor, linked, fd.foreign_key.attribute  # type: ignore[union-attr]
                )
            else:
                value = self._get(descriptor, record, fd.attribute)
            try:
                fd.codec.write(fd.column, row, value)
            except (TypeError, ValueError) as e:
                raise ColumnValueError(descriptor.name, fd.column, str(e)) from e
        return row

    def from_row(
        self,
        row: Any,
        target: T,
        columns: Iterable[str] | None = None,
    ) -> T:
        """Populate *target* from *row*.

        Columns missing from *row* are skipped, so rows produced by an older
        schema still load.

        Args:
            row: A RowReader, a dict-like row or a ``sqlite3.Row``.
            target: Record instance to fill in place.
            columns: Columns to read. Defaults to every column.

        Raises:
            AccessError: If an attribute of the record cannot be set.
            InstantiationError: If a linked record cannot be constructed.
            ColumnValueError: If a codec rejects a column value.
        """
        descriptor = self._descriptors.describe(type(target))
        selected = self._select(descriptor, columns, True, True)
        reader = as_row_reader(row)

        for fd in descriptor.fields:
            if fd.column not in selected:
                continue
            index = reader.column_index(fd.column)
            if index is None:
                continue
            raw = reader.value(index)
            try:
                value = fd.codec.read(raw)
            except (TypeError, ValueError) as e:
                raise ColumnValueError(descriptor.name, fd.column, str(e)) from e

            if fd.is_foreign:
                self._set_foreign(descriptor, target, fd, value)
            else:
                self._set(descriptor, target, fd.attribute, value)
        return target

    def load(self, row: Any, record_type: type[T], columns: Iterable[str] | None = None) -> T:
        """Construct a fresh *record_type* instance and populate it from *row*."""
        record = self._descriptors.describe(record_type).new_instance()
        return self.from_row(row, record, columns)

    def load_many(
        self, rows: Iterable[Any], record_type: type[T], columns: Iterable[str] | None = None
    ) -> list[T]:
        """Map all rows via load."""
        return [self.load(row, record_type, columns) for row in rows]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _select(
        descriptor: EntityDescriptor,
        columns: Iterable[str] | None,
        include_id: bool,
        include_foreign_keys: bool,
    ) -> set[str]:
        if columns is None:
            return set(descriptor.columns(include_id, include_foreign_keys))
        return set(columns)

    def _set_foreign(
        self, descriptor: EntityDescriptor, target: Any, fd: FieldDescriptor, value: Any
    ) -> None:
        linked = self._get(descriptor, target, fd.attribute)
        if linked is None:
            if value is None:
                return
            try:
                linked = self._descriptors.describe(fd.declared_type).new_instance()
            except InstantiationError as e:
                raise InstantiationError(
                    e.type_name, str(e.__cause__ or e), descriptor.name, fd.attribute
                ) from e
            self._set(descriptor, target, fd.attribute, linked)
        key = fd.foreign_key.attribute  # type: ignore[union-attr]
        self._set(descriptor, linked, key, value)

    def _get(self, descriptor: EntityDescriptor, instance: Any, attribute: str) -> Any:
        value = getattr(instance, attribute, _MISSING)
        if value is _MISSING:
            self._access_failed(descriptor, instance, attribute, "attribute is missing")
        return value

    def _set(self, descriptor: EntityDescriptor, instance: Any, attribute: str, value: Any) -> None:
        try:
            setattr(instance, attribute, value)
        except (AttributeError, TypeError, ValueError) as e:
            self._access_failed(descriptor, instance, attribute, str(e) or type(e).__name__, e)

    def _access_failed(
        self,
        descriptor: EntityDescriptor,
        instance: Any,
        attribute: str,
        detail: str,
        cause: BaseException | None = None,
    ) -> None:
        self._logger.error(
            "entity_access_failed",
            entity=descriptor.name,
            attribute=attribute,
            instance_type=type(instance).__qualname__,
            detail=detail,
        )
        raise AccessError(descriptor.name, attribute, detail) from cause
