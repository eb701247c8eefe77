"""Row reader protocol.

A row reader exposes the columns of one result row by name. The row codec
only reads columns the reader reports as present.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class RowReader(Protocol):
    """Base row reader protocol."""

    def column_index(self, name: str) -> int | None:
        """Return the position of column *name*, or None if absent."""
        ...

    def value(self, index: int) -> Any:
        """Return the raw value at *index* (None for SQL NULL)."""
        ...


class SequenceRowReader:
    """Reads a tuple-like row using an ordered list of column names."""

    def __init__(self, columns: Sequence[str], values: Sequence[Any]) -> None:
        if len(columns) != len(values):
            raise ValueError(
                f"row has {len(values)} values for {len(columns)} columns"
            )
        self._positions = {name: i for i, name in enumerate(columns)}
        self._values = values

    def column_index(self, name: str) -> int | None:
        return self._positions.get(name)

    def value(self, index: int) -> Any:
        return self._values[index]


class MappingRowReader(SequenceRowReader):
    """Reads dict rows and ``sqlite3.Row`` objects (anything with ``keys()``)."""

    def __init__(self, row: Any) -> None:
        columns = list(row.keys())
        super().__init__(columns, [row[name] for name in columns])


def as_row_reader(row: Any, columns: Sequence[str] | None = None) -> RowReader:
    """Wrap *row* in a RowReader.

    Handles row readers, dict-like rows and, when *columns* is given,
    tuple-like rows.
    """
    if isinstance(row, RowReader):
        return row
    if hasattr(row, "keys"):
        return MappingRowReader(row)
    if columns is not None:
        return SequenceRowReader(columns, row)
    raise TypeError(
        f"cannot read columns from {type(row).__name__}; pass the column names "
        "for tuple-like rows"
    )
