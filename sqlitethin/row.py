from __future__ import annotations

import ctypes
import enum
from typing import TYPE_CHECKING, Callable, Optional, TypeVar, Union

from .exceptions import ResultError
from .native import (
    SQLITE_BLOB, SQLITE_FLOAT, SQLITE_INTEGER, SQLITE_NULL, SQLITE_TEXT,
)

if TYPE_CHECKING:
    from .statement import PreparedStatement

T = TypeVar("T")
Column = Union[int, str]


class ColumnType(enum.IntEnum):
    """Storage class of a column value in the current row."""

    INTEGER = SQLITE_INTEGER
    FLOAT = SQLITE_FLOAT
    TEXT = SQLITE_TEXT
    BLOB = SQLITE_BLOB
    NULL = SQLITE_NULL


class RowView:
    """Accessor over the current result row of a statement.

    A RowView does not own anything and is only meaningful inside the row
    handler passed to :meth:`PreparedStatement.query`; reading it after the
    handler returns gives whatever row the statement is positioned on, if any.

    Columns are addressed by 0-based index or by name. Name lookups go through
    a name -> index map that is built on first use and kept on the statement.
    """

    __slots__ = ("_stmt", "_lib")

    def __init__(self, stmt: PreparedStatement):
        self._stmt = stmt
        self._lib = stmt._lib

    @property
    def column_count(self) -> int:
        return self._lib.sqlite3_column_count(self._stmt._ptr)

    def column_index(self, name: str) -> int:
        columns = self._stmt._load_columns()

        try:
            return columns[name]
        except KeyError:
            raise ResultError(f"Unknown column name: {name}") from None

    def _index(self, column: Column) -> int:
        if isinstance(column, str):
            return self.column_index(column)
        return column

    def column_type(self, column: Column) -> ColumnType:
        return ColumnType(self._lib.sqlite3_column_type(self._stmt._ptr, self._index(column)))

    def is_null(self, column: Column) -> bool:
        return self._lib.sqlite3_column_type(self._stmt._ptr, self._index(column)) == SQLITE_NULL

    def _optional(self, column: Column, getter: Callable[[int], T]) -> Optional[T]:
        idx = self._index(column)
        if self._lib.sqlite3_column_type(self._stmt._ptr, idx) == SQLITE_NULL:
            return None
        return getter(idx)

    def int(self, column: Column) -> int:
        """32-bit integer value, coerced by the engine."""
        return self._lib.sqlite3_column_int(self._stmt._ptr, self._index(column))

    def int64(self, column: Column) -> int:
        return self._lib.sqlite3_column_int64(self._stmt._ptr, self._index(column))

    def double(self, column: Column) -> float:
        return self._lib.sqlite3_column_double(self._stmt._ptr, self._index(column))

    def text(self, column: Column) -> str:
        """UTF-8 text value. A NULL column reads as an empty string."""
        idx = self._index(column)
        ptr = self._stmt._ptr
        # column_text must come before column_bytes so the length matches
        # the converted text.
        data = self._lib.sqlite3_column_text(ptr, idx)
        if not data:
            return ""
        length = self._lib.sqlite3_column_bytes(ptr, idx)
        return ctypes.string_at(data, length).decode("utf-8", errors="replace")

    def optional_int(self, column: Column) -> Optional[int]:
        return self._optional(column, self.int)

    def optional_int64(self, column: Column) -> Optional[int]:
        return self._optional(column, self.int64)

    def optional_double(self, column: Column) -> Optional[float]:
        return self._optional(column, self.double)

    def optional_text(self, column: Column) -> Optional[str]:
        return self._optional(column, self.text)
