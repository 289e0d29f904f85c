from __future__ import annotations

import ctypes
import logging
import weakref
from typing import TYPE_CHECKING, Callable, Optional, TypeVar, Union

from .exceptions import BindError, InterfaceError, PrepareError, ResultError, StepError
from .native import (
    SQLITE_DONE, SQLITE_OK, SQLITE_ROW, SQLITE_TRANSIENT, error_message, load_library,
)
from .row import RowView
from .values import Double, Int32, Int64, Text, to_bind_value

if TYPE_CHECKING:
    from .connection import Connection

logger = logging.getLogger(__name__)

R = TypeVar("R")
Parameter = Union[int, str]


def _finalize_statement(lib, stmt_ptr):
    logger.debug("Finalizing statement 0x%x", stmt_ptr)
    lib.sqlite3_finalize(stmt_ptr)


class PreparedStatement:
    """A compiled SQL statement.

    Statements are created by :meth:`Connection.prepare`. Parameters are bound
    with :meth:`bind` (chainable), then the statement is run with
    :meth:`execute`, :meth:`query` or :meth:`query_empty`. Each of those resets
    the statement before returning, whether it succeeded or raised, so the same
    object can be rebound and run again.

    The compiled handle is finalized exactly once: by :meth:`close`, by
    leaving a ``with`` block, when the owning connection is closed, or when the
    object is garbage collected.
    """

    def __init__(self, connection: Connection, sql: str):
        self._lib = load_library()
        db = connection._handle()

        stmt_ptr = ctypes.c_void_p()
        res = self._lib.sqlite3_prepare_v2(db, sql.encode("utf-8"), -1, ctypes.byref(stmt_ptr), None)
        # Empty or comment-only SQL compiles to no statement at all.
        if res != SQLITE_OK or not stmt_ptr.value:
            raise PrepareError(
                error_message(self._lib, db),
                code=self._lib.sqlite3_extended_errcode(db),
                sql=sql,
            )

        self._ptr = stmt_ptr.value
        self._db = db
        self._connection = weakref.ref(connection)
        self._sql = sql
        # Column names and name -> index, built on first use.
        self._column_names: Optional[list[str]] = None
        self._column_indexes: Optional[dict[str, int]] = None
        self._finalizer = weakref.finalize(self, _finalize_statement, self._lib, self._ptr)

    @property
    def sql(self) -> str:
        return self._sql

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def close(self) -> None:
        self._finalizer()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _handle(self):
        if not self._finalizer.alive:
            raise InterfaceError("Statement is closed", sql=self._sql)
        connection = self._connection()
        if connection is None or connection.closed:
            raise InterfaceError("Connection is closed", sql=self._sql)
        return self._ptr

    def _error(self, kind, message=None):
        return kind(
            message or error_message(self._lib, self._db),
            code=self._lib.sqlite3_extended_errcode(self._db),
            sql=self._sql,
        )

    @property
    def parameter_count(self) -> int:
        return self._lib.sqlite3_bind_parameter_count(self._handle())

    @property
    def column_count(self) -> int:
        return self._lib.sqlite3_column_count(self._handle())

    def _load_columns(self) -> dict[str, int]:
        # Column shape is fixed for a compiled statement, so names are read once.
        if self._column_indexes is None:
            names = []
            for idx in range(self._lib.sqlite3_column_count(self._ptr)):
                c_name = self._lib.sqlite3_column_name(self._ptr, idx)
                if c_name is None:
                    raise ResultError("Error while loading column names!", sql=self._sql)
                names.append(c_name.decode("utf-8"))
            self._column_names = names
            self._column_indexes = {name: idx for idx, name in enumerate(names)}
        return self._column_indexes

    @property
    def column_names(self) -> list[str]:
        self._handle()
        self._load_columns()
        return list(self._column_names)

    def bind(self, param: Parameter, value) -> PreparedStatement:
        """Bind ``value`` to a 1-based parameter index or a named parameter.

        ``value`` is an :class:`Int32`, :class:`Int64`, :class:`Double` or
        :class:`Text` (a ``None`` payload binds a null), or a plain ``None``,
        ``int``, ``float`` or ``str``. Names include their prefix, e.g.
        ``":name"``.
        """
        ptr = self._handle()
        bind_value = to_bind_value(value)

        if isinstance(param, str):
            idx = self._lib.sqlite3_bind_parameter_index(ptr, param.encode("utf-8"))
            if idx == 0:
                raise BindError(f"Bind parameter '{param}' not found!", sql=self._sql)
        else:
            idx = param

        lib = self._lib
        match bind_value:
            case None | Int32(value=None) | Int64(value=None) | Double(value=None) | Text(value=None):
                res = lib.sqlite3_bind_null(ptr, idx)
            case Int32(value=v):
                res = lib.sqlite3_bind_int(ptr, idx, v)
            case Int64(value=v):
                res = lib.sqlite3_bind_int64(ptr, idx, v)
            case Double(value=v):
                res = lib.sqlite3_bind_double(ptr, idx, v)
            case Text(value=v):
                b = v.encode("utf-8")
                res = lib.sqlite3_bind_text(ptr, idx, b, len(b), SQLITE_TRANSIENT)

        if res != SQLITE_OK:
            raise self._error(BindError)
        return self

    def clear_bindings(self) -> PreparedStatement:
        """Set every parameter back to null."""
        self._lib.sqlite3_clear_bindings(self._handle())
        return self

    def execute(self) -> None:
        """Run a statement that produces no rows.

        Returning a row counts as a failure, so rows are never silently
        discarded.
        """
        ptr = self._handle()
        try:
            if self._lib.sqlite3_step(ptr) != SQLITE_DONE:
                raise self._error(StepError)
        finally:
            self._lib.sqlite3_reset(ptr)

    def query(self, row_handler: Callable[[RowView], R]) -> list[R]:
        """Call ``row_handler`` for every result row and collect its results.

        Results are in the engine's row order. An exception from the handler
        propagates once the statement has been reset.
        """
        ptr = self._handle()
        results = []
        row = RowView(self)
        try:
            while True:
                rc = self._lib.sqlite3_step(ptr)
                if rc == SQLITE_ROW:
                    results.append(row_handler(row))
                elif rc == SQLITE_DONE:
                    break
                else:
                    raise self._error(StepError)
        finally:
            self._lib.sqlite3_reset(ptr)
        return results

    def query_empty(self) -> bool:
        """True if the statement yields no rows."""
        ptr = self._handle()
        try:
            rc = self._lib.sqlite3_step(ptr)
            if rc == SQLITE_ROW:
                return False
            if rc == SQLITE_DONE:
                return True
            raise self._error(StepError, "Unexpected state from step!")
        finally:
            self._lib.sqlite3_reset(ptr)
