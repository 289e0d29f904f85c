"""Thin typed access layer over the SQLite C library.

    with sqlitethin.connect("app.db") as db:
        db.execute("CREATE TABLE test(col TEXT NOT NULL, i INT NOT NULL, n INT)")
        (db.prepare("INSERT INTO test VALUES (:col, :i, :n)")
            .bind(":col", "Test content")
            .bind(":i", Int32(42))
            .bind(":n", Int32(None))
            .execute())
        rows = db.prepare("SELECT * FROM test").query(lambda row: row.text("col"))
"""

import logging

from .connection import Connection, connect
from .exceptions import (
    BindError, Error, InterfaceError, OpenError, PrepareError, ResultError, StepError,
)
from .native import load_library
from .row import ColumnType, RowView
from .statement import PreparedStatement
from .values import Double, Int32, Int64, Text

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())


def sqlite_version() -> str:
    """Version string of the loaded sqlite library."""
    return load_library().sqlite3_libversion().decode("ascii")


__all__ = [
    "Connection",
    "connect",
    "PreparedStatement",
    "RowView",
    "ColumnType",
    "Int32",
    "Int64",
    "Double",
    "Text",
    "Error",
    "InterfaceError",
    "OpenError",
    "PrepareError",
    "BindError",
    "StepError",
    "ResultError",
    "sqlite_version",
]
