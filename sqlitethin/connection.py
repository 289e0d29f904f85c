from __future__ import annotations

import ctypes
import logging
import os
import weakref
from typing import Optional

from .exceptions import InterfaceError, OpenError
from .native import (
    SQLITE_OK, SQLITE_OPEN_CREATE, SQLITE_OPEN_READONLY, SQLITE_OPEN_READWRITE,
    error_message, load_library,
)
from .statement import PreparedStatement

logger = logging.getLogger(__name__)


def _close_connection(lib, db_ptr, path):
    # close_v2 defers the release until outstanding statements are finalized.
    logger.debug("Closing database %s", path)
    lib.sqlite3_close_v2(db_ptr)


class Connection:
    """An open database file.

    The native handle is released exactly once: by :meth:`close`, by leaving a
    ``with`` block, or when the object is garbage collected. Statements
    prepared from a connection are finalized when it is closed.
    """

    def __init__(self, path, *, read_only: bool = False, busy_timeout: Optional[int] = None):
        self._lib = load_library()

        self._path = os.fspath(path)
        raw_path = self._path.encode("utf-8") if isinstance(self._path, str) else self._path
        flags = SQLITE_OPEN_READONLY if read_only else SQLITE_OPEN_READWRITE | SQLITE_OPEN_CREATE

        db = ctypes.c_void_p()
        res = self._lib.sqlite3_open_v2(raw_path, ctypes.byref(db), flags, None)
        if res != SQLITE_OK or not db.value:
            # sqlite hands back a handle even when open fails; it still has to be closed.
            try:
                message = error_message(self._lib, db.value)
                code = self._lib.sqlite3_extended_errcode(db.value) if db.value else res
            finally:
                if db.value:
                    self._lib.sqlite3_close_v2(db.value)
            raise OpenError(message, code=code)

        self._db = db.value
        self._finalizer = weakref.finalize(self, _close_connection, self._lib, self._db, self._path)
        self._statements = weakref.WeakSet()

        if busy_timeout is not None:
            self._lib.sqlite3_busy_timeout(self._db, int(busy_timeout))

        logger.debug("Opened database %s", self._path)

    @classmethod
    def open(cls, path, **options) -> Connection:
        return cls(path, **options)

    @property
    def path(self):
        return self._path

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def close(self) -> None:
        if not self._finalizer.alive:
            return
        for stmt in list(self._statements):
            stmt.close()
        self._finalizer()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _handle(self):
        if not self._finalizer.alive:
            raise InterfaceError("Connection is closed")
        return self._db

    def prepare(self, sql: str) -> PreparedStatement:
        stmt = PreparedStatement(self, sql)
        self._statements.add(stmt)
        logger.debug("Prepared statement: %s", sql)
        return stmt

    def execute(self, sql: str) -> None:
        """Prepare and run a single statement that takes no parameters."""
        with self.prepare(sql) as stmt:
            stmt.execute()

    def changes(self) -> int:
        """Rows modified by the most recent INSERT, UPDATE or DELETE."""
        return self._lib.sqlite3_changes(self._handle())

    def last_insert_rowid(self) -> int:
        return self._lib.sqlite3_last_insert_rowid(self._handle())

    def exists(self, type: str, name: str) -> bool:
        """Whether a schema object of ``type`` called ``name`` exists.

        Both the main and the temp schema are checked. Identifiers are
        case-insensitive but case-preserving, so names are compared
        lower-cased.
        """
        name = name.lower()

        for catalog in ("sqlite_master", "sqlite_temp_master"):
            with self.prepare(f"SELECT 1 FROM {catalog} WHERE type = :type AND LOWER(name) = :name") as stmt:
                if not stmt.bind(":type", type).bind(":name", name).query_empty():
                    return True

        return False

    def table_exists(self, name: str) -> bool:
        return self.exists(type="table", name=name)


def connect(path, **options) -> Connection:
    return Connection(path, **options)
