import ctypes
import ctypes.util
import importlib.util
import logging
import os
import sys
from ctypes import c_int, c_int64, c_double, c_char_p, c_void_p, POINTER

logger = logging.getLogger(__name__)

# Result codes (must match sqlite3.h).
SQLITE_OK = 0
SQLITE_RANGE = 25
SQLITE_ROW = 100
SQLITE_DONE = 101

# Flags for sqlite3_open_v2
SQLITE_OPEN_READONLY = 0x00000001
SQLITE_OPEN_READWRITE = 0x00000002
SQLITE_OPEN_CREATE = 0x00000004

# Fundamental datatypes reported by sqlite3_column_type
SQLITE_INTEGER = 1
SQLITE_FLOAT = 2
SQLITE_TEXT = 3
SQLITE_BLOB = 4
SQLITE_NULL = 5

# Destructor sentinel telling sqlite to copy bound text before returning.
SQLITE_TRANSIENT = c_void_p(-1)

_lib = None


def _candidates():
    lib_names = [
        "libsqlite3.so.0",
        "libsqlite3.so",
        "libsqlite3.dylib",
        "sqlite3.dll",
    ]

    found = ctypes.util.find_library("sqlite3")
    if found:
        yield found

    for name in lib_names:
        yield name

    # Windows ships sqlite3.dll next to the interpreter's extension modules.
    yield os.path.join(sys.base_prefix, "DLLs", "sqlite3.dll")

    # Last resort: the interpreter's own sqlite extension. It either links the
    # shared library (symbols resolve through its dependencies) or embeds it.
    spec = importlib.util.find_spec("_sqlite3")
    if spec is not None and spec.origin:
        yield spec.origin


def _open_candidate(path):
    try:
        lib = ctypes.CDLL(path)
    except OSError:
        return None
    if not hasattr(lib, "sqlite3_prepare_v2"):
        return None
    return lib


def load_library():
    global _lib
    if _lib is not None:
        return _lib

    lib_path = os.environ.get("SQLITETHIN_NATIVE_LIB")

    if lib_path:
        try:
            lib = ctypes.CDLL(lib_path)
        except OSError as e:
            raise RuntimeError(f"Failed to load sqlite native library at {lib_path}: {e}")
    else:
        lib = None
        for candidate in _candidates():
            lib = _open_candidate(candidate)
            if lib is not None:
                lib_path = candidate
                break

    if lib is None:
        raise RuntimeError("Could not find sqlite native library. Set SQLITETHIN_NATIVE_LIB env var.")

    # Define signatures

    lib.sqlite3_libversion.argtypes = []
    lib.sqlite3_libversion.restype = c_char_p

    # Connections
    lib.sqlite3_open_v2.argtypes = [c_char_p, POINTER(c_void_p), c_int, c_char_p]
    lib.sqlite3_open_v2.restype = c_int

    lib.sqlite3_close_v2.argtypes = [c_void_p]
    lib.sqlite3_close_v2.restype = c_int

    lib.sqlite3_errmsg.argtypes = [c_void_p]
    lib.sqlite3_errmsg.restype = c_char_p

    lib.sqlite3_extended_errcode.argtypes = [c_void_p]
    lib.sqlite3_extended_errcode.restype = c_int

    lib.sqlite3_busy_timeout.argtypes = [c_void_p, c_int]
    lib.sqlite3_busy_timeout.restype = c_int

    lib.sqlite3_changes.argtypes = [c_void_p]
    lib.sqlite3_changes.restype = c_int

    lib.sqlite3_last_insert_rowid.argtypes = [c_void_p]
    lib.sqlite3_last_insert_rowid.restype = c_int64

    # Statements
    lib.sqlite3_prepare_v2.argtypes = [c_void_p, c_char_p, c_int, POINTER(c_void_p), POINTER(c_void_p)]
    lib.sqlite3_prepare_v2.restype = c_int

    lib.sqlite3_finalize.argtypes = [c_void_p]
    lib.sqlite3_finalize.restype = c_int

    lib.sqlite3_reset.argtypes = [c_void_p]
    lib.sqlite3_reset.restype = c_int

    lib.sqlite3_clear_bindings.argtypes = [c_void_p]
    lib.sqlite3_clear_bindings.restype = c_int

    lib.sqlite3_step.argtypes = [c_void_p]
    lib.sqlite3_step.restype = c_int

    # Bindings
    lib.sqlite3_bind_null.argtypes = [c_void_p, c_int]
    lib.sqlite3_bind_null.restype = c_int

    lib.sqlite3_bind_int.argtypes = [c_void_p, c_int, c_int]
    lib.sqlite3_bind_int.restype = c_int

    lib.sqlite3_bind_int64.argtypes = [c_void_p, c_int, c_int64]
    lib.sqlite3_bind_int64.restype = c_int

    lib.sqlite3_bind_double.argtypes = [c_void_p, c_int, c_double]
    lib.sqlite3_bind_double.restype = c_int

    lib.sqlite3_bind_text.argtypes = [c_void_p, c_int, c_char_p, c_int, c_void_p]
    lib.sqlite3_bind_text.restype = c_int

    lib.sqlite3_bind_parameter_index.argtypes = [c_void_p, c_char_p]
    lib.sqlite3_bind_parameter_index.restype = c_int

    lib.sqlite3_bind_parameter_count.argtypes = [c_void_p]
    lib.sqlite3_bind_parameter_count.restype = c_int

    # Columns
    lib.sqlite3_column_count.argtypes = [c_void_p]
    lib.sqlite3_column_count.restype = c_int

    lib.sqlite3_column_name.argtypes = [c_void_p, c_int]
    lib.sqlite3_column_name.restype = c_char_p

    lib.sqlite3_column_type.argtypes = [c_void_p, c_int]
    lib.sqlite3_column_type.restype = c_int

    lib.sqlite3_column_int.argtypes = [c_void_p, c_int]
    lib.sqlite3_column_int.restype = c_int

    lib.sqlite3_column_int64.argtypes = [c_void_p, c_int]
    lib.sqlite3_column_int64.restype = c_int64

    lib.sqlite3_column_double.argtypes = [c_void_p, c_int]
    lib.sqlite3_column_double.restype = c_double

    # Returned as a raw pointer; decoded with sqlite3_column_bytes.
    lib.sqlite3_column_text.argtypes = [c_void_p, c_int]
    lib.sqlite3_column_text.restype = c_void_p

    lib.sqlite3_column_bytes.argtypes = [c_void_p, c_int]
    lib.sqlite3_column_bytes.restype = c_int

    logger.debug("Loaded sqlite %s from %s", lib.sqlite3_libversion().decode("ascii"), lib_path)

    _lib = lib
    return _lib


def error_message(lib, db_handle):
    """Last error text of a connection handle, decoded."""
    msg = lib.sqlite3_errmsg(db_handle) if db_handle else None
    if not msg:
        return "No error message provided from sqlite."
    return msg.decode("utf-8", errors="replace")
