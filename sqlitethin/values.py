"""Typed bind values.

Each kind wraps either a value or ``None``; a ``None`` payload is a typed
null and is bound with the engine's null binder.
"""

from __future__ import annotations

import dataclasses
from typing import Optional, Union

from .exceptions import BindError

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


@dataclasses.dataclass(frozen=True)
class Int32:
    value: Optional[int] = None


@dataclasses.dataclass(frozen=True)
class Int64:
    value: Optional[int] = None


@dataclasses.dataclass(frozen=True)
class Double:
    value: Optional[float] = None


@dataclasses.dataclass(frozen=True)
class Text:
    value: Optional[str] = None


BindValue = Union[Int32, Int64, Double, Text]


def _check_range(value: int, lo: int, hi: int, kind: str) -> None:
    if not lo <= value <= hi:
        raise BindError(f"Value {value} out of range for {kind}")


def to_bind_value(value) -> Optional[BindValue]:
    """Map a plain Python value (or an already typed one) to a bind value.

    Returns ``None`` for an untyped null. Payload types and integer ranges
    are checked here, before any engine call.
    """
    match value:
        case None:
            return None
        case Int32(value=int() as v):
            _check_range(v, INT32_MIN, INT32_MAX, "32-bit integer")
            return value
        case Int64(value=int() as v):
            _check_range(v, INT64_MIN, INT64_MAX, "64-bit integer")
            return value
        case Double(value=float()) | Text(value=str()):
            return value
        case Double(value=int() as v):
            try:
                float(v)
            except OverflowError:
                raise BindError(f"Value {v} out of range for double") from None
            return value
        case Int32(value=None) | Int64(value=None) | Double(value=None) | Text(value=None):
            return value
        case Int32(value=v) | Int64(value=v) | Double(value=v) | Text(value=v):
            raise BindError(f"Unsupported {type(value).__name__} payload type: {type(v).__name__}")
        case bool() | int():
            _check_range(int(value), INT64_MIN, INT64_MAX, "64-bit integer")
            return Int64(int(value))
        case float():
            return Double(value)
        case str():
            return Text(value)
        case _:
            raise BindError(f"Unsupported bind value type: {type(value).__name__}")
