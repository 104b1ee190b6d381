"""Coercion of driver source values into typed destinations.

Each wire source type (bool, float64, int64, string, bytes, timestamp) has a
scan function that resolves the destination, tries a zero-conversion fast
path and otherwise applies the rules for that source type:

    source      legal destination kinds
    ---------   ---------------------------------------------------------
    bool        bool, string, bytes, any
    float64     float32/64, every integer width, string, bytes, any
    int64       every integer width, bool (0 or 1), float32/64,
                string, bytes, any
    string      string, bool, every numeric kind, bytes, any
    bytes       same as string
    timestamp   timestamp, string, bytes, any

Pointer destinations are allocated one level deep and only assigned once the
pointee has been scanned successfully. Destinations implementing ``scan`` take
over entirely. Everything else raises UnsupportedDestinationError.
"""

from __future__ import annotations

import copy
import logging
import math
import re
import struct
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable

from typed_optional.assign import clone_value, try_fast_assign
from typed_optional.destination import Ref, resolve_destination
from typed_optional.errors import (
    ParseError,
    PrecisionLossError,
    RangeError,
    UnsupportedDestinationError,
)
from typed_optional.types import (
    BOOL,
    BYTES,
    FLOAT64,
    INT64,
    STRING,
    TIMESTAMP,
    Kind,
    TypeDefinition,
)

logger = logging.getLogger(__name__)


class WireType(Enum):
    """Source value shapes accepted from a database driver."""

    BOOL = "bool"
    FLOAT64 = "float64"
    INT64 = "int64"
    STRING = "string"
    BYTES = "bytes"
    TIMESTAMP = "timestamp"
    NIL = "nil"
    OTHER = "other"


# Type definition each wire type is assigned as on the fast path
WIRE_TYPE_DEFINITIONS: dict[WireType, TypeDefinition] = {
    WireType.BOOL: BOOL,
    WireType.FLOAT64: FLOAT64,
    WireType.INT64: INT64,
    WireType.STRING: STRING,
    WireType.BYTES: BYTES,
    WireType.TIMESTAMP: TIMESTAMP,
}

_INT64_MIN, _INT64_MAX = Kind.INT64.integer_range()
# Digits in the widest integer kind (uint64)
_MAX_INT_DIGITS = 20

# Strict base-10 grammars: no surrounding whitespace, no digit separators
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_FLOAT_PATTERN = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?|nan)",
    re.IGNORECASE,
)

_TRUE_LITERALS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_LITERALS = frozenset({"0", "f", "F", "FALSE", "false", "False"})

# Destination kinds that consume the text form of string and bytes sources
_TEXT_KINDS = frozenset(
    {
        Kind.BOOL,
        Kind.INT,
        Kind.INT8,
        Kind.INT16,
        Kind.INT32,
        Kind.INT64,
        Kind.UINT,
        Kind.UINT8,
        Kind.UINT16,
        Kind.UINT32,
        Kind.UINT64,
        Kind.FLOAT32,
        Kind.FLOAT64,
        Kind.STRING,
    }
)


def classify_source(src: Any) -> WireType:
    """Return the wire type of a driver source value.

    bool is checked before int since it is a subclass of it. Integers outside
    the int64 range are not a wire type.
    """
    if src is None:
        return WireType.NIL
    if isinstance(src, bool):
        return WireType.BOOL
    if isinstance(src, int):
        if _INT64_MIN <= src <= _INT64_MAX:
            return WireType.INT64
        return WireType.OTHER
    if isinstance(src, float):
        return WireType.FLOAT64
    if isinstance(src, str):
        return WireType.STRING
    if isinstance(src, (bytes, bytearray, memoryview)):
        return WireType.BYTES
    if isinstance(src, datetime):
        return WireType.TIMESTAMP
    return WireType.OTHER


def format_bool(value: bool) -> str:
    return "true" if value else "false"


def format_float(value: float) -> str:
    """Return the shortest text that round-trips to the same float64."""
    return repr(value)


def format_timestamp(value: datetime) -> str:
    """Format a timestamp as RFC 3339 with trailing fractional zeros trimmed.

    Naive datetimes are taken to be UTC. A UTC offset is written as 'Z'.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = f"{value.year:04d}-{value.month:02d}-{value.day:02d}T{value:%H:%M:%S}"
    if value.microsecond:
        text += "." + f"{value.microsecond:06d}".rstrip("0")
    offset = value.utcoffset()
    if not offset:
        return text + "Z"
    minutes = int(offset.total_seconds()) // 60
    sign = "+" if minutes >= 0 else "-"
    hours, minutes = divmod(abs(minutes), 60)
    return f"{text}{sign}{hours:02d}:{minutes:02d}"


def _check_integer(src: Any, text: str, value: int, dest: Ref, kind: Kind) -> int:
    """Return value if it fits the destination's integer width."""
    low, high = kind.integer_range()
    if value < low or value > high:
        raise RangeError(src, text, dest.type_def, kind)
    return value


def _to_float32(src: Any, text: str, value: float, dest: Ref, kind: Kind) -> float:
    """Round value to the nearest float32, raising if it overflows."""
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError as exc:
        raise RangeError(src, text, dest.type_def, kind) from exc


def _float_to_int(src: Any, text: str, value: float, dest: Ref, kind: Kind) -> int:
    if math.isinf(value):
        raise RangeError(src, text, dest.type_def, kind)
    if not value.is_integer():
        raise PrecisionLossError(src, text, dest.type_def, kind)
    return _check_integer(src, text, int(value), dest, kind)


def _parse_bool(src: Any, text: str, dest: Ref, kind: Kind) -> bool:
    if text in _TRUE_LITERALS:
        return True
    if text in _FALSE_LITERALS:
        return False
    raise ParseError(src, text, dest.type_def, kind)


def _parse_int(src: Any, text: str, dest: Ref, kind: Kind) -> int:
    if not _INT_PATTERN.fullmatch(text):
        raise ParseError(src, text, dest.type_def, kind)
    if len(text.lstrip("+-").lstrip("0")) > _MAX_INT_DIGITS:
        raise RangeError(src, text, dest.type_def, kind)
    return _check_integer(src, text, int(text), dest, kind)


def _parse_float(src: Any, text: str, dest: Ref, kind: Kind) -> float:
    if not _FLOAT_PATTERN.fullmatch(text):
        raise ParseError(src, text, dest.type_def, kind)
    value = float(text)
    if math.isinf(value) and "inf" not in text.lower():
        raise RangeError(src, text, dest.type_def, kind)
    if kind is Kind.FLOAT32:
        return _to_float32(src, text, value, dest, kind)
    return value


def _decode_text(src: bytes, dest: Ref, kind: Kind) -> str:
    try:
        return bytes(src).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError(src, repr(bytes(src)), dest.type_def, kind, reason="invalid UTF-8") from exc


def _scan_into_pointer(scan: Callable[[Any, Any], bool], src: Any, dest: Ref) -> bool:
    """Scan src into a freshly allocated pointee and point dest at it on success."""
    target = dest.type_def.resolve_base_type().target  # type: ignore[attr-defined]
    logger.debug("Allocating %s for pointer destination %s", target.name, dest.type_def.name)
    cell = Ref(target)
    assigned = scan(src, cell)
    dest.value = cell
    return assigned


def scan_with_scanner(src: Any, dest: Ref) -> bool:
    """Hand src to the destination's own scan method.

    The scan runs on a shallow copy of the current value, or on a new
    instance when there is none, and dest is only updated once it succeeds.
    Whatever the scanner raises is propagated unchanged.
    """
    if dest.value is None:
        instance = dest.type_def.resolve_base_type().new_instance()  # type: ignore[attr-defined]
    else:
        instance = copy.copy(dest.value)
    logger.debug("Delegating scan of %s to %s", type(src).__name__, dest.type_def.name)
    instance.scan(src)
    dest.value = instance
    return True


def _fallback(src: Any, dest: Ref, kind: Kind) -> bool:
    """Delegate to a custom scanner or reject the destination."""
    if kind is Kind.COMPOSITE and dest.type_def.is_scanner:
        return scan_with_scanner(src, dest)
    raise UnsupportedDestinationError(src, dest.type_def, kind)


def scan_bool(src: bool, dest: Any) -> bool:
    """Assign a bool source value into the given destination."""
    ref, kind = resolve_destination(dest)
    if try_fast_assign(src, BOOL, ref):
        return True
    return _coerce_bool(src, ref, kind)


def _coerce_bool(src: bool, dest: Ref, kind: Kind) -> bool:
    if kind is Kind.POINTER:
        return _scan_into_pointer(scan_bool, src, dest)
    if kind is Kind.STRING:
        dest.value = format_bool(src)
        return True
    if dest.type_def.is_bytes:
        dest.value = format_bool(src).encode("ascii")
        return True
    return _fallback(src, dest, kind)


def scan_float(src: float, dest: Any) -> bool:
    """Assign a float64 source value into the given destination."""
    ref, kind = resolve_destination(dest)
    if try_fast_assign(src, FLOAT64, ref):
        return True
    return _coerce_float(src, ref, kind)


def _coerce_float(src: float, dest: Ref, kind: Kind) -> bool:
    if kind is Kind.POINTER:
        return _scan_into_pointer(scan_float, src, dest)
    if kind is Kind.FLOAT32:
        dest.value = _to_float32(src, format_float(src), src, dest, kind)
        return True
    if kind.is_integer:
        dest.value = _float_to_int(src, format_float(src), src, dest, kind)
        return True
    if kind is Kind.STRING:
        dest.value = format_float(src)
        return True
    if dest.type_def.is_bytes:
        dest.value = format_float(src).encode("ascii")
        return True
    return _fallback(src, dest, kind)


def scan_int(src: int, dest: Any) -> bool:
    """Assign an int64 source value into the given destination."""
    ref, kind = resolve_destination(dest)
    if try_fast_assign(src, INT64, ref):
        return True
    return _coerce_int(src, ref, kind)


def _coerce_int(src: int, dest: Ref, kind: Kind) -> bool:
    if kind is Kind.POINTER:
        return _scan_into_pointer(scan_int, src, dest)
    if kind.is_integer:
        dest.value = _check_integer(src, str(src), src, dest, kind)
        return True
    if kind is Kind.BOOL:
        if src not in (0, 1):
            raise RangeError(src, str(src), dest.type_def, kind)
        dest.value = src == 1
        return True
    if kind is Kind.FLOAT32:
        dest.value = _to_float32(src, str(src), float(src), dest, kind)
        return True
    if kind is Kind.FLOAT64:
        dest.value = float(src)
        return True
    if kind is Kind.STRING:
        dest.value = str(src)
        return True
    if dest.type_def.is_bytes:
        dest.value = str(src).encode("ascii")
        return True
    return _fallback(src, dest, kind)


def _coerce_text(src: Any, text: str, dest: Ref, kind: Kind) -> bool:
    """Parse text (from a string or bytes source) into a text-consuming kind."""
    if kind is Kind.STRING:
        dest.value = text
    elif kind is Kind.BOOL:
        dest.value = _parse_bool(src, text, dest, kind)
    elif kind.is_integer:
        dest.value = _parse_int(src, text, dest, kind)
    else:
        dest.value = _parse_float(src, text, dest, kind)
    return True


def scan_string(src: str, dest: Any) -> bool:
    """Assign a string source value into the given destination."""
    ref, kind = resolve_destination(dest)
    if try_fast_assign(src, STRING, ref):
        return True
    return _coerce_string(src, ref, kind)


def _coerce_string(src: str, dest: Ref, kind: Kind) -> bool:
    if kind is Kind.POINTER:
        return _scan_into_pointer(scan_string, src, dest)
    if kind in _TEXT_KINDS:
        return _coerce_text(src, src, dest, kind)
    if dest.type_def.is_bytes:
        dest.value = src.encode("utf-8")
        return True
    return _fallback(src, dest, kind)


def scan_bytes(src: bytes, dest: Any) -> bool:
    """Assign a byte sequence source value into the given destination.

    The destination never shares the source buffer.
    """
    ref, kind = resolve_destination(dest)
    if try_fast_assign(src, BYTES, ref):
        return True
    return _coerce_bytes(src, ref, kind)


def _coerce_bytes(src: bytes, dest: Ref, kind: Kind) -> bool:
    if kind is Kind.POINTER:
        return _scan_into_pointer(scan_bytes, src, dest)
    if kind in _TEXT_KINDS:
        return _coerce_text(src, _decode_text(src, dest, kind), dest, kind)
    if dest.type_def.is_bytes:
        dest.value = clone_value(src)
        return True
    return _fallback(src, dest, kind)


def scan_time(src: datetime, dest: Any) -> bool:
    """Assign a timestamp source value into the given destination."""
    ref, kind = resolve_destination(dest)
    if try_fast_assign(src, TIMESTAMP, ref):
        return True
    return _coerce_time(src, ref, kind)


def _coerce_time(src: datetime, dest: Ref, kind: Kind) -> bool:
    if kind is Kind.POINTER:
        return _scan_into_pointer(scan_time, src, dest)
    if kind is Kind.STRING:
        dest.value = format_timestamp(src)
        return True
    if dest.type_def.is_bytes:
        dest.value = format_timestamp(src).encode("ascii")
        return True
    return _fallback(src, dest, kind)


def scan_other(src: Any, dest: Any) -> bool:
    """Assign a value that is not a wire type; only untyped or scanner destinations accept it."""
    ref, kind = resolve_destination(dest)
    if kind is Kind.ANY:
        ref.value = src
        return True
    if kind is Kind.POINTER:
        return _scan_into_pointer(scan_other, src, ref)
    return _fallback(src, ref, kind)


def scan_value(src: Any, dest: Any) -> bool:
    """Assign any driver source value into the given destination.

    Returns True when a value was assigned. A None source resets the
    destination to its zero value and returns False without raising.
    """
    wire = classify_source(src)
    if wire is WireType.NIL:
        ref, _ = resolve_destination(dest)
        ref.value = ref.type_def.zero_value()
        return False
    if wire is WireType.BOOL:
        return scan_bool(src, dest)
    if wire is WireType.FLOAT64:
        return scan_float(src, dest)
    if wire is WireType.INT64:
        return scan_int(src, dest)
    if wire is WireType.STRING:
        return scan_string(src, dest)
    if wire is WireType.BYTES:
        return scan_bytes(src, dest)
    if wire is WireType.TIMESTAMP:
        return scan_time(src, dest)
    return scan_other(src, dest)
