"""Conversion of values into the neutral shapes a database driver accepts."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from typed_optional.destination import Ref
from typed_optional.errors import ERROR_PREFIX, DriverValueError
from typed_optional.types import Kind, TypeDefinition, Valuer, infer_type

_INT64_MIN, _INT64_MAX = Kind.INT64.integer_range()


def is_driver_value(value: Any) -> bool:
    """Return whether value is already a valid driver value.

    Driver values are None, bool, int64, float, str, bytes and datetime.
    """
    if value is None or isinstance(value, (bool, float, str, bytes, datetime)):
        return True
    if isinstance(value, int):
        return _INT64_MIN <= value <= _INT64_MAX
    return False


def to_driver_value(value: Any, type_def: TypeDefinition | None = None) -> Any:
    """Convert a value of the given type into a driver value.

    Values implementing ``driver_value`` encode themselves. Otherwise pointers
    are followed, integers of every width become int, floats become float and
    byte sequences become bytes.
    """
    if isinstance(value, Valuer):
        result = value.driver_value()
        if not is_driver_value(result):
            raise DriverValueError(
                f"{ERROR_PREFIX}: non-driver value type {type(result).__name__} returned from driver_value"
            )
        return result
    if value is None:
        return None
    if type_def is None:
        type_def = infer_type(value)
    kind = type_def.kind
    if kind is Kind.POINTER:
        if not isinstance(value, Ref):
            raise DriverValueError(f"{ERROR_PREFIX}: pointer type {type_def.name} holds a non-Ref value")
        return to_driver_value(value.value, value.type_def)
    if kind is Kind.BOOL:
        return bool(value)
    if kind.is_integer:
        value = int(value)
        if value > _INT64_MAX:
            raise DriverValueError(f"{ERROR_PREFIX}: uint64 values with high bit set are not supported")
        if value < _INT64_MIN:
            raise DriverValueError(f"{ERROR_PREFIX}: integer {value} is out of the int64 range")
        return value
    if kind.is_float:
        return float(value)
    if kind is Kind.STRING:
        return str(value)
    if type_def.is_bytes:
        return bytes(value)
    if kind is Kind.TIMESTAMP:
        return value
    if kind is Kind.ANY:
        inferred = infer_type(value)
        if inferred.kind is not Kind.ANY:
            return to_driver_value(value, inferred)
    raise DriverValueError(
        f"{ERROR_PREFIX}: unsupported type {type(value).__name__} ({type_def.name}), a {kind.value}"
    )
