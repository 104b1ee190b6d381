"""Zero-conversion assignment between values sharing a representation."""

from __future__ import annotations

from typing import Any

from typed_optional.destination import Ref
from typed_optional.types import Kind, TypeDefinition


def clone_value(value: Any) -> Any:
    """Copy byte buffers so a destination never aliases caller-owned memory."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    return value


def is_assignable(src_type: TypeDefinition, dest_type: TypeDefinition) -> bool:
    """Return whether a value of src_type can be stored as-is in dest_type."""
    return dest_type.kind is Kind.ANY or src_type == dest_type


def is_convertible(src_type: TypeDefinition, dest_type: TypeDefinition) -> bool:
    """Return whether src_type converts to dest_type without changing representation.

    Both types must share a structural kind. Primitives of the same kind always
    share a representation; arrays need matching element kinds; composites need
    the same backing class.
    """
    if src_type.kind is not dest_type.kind:
        return False
    src_base = src_type.resolve_base_type()
    dest_base = dest_type.resolve_base_type()
    kind = src_type.kind
    if kind.is_primitive:
        return True
    if kind is Kind.ARRAY:
        return src_base.element_type.kind is dest_base.element_type.kind  # type: ignore[attr-defined]
    if kind is Kind.COMPOSITE:
        return src_base.factory is dest_base.factory  # type: ignore[attr-defined]
    return False


def try_fast_assign(src: Any, src_type: TypeDefinition, dest: Ref) -> bool:
    """Assign src directly into dest where the types allow, returning whether it did."""
    if is_assignable(src_type, dest.type_def) or is_convertible(src_type, dest.type_def):
        dest.value = clone_value(src)
        return True
    return False
