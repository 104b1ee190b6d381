"""Destination cells and the destination resolver."""

from __future__ import annotations

from typing import Any

from typed_optional.errors import ERROR_PREFIX, InvalidDestinationError
from typed_optional.types import Kind, TypeDefinition

_UNSET: Any = object()


class Ref:
    """Mutable storage location of a known type.

    A Ref is the destination handle handed to the scan rules, and the value
    held by a pointer type. When no value is given it holds the zero value of
    its type.
    """

    __slots__ = ("type_def", "value")

    def __init__(self, type_def: TypeDefinition, value: Any = _UNSET) -> None:
        self.type_def = type_def
        self.value = type_def.zero_value() if value is _UNSET else value

    @property
    def kind(self) -> Kind:
        return self.type_def.kind

    def get(self) -> Any:
        """Return the stored value."""
        return self.value

    def set(self, value: Any) -> None:
        """Replace the stored value."""
        self.value = value

    def __repr__(self) -> str:
        return f"Ref({self.type_def.name!r}, {self.value!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ref):
            return NotImplemented
        return self.type_def == other.type_def and self.value == other.value

    __hash__ = None  # type: ignore[assignment]


def resolve_destination(dest: Any) -> tuple[Ref, Kind]:
    """Resolve a destination handle to its storage cell and structural kind.

    Raises InvalidDestinationError if dest is not a Ref or is None.
    """
    if dest is None:
        raise InvalidDestinationError(f"{ERROR_PREFIX}: dest pointer is nil")
    if not isinstance(dest, Ref):
        raise InvalidDestinationError(f"{ERROR_PREFIX}: dest not a pointer")
    return dest, dest.type_def.kind


def deref(value: Any) -> Any:
    """Follow pointer cells down to the value they hold; None stays None."""
    while isinstance(value, Ref):
        value = value.value
    return value
