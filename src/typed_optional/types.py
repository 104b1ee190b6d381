"""Type definitions for the typed_optional library."""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Protocol, runtime_checkable


class Kind(Enum):
    """Structural kinds a value or destination can resolve to."""

    BOOL = "bool"
    INT = "int"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT = "uint"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    STRING = "string"
    TIMESTAMP = "timestamp"
    ANY = "any"
    ARRAY = "array"
    POINTER = "pointer"
    COMPOSITE = "composite"

    @property
    def bits(self) -> int:
        """Return the width in bits for numeric kinds."""
        widths = {
            Kind.INT: 64,  # native width
            Kind.INT8: 8,
            Kind.INT16: 16,
            Kind.INT32: 32,
            Kind.INT64: 64,
            Kind.UINT: 64,
            Kind.UINT8: 8,
            Kind.UINT16: 16,
            Kind.UINT32: 32,
            Kind.UINT64: 64,
            Kind.FLOAT32: 32,
            Kind.FLOAT64: 64,
        }
        if self not in widths:
            raise TypeError(f"Kind '{self.value}' has no bit width")
        return widths[self]

    @property
    def is_signed_integer(self) -> bool:
        return self in SIGNED_INTEGER_KINDS

    @property
    def is_unsigned_integer(self) -> bool:
        return self in UNSIGNED_INTEGER_KINDS

    @property
    def is_integer(self) -> bool:
        return self.is_signed_integer or self.is_unsigned_integer

    @property
    def is_float(self) -> bool:
        return self in (Kind.FLOAT32, Kind.FLOAT64)

    @property
    def is_numeric(self) -> bool:
        return self.is_integer or self.is_float

    @property
    def is_primitive(self) -> bool:
        return self not in (Kind.ARRAY, Kind.POINTER, Kind.COMPOSITE)

    def integer_range(self) -> tuple[int, int]:
        """Return the inclusive (min, max) range for integer kinds."""
        bits = self.bits
        if self.is_signed_integer:
            return -(1 << (bits - 1)), (1 << (bits - 1)) - 1
        if self.is_unsigned_integer:
            return 0, (1 << bits) - 1
        raise TypeError(f"Kind '{self.value}' is not an integer kind")


SIGNED_INTEGER_KINDS = frozenset({Kind.INT, Kind.INT8, Kind.INT16, Kind.INT32, Kind.INT64})
UNSIGNED_INTEGER_KINDS = frozenset({Kind.UINT, Kind.UINT8, Kind.UINT16, Kind.UINT32, Kind.UINT64})

# Zero value for timestamps: 0001-01-01T00:00:00Z
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


@runtime_checkable
class Scanner(Protocol):
    """A value that knows how to assign a driver source value into itself.

    ``scan`` raises on failure; returning normally means the value was assigned.
    """

    def scan(self, src: Any) -> None: ...


@runtime_checkable
class Valuer(Protocol):
    """A value that knows how to encode itself as a driver value."""

    def driver_value(self) -> Any: ...


@dataclass
class TypeDefinition:
    """Base class for all type definitions."""

    name: str

    @property
    def kind(self) -> Kind:
        """Return the structural kind of this type."""
        raise NotImplementedError

    @property
    def is_pointer(self) -> bool:
        return self.kind is Kind.POINTER

    @property
    def is_bytes(self) -> bool:
        """Return whether this type is a byte sequence (an array of uint8)."""
        return False

    @property
    def is_scanner(self) -> bool:
        """Return whether values of this type implement the Scanner contract."""
        return False

    def resolve_base_type(self) -> TypeDefinition:
        """Resolve through aliases to get the underlying type."""
        return self

    def zero_value(self) -> Any:
        """Return the zero value for this type."""
        raise NotImplementedError


_PRIMITIVE_ZEROS: dict[Kind, Any] = {
    Kind.BOOL: False,
    Kind.FLOAT32: 0.0,
    Kind.FLOAT64: 0.0,
    Kind.STRING: "",
    Kind.TIMESTAMP: ZERO_TIME,
    Kind.ANY: None,
}


@dataclass
class PrimitiveTypeDefinition(TypeDefinition):
    """Type definition wrapping a primitive kind."""

    primitive: Kind

    def __post_init__(self) -> None:
        if not self.primitive.is_primitive:
            raise ValueError(f"Kind '{self.primitive.value}' is not a primitive kind")

    @property
    def kind(self) -> Kind:
        return self.primitive

    def zero_value(self) -> Any:
        if self.primitive.is_integer:
            return 0
        return _PRIMITIVE_ZEROS[self.primitive]


@dataclass
class AliasTypeDefinition(TypeDefinition):
    """A named type sharing the representation of its base.

    Aliases have the kind of their base but are distinct types: a value of the
    base type is convertible to the alias, not directly assignable.
    """

    base_type: TypeDefinition

    @property
    def kind(self) -> Kind:
        return self.base_type.kind

    @property
    def is_bytes(self) -> bool:
        return self.base_type.is_bytes

    @property
    def is_scanner(self) -> bool:
        return self.base_type.is_scanner

    def resolve_base_type(self) -> TypeDefinition:
        """Resolve through aliases to get the underlying type."""
        return self.base_type.resolve_base_type()

    def zero_value(self) -> Any:
        return self.base_type.zero_value()


@dataclass
class ArrayTypeDefinition(TypeDefinition):
    """Type definition for array types (e.g., uint8[])."""

    element_type: TypeDefinition

    @property
    def kind(self) -> Kind:
        return Kind.ARRAY

    @property
    def is_bytes(self) -> bool:
        return self.element_type.kind is Kind.UINT8

    def zero_value(self) -> Any:
        if self.is_bytes:
            return b""
        return []


@dataclass
class PointerTypeDefinition(TypeDefinition):
    """Type definition for pointers (e.g., *int8).

    A pointer value is either None or a Ref holding a value of the target type.
    """

    target: TypeDefinition

    @property
    def kind(self) -> Kind:
        return Kind.POINTER

    def zero_value(self) -> Any:
        return None


@dataclass
class CompositeTypeDefinition(TypeDefinition):
    """Type definition for record types backed by a Python class.

    When the class implements ``scan``, values of this type take over scanning
    themselves and the built-in coercion rules are bypassed.
    """

    factory: type

    @property
    def kind(self) -> Kind:
        return Kind.COMPOSITE

    @property
    def is_scanner(self) -> bool:
        return callable(getattr(self.factory, "scan", None))

    def new_instance(self) -> Any:
        """Construct a fresh value of this type."""
        return self.factory()

    def zero_value(self) -> Any:
        return None


def is_bytes_type(type_def: TypeDefinition) -> bool:
    """Check if a type resolves to a byte sequence."""
    return type_def.resolve_base_type().is_bytes


# Built-in type definitions, shared by every registry
BOOL = PrimitiveTypeDefinition(name="bool", primitive=Kind.BOOL)
INT = PrimitiveTypeDefinition(name="int", primitive=Kind.INT)
INT8 = PrimitiveTypeDefinition(name="int8", primitive=Kind.INT8)
INT16 = PrimitiveTypeDefinition(name="int16", primitive=Kind.INT16)
INT32 = PrimitiveTypeDefinition(name="int32", primitive=Kind.INT32)
INT64 = PrimitiveTypeDefinition(name="int64", primitive=Kind.INT64)
UINT = PrimitiveTypeDefinition(name="uint", primitive=Kind.UINT)
UINT8 = PrimitiveTypeDefinition(name="uint8", primitive=Kind.UINT8)
UINT16 = PrimitiveTypeDefinition(name="uint16", primitive=Kind.UINT16)
UINT32 = PrimitiveTypeDefinition(name="uint32", primitive=Kind.UINT32)
UINT64 = PrimitiveTypeDefinition(name="uint64", primitive=Kind.UINT64)
FLOAT32 = PrimitiveTypeDefinition(name="float32", primitive=Kind.FLOAT32)
FLOAT64 = PrimitiveTypeDefinition(name="float64", primitive=Kind.FLOAT64)
STRING = PrimitiveTypeDefinition(name="string", primitive=Kind.STRING)
TIMESTAMP = PrimitiveTypeDefinition(name="timestamp", primitive=Kind.TIMESTAMP)
ANY = PrimitiveTypeDefinition(name="any", primitive=Kind.ANY)
BYTES = ArrayTypeDefinition(name="bytes", element_type=UINT8)

BUILTIN_TYPES: tuple[TypeDefinition, ...] = (
    BOOL,
    INT,
    INT8,
    INT16,
    INT32,
    INT64,
    UINT,
    UINT8,
    UINT16,
    UINT32,
    UINT64,
    FLOAT32,
    FLOAT64,
    STRING,
    TIMESTAMP,
    ANY,
    BYTES,
)


def pointer_to(target: TypeDefinition) -> PointerTypeDefinition:
    """Return the pointer type for the given target type."""
    return PointerTypeDefinition(name=f"*{target.name}", target=target)


def infer_type(value: Any) -> TypeDefinition:
    """Infer a type definition from a Python value.

    bool must be checked before int since it is a subclass of it.
    """
    from typed_optional.destination import Ref

    if isinstance(value, bool):
        return BOOL
    if isinstance(value, int):
        return INT
    if isinstance(value, float):
        return FLOAT64
    if isinstance(value, str):
        return STRING
    if isinstance(value, (bytes, bytearray, memoryview)):
        return BYTES
    if isinstance(value, datetime):
        return TIMESTAMP
    if isinstance(value, Ref):
        return pointer_to(value.type_def)
    if isinstance(value, Scanner):
        cls = type(value)
        return CompositeTypeDefinition(name=cls.__name__, factory=cls)
    return ANY


def _is_positive_zero(value: float) -> bool:
    """Return whether value is +0.0; -0.0 has a different bit pattern."""
    return value == 0 and math.copysign(1.0, value) > 0


def is_zero_value(value: Any, type_def: TypeDefinition | None = None) -> bool:
    """Check structurally whether value is the zero value for its type."""
    if value is None:
        return True
    is_zero = getattr(value, "is_zero", None)
    if callable(is_zero) and not isinstance(value, type):
        return bool(is_zero())
    if type_def is None:
        type_def = infer_type(value)
    base = type_def.resolve_base_type()
    if base.kind is Kind.TIMESTAMP:
        return value == ZERO_TIME or value == ZERO_TIME.replace(tzinfo=None)
    if base.kind.is_float:
        return _is_positive_zero(value)
    if base.kind.is_primitive and base.kind is not Kind.ANY:
        return value == base.zero_value()
    if isinstance(value, (bytes, bytearray, memoryview, list, tuple, dict, set, frozenset, str)):
        return len(value) == 0
    if isinstance(value, float):
        return _is_positive_zero(value)
    if isinstance(value, (bool, int)):
        return not value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return all(is_zero_value(getattr(value, f.name)) for f in dataclasses.fields(value))
    return False


class TypeRegistry:
    """Registry of all defined types."""

    def __init__(self) -> None:
        self._types: dict[str, TypeDefinition] = {}
        self._register_builtins()

    def _register_builtins(self) -> None:
        """Register all built-in types."""
        for type_def in BUILTIN_TYPES:
            self._types[type_def.name] = type_def

    def register(self, type_def: TypeDefinition) -> None:
        """Register a type definition."""
        if type_def.name in self._types:
            raise ValueError(f"Type '{type_def.name}' is already defined")
        self._types[type_def.name] = type_def

    def get(self, name: str) -> TypeDefinition | None:
        """Get a type by name."""
        return self._types.get(name)

    def get_or_raise(self, name: str) -> TypeDefinition:
        """Get a type by name, raising if not found."""
        type_def = self._types.get(name)
        if type_def is None:
            raise KeyError(f"Type '{name}' not found")
        return type_def

    def define_alias(self, name: str, base_type_name: str) -> AliasTypeDefinition:
        """Register a named type over an existing type ('define X as Y')."""
        base = self.get_or_raise(base_type_name)
        alias = AliasTypeDefinition(name=name, base_type=base)
        self.register(alias)
        return alias

    def get_array_type(self, element_type_name: str) -> ArrayTypeDefinition:
        """Get or create an array type for the given element type."""
        array_name = f"{element_type_name}[]"
        existing = self._types.get(array_name)
        if existing is not None:
            if not isinstance(existing, ArrayTypeDefinition):
                raise TypeError(f"Type '{array_name}' exists but is not an array type")
            return existing

        element_type = self.get_or_raise(element_type_name)
        array_type = ArrayTypeDefinition(name=array_name, element_type=element_type)
        self._types[array_name] = array_type
        return array_type

    def get_pointer_type(self, target_type_name: str) -> PointerTypeDefinition:
        """Get or create a pointer type for the given target type."""
        pointer_name = f"*{target_type_name}"
        existing = self._types.get(pointer_name)
        if existing is not None:
            if not isinstance(existing, PointerTypeDefinition):
                raise TypeError(f"Type '{pointer_name}' exists but is not a pointer type")
            return existing

        pointer_type = pointer_to(self.get_or_raise(target_type_name))
        self._types[pointer_name] = pointer_type
        return pointer_type

    def register_composite(self, factory: type, name: str | None = None) -> CompositeTypeDefinition:
        """Register a record type backed by the given class."""
        composite = CompositeTypeDefinition(name=name or factory.__name__, factory=factory)
        self.register(composite)
        return composite

    def list_types(self) -> list[str]:
        """List all registered type names."""
        return list(self._types.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._types
