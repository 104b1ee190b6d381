"""Typed Optional - values that know whether they were explicitly set."""

from typed_optional.coercion import WireType, classify_source, scan_value
from typed_optional.destination import Ref, resolve_destination
from typed_optional.driver import to_driver_value
from typed_optional.errors import (
    ConversionError,
    DriverValueError,
    InvalidDestinationError,
    NotPresentError,
    OptionalError,
    ParseError,
    PrecisionLossError,
    RangeError,
    ScanError,
    UnsupportedDestinationError,
)
from typed_optional.optional import (
    Optional,
    compare,
    empty,
    find,
    get_any,
    must_find,
    of,
    of_nillable,
    of_pointer,
    of_zeroable,
    require_any,
)
from typed_optional.types import (
    AliasTypeDefinition,
    ArrayTypeDefinition,
    CompositeTypeDefinition,
    Kind,
    PointerTypeDefinition,
    PrimitiveTypeDefinition,
    Scanner,
    TypeDefinition,
    TypeRegistry,
    Valuer,
)

__all__ = [
    # Container
    "Optional",
    "of",
    "empty",
    "of_nillable",
    "of_zeroable",
    "of_pointer",
    "find",
    "must_find",
    "get_any",
    "require_any",
    "compare",
    # Scanning
    "Ref",
    "resolve_destination",
    "scan_value",
    "classify_source",
    "WireType",
    "to_driver_value",
    # Type definitions
    "Kind",
    "TypeDefinition",
    "PrimitiveTypeDefinition",
    "AliasTypeDefinition",
    "ArrayTypeDefinition",
    "PointerTypeDefinition",
    "CompositeTypeDefinition",
    "TypeRegistry",
    "Scanner",
    "Valuer",
    # Errors
    "OptionalError",
    "NotPresentError",
    "ScanError",
    "InvalidDestinationError",
    "UnsupportedDestinationError",
    "ConversionError",
    "RangeError",
    "PrecisionLossError",
    "ParseError",
    "DriverValueError",
]

__version__ = "0.1.0"
