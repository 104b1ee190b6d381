"""Exceptions raised by typed_optional."""

from __future__ import annotations

from typing import Any

from typed_optional.types import Kind, TypeDefinition

ERROR_PREFIX = "typed-optional"


def describe_type(value: Any) -> str:
    """Return the dynamic type name used in error messages."""
    return type(value).__name__


class OptionalError(Exception):
    """Base class for all typed_optional errors."""


class NotPresentError(OptionalError, LookupError):
    """Raised when a value is required from a container that has none."""

    def __init__(self, message: str = f"{ERROR_PREFIX}: value not present") -> None:
        super().__init__(message)


class ScanError(OptionalError):
    """Base class for failures assigning a driver value into a destination."""


class InvalidDestinationError(ScanError, TypeError):
    """Raised when a scan destination is not a non-None Ref."""


class UnsupportedDestinationError(ScanError, TypeError):
    """Raised when no rule exists for the source value and destination kind."""

    def __init__(self, src: Any, dest_type: TypeDefinition | None, kind: Kind | None) -> None:
        self.src = src
        self.dest_type = dest_type
        self.kind = kind
        dest_name = dest_type.name if dest_type is not None else "None"
        kind_name = kind.value if kind is not None else "invalid"
        super().__init__(
            f"{ERROR_PREFIX}: couldn't scan {describe_type(src)} value "
            f"into unsupported type {dest_name} ({kind_name})"
        )


class ConversionError(ScanError, ValueError):
    """Raised when a source value cannot be converted to its destination's type."""

    reason = "invalid conversion"

    def __init__(
        self,
        src: Any,
        text: str,
        dest_type: TypeDefinition,
        kind: Kind,
        reason: str | None = None,
    ) -> None:
        self.src = src
        self.text = text
        self.dest_type = dest_type
        self.kind = kind
        if reason is not None:
            self.reason = reason
        super().__init__(
            f"{ERROR_PREFIX}: couldn't scan {describe_type(src)} value ({text!r}) "
            f"into type {dest_type.name} ({kind.value}): {self.reason}"
        )


class RangeError(ConversionError):
    """Raised when a numeric value exceeds the destination's width."""

    reason = "value out of range"


class PrecisionLossError(ConversionError):
    """Raised when a fractional float cannot be stored in an integer destination."""

    reason = "value has a fractional part"


class ParseError(ConversionError):
    """Raised when text cannot be parsed with the destination's grammar."""

    reason = "invalid syntax"


class DriverValueError(OptionalError, TypeError):
    """Raised when a value cannot be encoded as a driver value."""
