"""The Optional container.

An Optional holds a value together with whether it was explicitly set, so a
zero value that was set can be told apart from one that never was.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Generic, TypeVar

from typed_optional.coercion import scan_value, scan_with_scanner
from typed_optional.destination import Ref
from typed_optional.driver import to_driver_value
from typed_optional.errors import NotPresentError
from typed_optional.types import ANY, TypeDefinition, infer_type, is_zero_value, pointer_to

T = TypeVar("T")
M = TypeVar("M")

# Returned by str() when no value is present
EMPTY_STRING = "<empty>"


class Optional(Generic[T]):
    """An immutable value plus whether it was explicitly set.

    The element type is carried as a TypeDefinition so that values coming from
    untyped boundaries (database drivers, decoded documents) can be coerced
    into it. An empty Optional always holds the zero value of its type.

    ``scan`` is the only operation that modifies an Optional in place; every
    other operation returns a new Optional.
    """

    __slots__ = ("_type_def", "_present", "_value")

    def __init__(self, type_def: TypeDefinition = ANY, value: Any = None, present: bool = False) -> None:
        self._type_def = type_def
        self._present = present
        self._value = value if present else type_def.zero_value()

    @property
    def type_def(self) -> TypeDefinition:
        """Return the element type."""
        return self._type_def

    def get(self) -> tuple[T, bool]:
        """Return the value and whether it is present."""
        return self._value, self._present

    def is_present(self) -> bool:
        """Return whether the value was explicitly set."""
        return self._present

    def is_empty(self) -> bool:
        """Return whether the value was NOT explicitly set.

        This never inspects the value itself, so an Optional holding a zero
        value or an empty collection is not empty.
        """
        return not self._present

    def is_zero(self) -> bool:
        """Alias of is_empty used when deciding whether to omit a field on encode."""
        return not self._present

    def if_present(self, fn: Callable[[T], Any]) -> None:
        """Call fn with the value only if it is present."""
        if self._present:
            fn(self._value)

    def require(self) -> T:
        """Return the value if present, otherwise raise NotPresentError."""
        if self._present:
            return self._value
        raise NotPresentError()

    def or_else(self, other: T) -> T:
        """Return the value if present, otherwise other."""
        if self._present:
            return self._value
        return other

    def or_else_get(self, other: Callable[[], T]) -> T:
        """Return the value if present, otherwise the result of calling other."""
        if self._present:
            return self._value
        return other()

    def or_else_try_get(self, other: Callable[[], T]) -> T:
        """Return the value if present, otherwise the result of calling other.

        Unlike or_else_get, other is expected to fail at times; whatever it
        raises reaches the caller unchanged.
        """
        if self._present:
            return self._value
        return other()

    def filter(self, predicate: Callable[[T], bool]) -> Optional[T]:
        """Return this Optional if present and predicate holds, otherwise an empty one.

        predicate is never called on an empty Optional, but note a present value
        may still be None or a zero value.
        """
        if self._present and predicate(self._value):
            return self
        return Optional(self._type_def)

    def map(self, fn: Callable[[T], M], type_def: TypeDefinition | None = None) -> Optional[M]:
        """Return an Optional holding fn(value) if present, otherwise an empty one.

        The result type is inferred from the mapped value unless type_def is given.
        """
        if not self._present:
            return Optional(type_def or ANY)
        mapped = fn(self._value)
        return Optional(type_def or infer_type(mapped), mapped, present=True)

    def try_map(self, fn: Callable[[T], M], type_def: TypeDefinition | None = None) -> Optional[M]:
        """Like map, for an fn that may raise; its exception propagates and no Optional is produced."""
        if not self._present:
            return Optional(type_def or ANY)
        mapped = fn(self._value)
        return Optional(type_def or infer_type(mapped), mapped, present=True)

    def flat_map(self, fn: Callable[[T], Optional[M]], type_def: TypeDefinition | None = None) -> Optional[M]:
        """Return the Optional produced by fn(value) if present, otherwise an empty one."""
        if not self._present:
            return Optional(type_def or ANY)
        return fn(self._value)

    def try_flat_map(self, fn: Callable[[T], Optional[M]], type_def: TypeDefinition | None = None) -> Optional[M]:
        """Like flat_map, for an fn that may raise; its exception propagates."""
        if not self._present:
            return Optional(type_def or ANY)
        return fn(self._value)

    def scan(self, src: Any) -> None:
        """Assign a value read from a database driver, converting it where possible.

        A None src leaves the Optional empty. If the element type implements
        ``scan`` itself, src is handed to it. Otherwise src must be one of the
        wire types (bool, float, int, str, bytes, datetime) and is coerced into
        the element type; see typed_optional.coercion for the rules.

        Raises a ScanError if src cannot be stored without losing information
        or there is a type mismatch, in which case the Optional is left empty.
        """
        if src is None:
            self._reset()
            return
        cell = Ref(self._type_def, self._value)
        try:
            if self._type_def.is_scanner:
                assigned = scan_with_scanner(src, cell)
            else:
                assigned = scan_value(src, cell)
        except Exception:
            self._reset()
            raise
        if assigned:
            self._value = cell.value
            self._present = True
        else:
            self._reset()

    def _reset(self) -> None:
        self._present = False
        self._value = self._type_def.zero_value()

    def driver_value(self) -> Any:
        """Return the value converted for a database driver, or None if absent."""
        if not self._present:
            return None
        return to_driver_value(self._value, self._type_def)

    def __str__(self) -> str:
        if self._present:
            return str(self._value)
        return EMPTY_STRING

    def __repr__(self) -> str:
        if self._present:
            return f"Optional({self._type_def.name}, {self._value!r})"
        return f"Optional({self._type_def.name}, <empty>)"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Optional):
            return NotImplemented
        return self._present == other._present and self._value == other._value

    def __hash__(self) -> int:
        return hash((self._present, self._value))


def of(value: T, type_def: TypeDefinition | None = None) -> Optional[T]:
    """Return an Optional with the given value present, even if it is None or zero."""
    return Optional(type_def or infer_type(value), value, present=True)


def empty(type_def: TypeDefinition = ANY) -> Optional[Any]:
    """Return an Optional with no value, holding the zero value of type_def."""
    return Optional(type_def)


def of_nillable(value: T, type_def: TypeDefinition | None = None) -> Optional[T]:
    """Return an Optional that is empty if value is None, otherwise present."""
    if value is None:
        return Optional(type_def or ANY)
    return of(value, type_def)


def of_zeroable(value: T, type_def: TypeDefinition | None = None) -> Optional[T]:
    """Return an Optional that is empty if value is the zero value for its type.

    The check is structural: None, zero numbers (but not -0.0), empty strings
    and collections, the zero timestamp, absent Optionals, and dataclass
    instances whose fields are all zero.
    """
    resolved = type_def or infer_type(value)
    if is_zero_value(value, resolved):
        return Optional(resolved)
    return Optional(resolved, value, present=True)


def of_pointer(value: T, type_def: TypeDefinition | None = None) -> Optional[Ref]:
    """Return an Optional whose present value is a new Ref holding value."""
    target = type_def or infer_type(value)
    return Optional(pointer_to(target), Ref(target, value), present=True)


def find(*opts: Optional[T]) -> Optional[T]:
    """Return the first Optional with a value present, otherwise an empty one."""
    for opt in opts:
        if opt.is_present():
            return opt
    return Optional(opts[0].type_def if opts else ANY)


def must_find(*opts: Optional[T]) -> T:
    """Return the value of the first Optional with a value present, otherwise raise NotPresentError."""
    for opt in opts:
        if opt.is_present():
            return opt.require()
    raise NotPresentError()


def get_any(*opts: Optional[T]) -> list[T]:
    """Return the values of every Optional with a value present, in order."""
    return [opt.require() for opt in opts if opt.is_present()]


def require_any(*opts: Optional[T]) -> list[T]:
    """Like get_any, but raise NotPresentError if no Optional has a value present."""
    values = get_any(*opts)
    if not values:
        raise NotPresentError()
    return values


def _compare_values(x: Any, y: Any) -> int:
    """Order two values naturally, placing NaN before every other number."""
    x_nan = isinstance(x, float) and math.isnan(x)
    y_nan = isinstance(y, float) and math.isnan(y)
    if x_nan or y_nan:
        if x_nan and y_nan:
            return 0
        return -1 if x_nan else 1
    if x < y:
        return -1
    if x > y:
        return 1
    return 0


def compare(x: Optional[Any], y: Optional[Any]) -> int:
    """Return -1, 0 or 1 ordering x against y.

    An empty Optional sorts before any present one and two empty Optionals are
    equal. Present values compare naturally; a NaN is less than any non-NaN,
    equal to another NaN, and -0.0 equals 0.0.
    """
    x_value, x_present = x.get()
    y_value, y_present = y.get()
    if x_present and y_present:
        return _compare_values(x_value, y_value)
    if x_present:
        return 1
    if y_present:
        return -1
    return 0
