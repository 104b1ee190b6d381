"""Tests for encoding values for a database driver."""

from datetime import datetime, timezone

import pytest

from typed_optional.destination import Ref
from typed_optional.driver import is_driver_value, to_driver_value
from typed_optional.errors import DriverValueError
from typed_optional.optional import empty, of, of_pointer
from typed_optional.types import (
    ANY,
    BYTES,
    FLOAT32,
    INT8,
    STRING,
    TIMESTAMP,
    UINT64,
    AliasTypeDefinition,
    pointer_to,
)


class Money:
    """Stores cents, encodes as a decimal string."""

    def __init__(self, cents):
        self.cents = cents

    def driver_value(self):
        return f"{self.cents // 100}.{self.cents % 100:02d}"


class BadValuer:
    def driver_value(self):
        return [1, 2]


class TestIsDriverValue:
    """Tests for is_driver_value."""

    @pytest.mark.parametrize("value", [None, True, 1, 1.5, "a", b"a", datetime(2024, 1, 1)])
    def test_driver_values(self, value):
        assert is_driver_value(value)

    @pytest.mark.parametrize("value", [[1], {"a": 1}, bytearray(b"a"), 2**63])
    def test_other_values(self, value):
        assert not is_driver_value(value)


class TestToDriverValue:
    """Tests for to_driver_value."""

    def test_none(self):
        assert to_driver_value(None) is None
        assert to_driver_value(None, INT8) is None

    def test_integers(self):
        assert to_driver_value(5, INT8) == 5
        assert to_driver_value(2**63 - 1, UINT64) == 2**63 - 1

    def test_uint64_high_bit(self):
        with pytest.raises(DriverValueError, match="high bit set"):
            to_driver_value(2**63, UINT64)

    def test_below_int64(self):
        with pytest.raises(DriverValueError):
            to_driver_value(-(2**63) - 1)

    def test_floats(self):
        value = to_driver_value(1.5, FLOAT32)
        assert value == 1.5
        assert isinstance(value, float)

    def test_bytes(self):
        value = to_driver_value(bytearray(b"ab"), BYTES)
        assert value == b"ab"
        assert isinstance(value, bytes)

    def test_named_types(self):
        label = AliasTypeDefinition(name="label", base_type=STRING)
        assert to_driver_value("abc", label) == "abc"

    def test_timestamp(self):
        src = datetime(2024, 1, 2, tzinfo=timezone.utc)
        assert to_driver_value(src, TIMESTAMP) is src

    def test_inferred(self):
        assert to_driver_value(True) is True
        assert to_driver_value("a", ANY) == "a"

    def test_pointer(self):
        assert to_driver_value(Ref(INT8, 3), pointer_to(INT8)) == 3
        assert to_driver_value(Ref(pointer_to(INT8), Ref(INT8, 4))) == 4

    def test_pointer_without_ref(self):
        with pytest.raises(DriverValueError, match="non-Ref"):
            to_driver_value(3, pointer_to(INT8))

    def test_valuer(self):
        assert to_driver_value(Money(1234)) == "12.34"

    def test_valuer_returning_non_driver_value(self):
        with pytest.raises(DriverValueError, match="non-driver value type list"):
            to_driver_value(BadValuer())

    def test_unsupported(self):
        with pytest.raises(DriverValueError, match="unsupported type list"):
            to_driver_value([1, 2])


class TestOptionalDriverValue:
    """Tests for Optional.driver_value."""

    def test_empty_is_none(self):
        assert empty(STRING).driver_value() is None

    def test_present_zero_is_kept(self):
        assert of("", STRING).driver_value() == ""

    def test_pointer(self):
        assert of_pointer(7, INT8).driver_value() == 7

    def test_valuer(self):
        assert of(Money(5)).driver_value() == "0.05"

    def test_nested_optional(self):
        assert of(of(5)).driver_value() == 5
        assert of(empty()).driver_value() is None
