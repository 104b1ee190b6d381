"""Tests for the Optional container."""

import math

import pytest

from typed_optional.destination import Ref
from typed_optional.errors import NotPresentError
from typed_optional.optional import (
    EMPTY_STRING,
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
from typed_optional.types import ANY, FLOAT64, INT, INT8, INT64, STRING, Kind


class TestConstructors:
    """Tests for the constructors."""

    def test_of_keeps_zero_values(self):
        assert of(0).get() == (0, True)
        assert of("").is_present()
        assert of(None).get() == (None, True)

    def test_of_infers_type(self):
        assert of(1).type_def is INT
        assert of("a").type_def is STRING
        assert of(1, INT8).type_def is INT8

    def test_empty(self):
        opt = empty(INT8)
        assert opt.get() == (0, False)
        assert opt.is_empty()
        assert empty().get() == (None, False)

    def test_default_is_empty(self):
        assert Optional(STRING).get() == ("", False)

    def test_of_nillable(self):
        assert of_nillable(None, INT8).get() == (0, False)
        assert of_nillable(0).get() == (0, True)
        assert of_nillable([]).is_present()

    @pytest.mark.parametrize("value", [0, 0.0, "", False, None, [], {}, empty(INT64)])
    def test_of_zeroable_empty(self, value):
        assert of_zeroable(value).is_empty()

    @pytest.mark.parametrize("value", [1, -0.5, -0.0, "a", True, [0], of(0, INT64)])
    def test_of_zeroable_present(self, value):
        assert of_zeroable(value).get() == (value, True)

    def test_of_pointer(self):
        opt = of_pointer(5, INT8)
        assert opt.type_def.kind is Kind.POINTER
        assert opt.require() == Ref(INT8, 5)

    def test_of_pointer_holds_zero_value(self):
        assert of_pointer(0).require() == Ref(INT, 0)


class TestAccessors:
    """Tests for reading values out of an Optional."""

    def test_require(self):
        assert of(3).require() == 3

    def test_require_empty(self):
        with pytest.raises(NotPresentError, match="typed-optional: value not present"):
            empty().require()

    def test_not_present_is_lookup_error(self):
        with pytest.raises(LookupError):
            empty().require()

    def test_is_zero_follows_presence(self):
        assert empty(INT8).is_zero()
        assert not of(0, INT8).is_zero()

    def test_if_present(self):
        seen = []
        of(1).if_present(seen.append)
        empty().if_present(seen.append)
        assert seen == [1]

    def test_or_else(self):
        assert of(1).or_else(2) == 1
        assert empty().or_else(2) == 2

    def test_or_else_get(self):
        assert of(1).or_else_get(lambda: 2) == 1
        assert empty().or_else_get(lambda: 2) == 2

    def test_or_else_try_get(self):
        def fail():
            raise RuntimeError("no fallback")

        assert of(1).or_else_try_get(fail) == 1
        with pytest.raises(RuntimeError, match="no fallback"):
            empty().or_else_try_get(fail)


class TestTransformations:
    """Tests for filter and the map family."""

    def test_filter(self):
        opt = of(4)
        assert opt.filter(lambda v: v % 2 == 0) is opt
        assert opt.filter(lambda v: v > 10).get() == (0, False)

    def test_filter_skips_empty(self):
        called = []
        assert empty().filter(called.append).is_empty()
        assert called == []

    def test_map(self):
        mapped = of(2).map(str)
        assert mapped.get() == ("2", True)
        assert mapped.type_def is STRING

    def test_map_with_type(self):
        mapped = of(2).map(lambda v: v / 2, FLOAT64)
        assert mapped.type_def is FLOAT64
        assert mapped.require() == 1.0

    def test_map_empty(self):
        called = []
        mapped = empty(INT8).map(called.append, STRING)
        assert mapped.get() == ("", False)
        assert called == []
        assert empty().map(str).type_def is ANY

    def test_try_map(self):
        assert of("12").try_map(int).require() == 12
        with pytest.raises(ValueError):
            of("x").try_map(int)
        assert empty(STRING).try_map(int).is_empty()

    def test_flat_map(self):
        assert of(3).flat_map(lambda v: of(v * 2)).require() == 6
        assert of(3).flat_map(lambda v: empty()).is_empty()
        assert empty().flat_map(lambda v: of(v)).is_empty()

    def test_try_flat_map(self):
        def parse(text):
            return of_zeroable(int(text))

        assert of("7").try_flat_map(parse).require() == 7
        assert of("0").try_flat_map(parse).is_empty()
        with pytest.raises(ValueError):
            of("x").try_flat_map(parse)


class TestFinders:
    """Tests for the functions over several Optionals."""

    def test_find(self):
        assert find(empty(), of(2), of(3)).require() == 2
        assert find(empty(INT8), empty(INT8)).get() == (0, False)
        assert find().is_empty()

    def test_must_find(self):
        assert must_find(empty(), of(0)) == 0
        with pytest.raises(NotPresentError):
            must_find(empty(), empty())
        with pytest.raises(NotPresentError):
            must_find()

    def test_get_any(self):
        assert get_any(of(1), empty(), of(3)) == [1, 3]
        assert get_any(empty()) == []
        assert get_any() == []

    def test_require_any(self):
        assert require_any(empty(), of("a")) == ["a"]
        with pytest.raises(NotPresentError):
            require_any(empty(), empty())


class TestCompare:
    """Tests for compare."""

    def test_present_values(self):
        assert compare(of(1), of(2)) == -1
        assert compare(of(2), of(1)) == 1
        assert compare(of("a"), of("a")) == 0

    def test_empty_sorts_first(self):
        assert compare(empty(), of(0)) == -1
        assert compare(of(0), empty()) == 1
        assert compare(empty(), empty()) == 0

    def test_nan(self):
        nan = of(math.nan)
        assert compare(nan, of(-math.inf)) == -1
        assert compare(of(-math.inf), nan) == 1
        assert compare(nan, of(math.nan)) == 0
        assert compare(empty(), nan) == -1

    def test_negative_zero(self):
        assert compare(of(-0.0), of(0.0)) == 0


class TestScanResets:
    """Tests for the state left behind by a failed scan."""

    def test_failure_clears_previous_value(self):
        opt = of(5, INT8)
        with pytest.raises(ValueError):
            opt.scan(1000)
        assert opt.get() == (0, False)

    def test_success_replaces_value(self):
        opt = of(5, INT8)
        opt.scan("6")
        assert opt.get() == (6, True)


class TestRendering:
    """Tests for str, repr and equality."""

    def test_str(self):
        assert str(of(1)) == "1"
        assert str(of("")) == ""
        assert str(empty()) == EMPTY_STRING == "<empty>"

    def test_repr(self):
        assert repr(of(1, INT8)) == "Optional(int8, 1)"
        assert repr(empty(INT8)) == "Optional(int8, <empty>)"

    def test_equality(self):
        assert of(1) == of(1)
        assert of(0) != empty(INT)
        assert empty(INT8) == empty(INT8)
        assert hash(of(1)) == hash(of(1))

    def test_driver_value(self):
        assert of(5, INT8).driver_value() == 5
        assert empty(INT8).driver_value() is None
        assert of(0, INT8).driver_value() == 0
