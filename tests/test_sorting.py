"""Tests for sorting sequences of Optionals."""

import math

from typed_optional.optional import empty, of
from typed_optional.sorting import asc, desc, is_asc, is_desc
from typed_optional.types import FLOAT64, INT


def _values(opts):
    return [opt.get() for opt in opts]


class TestAsc:
    """Tests for ascending sorts."""

    def test_sorts_in_place(self):
        opts = [of(3), empty(INT), of(1), of(2)]
        asc(opts)
        assert _values(opts) == [(0, False), (1, True), (2, True), (3, True)]
        assert is_asc(opts)

    def test_nan_before_numbers(self):
        opts = [of(1.0), of(math.nan), empty(FLOAT64), of(-math.inf)]
        asc(opts)
        assert opts[0].is_empty()
        assert math.isnan(opts[1].require())
        assert [opt.require() for opt in opts[2:]] == [-math.inf, 1.0]

    def test_strings(self):
        opts = [of("b"), of("a"), empty()]
        asc(opts)
        assert [str(opt) for opt in opts] == ["<empty>", "a", "b"]

    def test_none_and_empty(self):
        asc(None)
        opts = []
        asc(opts)
        assert opts == []


class TestDesc:
    """Tests for descending sorts."""

    def test_sorts_in_place(self):
        opts = [of(1), empty(INT), of(3), of(2)]
        desc(opts)
        assert _values(opts) == [(3, True), (2, True), (1, True), (0, False)]
        assert is_desc(opts)
        assert not is_asc(opts)

    def test_none_and_empty(self):
        desc(None)
        opts = []
        desc(opts)
        assert opts == []


class TestIsSorted:
    """Tests for the sortedness checks."""

    def test_trivial_sequences(self):
        assert is_asc(None)
        assert is_asc([])
        assert is_desc(None)
        assert is_desc([of(1)])

    def test_equal_values(self):
        opts = [of(1), of(1), of(1)]
        assert is_asc(opts)
        assert is_desc(opts)

    def test_unsorted(self):
        opts = [of(2), of(1), of(3)]
        assert not is_asc(opts)
        assert not is_desc(opts)

    def test_empty_counts_as_smallest(self):
        assert is_asc([empty(), of(0)])
        assert not is_asc([of(0), empty()])
        assert is_desc([of(0), empty()])
