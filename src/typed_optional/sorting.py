"""Sorting of Optional sequences using typed_optional.compare."""

from __future__ import annotations

from functools import cmp_to_key
from typing import Any, Sequence

from typed_optional.optional import Optional, compare

_COMPARE_KEY = cmp_to_key(compare)


def asc(opts: list[Optional[Any]] | None) -> None:
    """Sort opts in place in ascending order, empty Optionals first."""
    if not opts:
        return
    opts.sort(key=_COMPARE_KEY)


def desc(opts: list[Optional[Any]] | None) -> None:
    """Sort opts in place in descending order, empty Optionals last."""
    if not opts:
        return
    opts.sort(key=_COMPARE_KEY, reverse=True)


def is_asc(opts: Sequence[Optional[Any]] | None) -> bool:
    """Return whether opts is sorted in ascending order. Empty or None sequences are."""
    if not opts:
        return True
    return all(compare(opts[i], opts[i + 1]) <= 0 for i in range(len(opts) - 1))


def is_desc(opts: Sequence[Optional[Any]] | None) -> bool:
    """Return whether opts is sorted in descending order. Empty or None sequences are."""
    if not opts:
        return True
    return all(compare(opts[i], opts[i + 1]) >= 0 for i in range(len(opts) - 1))
