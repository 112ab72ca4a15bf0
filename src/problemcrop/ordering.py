"""Reading-order sorting of resolved problems."""

from __future__ import annotations

from functools import cmp_to_key
from typing import Sequence

from .models import Problem


def compare_reading_order(a: Problem, b: Problem, band_tolerance: float = 20.0) -> int:
    """Compare by page, then vertical band, then horizontal position.

    Problems whose vertical positions differ by at most ``band_tolerance``
    share a band and are ordered left to right.
    """

    if a.page != b.page:
        return -1 if a.page < b.page else 1
    if a.position is None or b.position is None:
        raise ValueError("reading order requires resolved problems")
    dy = a.position.y - b.position.y
    if abs(dy) > band_tolerance:
        return -1 if dy < 0 else 1
    dx = a.position.x - b.position.x
    if dx:
        return -1 if dx < 0 else 1
    return 0


def sort_reading_order(problems: Sequence[Problem], band_tolerance: float = 20.0) -> list[Problem]:
    """Return ``problems`` in reading order; exact ties keep their input order."""

    if band_tolerance < 0:
        msg = "band_tolerance must be non-negative"
        raise ValueError(msg)
    key = cmp_to_key(lambda a, b: compare_reading_order(a, b, band_tolerance))
    return sorted(problems, key=key)


__all__ = ["compare_reading_order", "sort_reading_order"]
