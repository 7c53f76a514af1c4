"""Nearest-candidate search shared by account naming and column assignment."""

from __future__ import annotations

import math
from typing import Callable, Iterable, Optional, Sequence, Tuple, TypeVar

from .models import Header

T = TypeVar("T")


def nearest(
    candidates: Iterable[T],
    distance: Callable[[T], float],
    eligible: Optional[Callable[[T], bool]] = None,
) -> Optional[Tuple[int, T]]:
    """Return ``(index, candidate)`` with the smallest *distance*, or ``None``.

    Only candidates passing *eligible* are considered.  On equal distance
    the first candidate in iteration order is kept.
    """
    best: Optional[Tuple[int, T]] = None
    best_dist = math.inf
    for idx, cand in enumerate(candidates):
        if eligible is not None and not eligible(cand):
            continue
        d = distance(cand)
        if d < best_dist:
            best_dist = d
            best = (idx, cand)
    return best


def nearest_header_index(headers: Sequence[Header], x: float) -> Optional[int]:
    """Index of the header closest to *x* horizontally (first on ties)."""
    hit = nearest(headers, lambda h: abs(h.x - x))
    return None if hit is None else hit[0]


def round_half_up(value: float, quantum: float = 1.0) -> int:
    """Bucket *value* to the nearest multiple of *quantum*; halves go up."""
    return math.floor(value / quantum + 0.5)
