"""
Overlap calculators for trip matching.

Three sub-scores, each an integer in [0, 100]:
- Route: distinct shared grid cells over the longer route length
    route = round(|set(A) & set(B)| / max(len(A), len(B)) * 100)
- Date: whole days of overlap over the longer trip duration
    date = round(overlap_days / max(days(A), days(B)) * 100)
- Interests: Jaccard similarity of the tag sets
    interest = round(|A & B| / |A | B| * 100)

Rounding is half away from zero, computed on exact rationals so that the
result does not depend on binary floating point.

Every degenerate case (empty routes, empty or zero-length windows, empty
interest sets) scores 0.
"""

import math
from fractions import Fraction
from typing import Iterable, Sequence, Union

from ..dates import SECONDS_PER_DAY

Number = Union[int, float, Fraction]


def round_half_away_from_zero(value: Number) -> int:
    """Round to the nearest integer, ties away from zero."""
    exact = Fraction(value)
    magnitude = math.floor(abs(exact) + Fraction(1, 2))
    return magnitude if exact >= 0 else -magnitude


def scaled_ratio(numerator: int, denominator: int) -> int:
    """
    Percentage ``numerator / denominator * 100`` rounded and clamped to [0, 100].

    A non-positive denominator yields 0.
    """
    if denominator <= 0:
        return 0
    percent = round_half_away_from_zero(Fraction(numerator * 100, denominator))
    return min(100, max(0, percent))


def whole_days(seconds: int) -> int:
    """Convert a duration in seconds to whole days, truncating toward zero."""
    days = abs(seconds) // SECONDS_PER_DAY
    return days if seconds >= 0 else -days


# =============================================================================
# Route overlap
# =============================================================================

def cell_overlap(route_a: Iterable[str], route_b: Iterable[str]) -> int:
    """
    Count grid cells present in both routes.

    Each route is treated as a set, so repeated cells are counted once.
    """
    return len(set(route_a) & set(route_b))


def route_score(route_a: Sequence[str], route_b: Sequence[str]) -> int:
    """
    Route overlap score in [0, 100].

    The denominator is the raw length of the longer route, duplicates
    included. Two empty routes score 0.
    """
    max_length = max(len(route_a), len(route_b))
    return scaled_ratio(cell_overlap(route_a, route_b), max_length)


# =============================================================================
# Date overlap
# =============================================================================

def date_overlap_days(start_a: int, end_a: int, start_b: int, end_b: int) -> int:
    """
    Whole days shared by two date ranges (Unix seconds).

    The window [max(starts), min(ends)] must have positive length; a window
    that is empty or touches at a single instant yields 0.
    """
    window_start = max(start_a, start_b)
    window_end = min(end_a, end_b)
    if window_start >= window_end:
        return 0
    return whole_days(window_end - window_start)


def date_score(start_a: int, end_a: int, start_b: int, end_b: int) -> int:
    """
    Date overlap score in [0, 100].

    Overlap days are divided by the longer of the two trip durations in
    whole days; a zero total duration scores 0.
    """
    overlap_days = date_overlap_days(start_a, end_a, start_b, end_b)
    if overlap_days == 0:
        return 0
    total_days = max(whole_days(end_a - start_a), whole_days(end_b - start_b))
    return scaled_ratio(overlap_days, total_days)


# =============================================================================
# Interest similarity
# =============================================================================

def interest_score(tags_a: Iterable[str], tags_b: Iterable[str]) -> int:
    """
    Jaccard similarity of two tag collections in [0, 100].

    No declared interests on either side is zero similarity.
    """
    set_a = set(tags_a)
    set_b = set(tags_b)
    union = set_a | set_b
    if not union:
        return 0
    return scaled_ratio(len(set_a & set_b), len(union))
