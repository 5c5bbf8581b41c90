"""
Tests for the route, date and interest calculators.

Checks exact rounding (half away from zero), symmetry, and that every
degenerate input scores 0 instead of raising.
"""

import itertools

import pytest

from tripmatch.scoring import (
    cell_overlap,
    date_overlap_days,
    date_score,
    interest_score,
    round_half_away_from_zero,
    route_score,
)
from tripmatch.scoring.overlap import scaled_ratio, whole_days

from conftest import DAY, june


class TestRounding:
    """Half-away-from-zero rounding."""

    @pytest.mark.parametrize("value,expected", [
        (0.5, 1), (1.5, 2), (2.5, 3), (12.5, 13), (-0.5, -1), (-2.5, -3),
        (0.49, 0), (33.333, 33), (66.667, 67), (0, 0),
    ])
    def test_round_half_away_from_zero(self, value, expected):
        assert round_half_away_from_zero(value) == expected

    def test_differs_from_builtin_round(self):
        """Python's round() uses banker's rounding; scores must not."""
        assert round(2.5) == 2
        assert round_half_away_from_zero(2.5) == 3

    def test_scaled_ratio_guards_zero_denominator(self):
        assert scaled_ratio(5, 0) == 0
        assert scaled_ratio(0, 0) == 0

    def test_scaled_ratio_exact_halves(self):
        """1/8 is 12.5% and 1/40 is 2.5%: both round up."""
        assert scaled_ratio(1, 8) == 13
        assert scaled_ratio(1, 40) == 3

    def test_whole_days_truncates_toward_zero(self):
        assert whole_days(DAY * 3 + 100) == 3
        assert whole_days(-(DAY * 3 + 100)) == -3
        assert whole_days(DAY - 1) == 0


class TestRouteScore:
    """Route overlap on grid cell identifiers."""

    def test_partial_overlap(self):
        assert cell_overlap(["a", "b", "c"], ["b", "c", "d", "e"]) == 2
        assert route_score(["a", "b", "c"], ["b", "c", "d", "e"]) == 50

    def test_full_overlap(self):
        assert route_score(["a", "b", "c"], ["a", "b", "c"]) == 100

    def test_order_is_irrelevant(self):
        assert route_score(["a", "b", "c"], ["c", "a", "b"]) == 100

    def test_duplicates_do_not_inflate_overlap(self):
        """Repeated cells count once in the overlap but not in the denominator."""
        assert cell_overlap(["a", "a", "a"], ["a"]) == 1
        assert route_score(["a", "a", "a"], ["a"]) == 33

    def test_half_rounds_up(self):
        route_a = [f"c{i}" for i in range(8)]
        assert route_score(route_a, ["c0"]) == 13

    def test_empty_routes(self):
        assert route_score([], []) == 0
        assert route_score(["a"], []) == 0
        assert cell_overlap([], []) == 0

    def test_symmetry(self):
        routes = [[], ["a"], ["a", "b"], ["b", "c", "d"], ["a", "a", "e", "f", "g"]]
        for a, b in itertools.product(routes, repeat=2):
            assert route_score(a, b) == route_score(b, a)


class TestDateScore:
    """Date range overlap."""

    def test_contained_range(self):
        """4 shared days out of a 9-day trip."""
        assert date_overlap_days(june(1), june(10), june(5), june(9)) == 4
        assert date_score(june(1), june(10), june(5), june(9)) == 44

    def test_identical_ranges(self):
        assert date_score(june(1), june(10), june(1), june(10)) == 100

    def test_partial_overlap(self):
        """June 1-11 vs June 6-16: 5 shared days out of 10."""
        assert date_score(june(1), june(11), june(6), june(16)) == 50

    def test_disjoint_ranges(self):
        assert date_score(june(1), june(5), june(10), june(15)) == 0
        assert date_overlap_days(june(1), june(5), june(10), june(15)) == 0

    def test_touching_ranges_score_zero(self):
        """Ranges sharing a single instant have an empty window."""
        assert date_score(june(1), june(5), june(5), june(10)) == 0
        assert date_overlap_days(june(1), june(5), june(5), june(10)) == 0

    def test_zero_duration_ranges(self):
        assert date_score(june(3), june(3), june(1), june(10)) == 0
        assert date_score(june(3), june(3), june(3), june(3)) == 0

    def test_sub_day_overlap(self):
        """Less than a whole day of overlap counts as no overlap."""
        assert date_score(june(1), june(5), june(5) - DAY // 2, june(10)) == 0

    def test_inverted_range(self):
        """A range ending before it starts never overlaps."""
        assert date_score(june(10), june(1), june(1), june(10)) == 0

    def test_symmetry(self):
        ranges = [(june(1), june(10)), (june(5), june(8)), (june(9), june(20)), (june(3), june(3))]
        for (sa, ea), (sb, eb) in itertools.product(ranges, repeat=2):
            assert date_score(sa, ea, sb, eb) == date_score(sb, eb, sa, ea)


class TestInterestScore:
    """Jaccard similarity of interest tags."""

    def test_partial_overlap(self):
        assert interest_score(["hiking", "food"], ["food", "art"]) == 33

    def test_identical(self):
        assert interest_score({"hiking", "food"}, ["food", "hiking"]) == 100

    def test_disjoint(self):
        assert interest_score(["hiking"], ["art"]) == 0

    def test_duplicates_collapse(self):
        assert interest_score(["food", "food", "food"], ["food"]) == 100

    def test_both_empty_is_zero(self):
        """No declared interests is zero similarity, not perfect similarity."""
        assert interest_score([], []) == 0

    def test_one_empty(self):
        assert interest_score(["food"], []) == 0

    def test_half_rounds_up(self):
        tags = [f"t{i}" for i in range(8)]
        assert interest_score(tags, ["t0"]) == 13

    def test_symmetry(self):
        sets = [[], ["a"], ["a", "b"], ["b", "c", "d"], ["a", "e"]]
        for a, b in itertools.product(sets, repeat=2):
            assert interest_score(a, b) == interest_score(b, a)
            assert 0 <= interest_score(a, b) <= 100
