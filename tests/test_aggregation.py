"""
Tests for score aggregation, weight configuration and the match schema.
"""

import pytest

from tripmatch.dates import parse_instant, to_iso
from tripmatch.errors import ConfigurationError
from tripmatch.scoring import (
    InterestTag,
    MatchInput,
    MatchOutput,
    MatchScorer,
    ScoreWeights,
    aggregate,
    compute_match,
    create_scorer_from_config,
    interests_to_flags,
)
from tripmatch.scoring.schema import MAX_INTERESTS

from conftest import JUNE_1, june


@pytest.fixture
def trip_a():
    return MatchInput(
        route=["a", "b", "c"],
        start_date=june(1),
        end_date=june(10),
        interests=["hiking", "food"],
    )


@pytest.fixture
def trip_b():
    return MatchInput(
        route=["b", "c", "d", "e"],
        start_date=june(5),
        end_date=june(8),
        interests=["food", "art"],
    )


class TestScoreWeights:
    """Weight validation and config loading."""

    def test_defaults(self):
        weights = ScoreWeights()
        assert (weights.route, weights.date, weights.interest) == (0.4, 0.3, 0.3)

    def test_decimal_weights_sum_exactly(self):
        """0.1 + 0.2 + 0.7 is not exactly 1.0 in binary floating point."""
        ScoreWeights(route=0.1, date=0.2, interest=0.7)

    def test_sum_not_one_rejected(self):
        with pytest.raises(ConfigurationError):
            ScoreWeights(route=0.5, date=0.5, interest=0.5)

    def test_negative_weight_rejected(self):
        with pytest.raises(ConfigurationError):
            ScoreWeights(route=1.2, date=-0.1, interest=-0.1)

    def test_non_numeric_weight_rejected(self):
        with pytest.raises(ConfigurationError):
            ScoreWeights(route="0.4", date=0.3, interest=0.3)
        with pytest.raises(ConfigurationError):
            ScoreWeights(route=True, date=0, interest=0)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            ScoreWeights(route=0.0, date=0.0, interest=0.0)

    def test_from_dict_rejects_unknown_keys(self):
        with pytest.raises(ConfigurationError):
            ScoreWeights.from_dict({"route": 0.4, "date": 0.3, "interests": 0.3})

    def test_from_dict_rejects_non_mapping(self):
        with pytest.raises(ConfigurationError):
            ScoreWeights.from_dict([0.4, 0.3, 0.3])

    def test_from_config(self):
        config = {"scoring": {"weights": {"route": 0.5, "date": 0.25, "interest": 0.25}}}
        weights = ScoreWeights.from_config(config)
        assert weights.route == 0.5

    def test_from_config_missing_section_uses_defaults(self):
        assert ScoreWeights.from_config({}) == ScoreWeights()


class TestAggregate:
    """Weighted aggregation with exact rounding."""

    def test_all_zero(self):
        assert aggregate(0, 0, 0) == 0

    def test_all_max(self):
        assert aggregate(100, 100, 100) == 100

    def test_route_only(self):
        assert aggregate(100, 0, 0) == 40

    def test_ties_round_up(self):
        """0.3 * 5 = 1.5 and 0.3 * 15 = 4.5 round away from zero."""
        assert aggregate(0, 5, 0) == 2
        assert aggregate(0, 15, 0) == 5

    def test_custom_weights(self):
        weights = ScoreWeights(route=0.0, date=0.0, interest=1.0)
        assert aggregate(100, 100, 37, weights) == 37

    def test_scorer_uses_its_weights(self):
        scorer = MatchScorer(ScoreWeights(route=1.0, date=0.0, interest=0.0))
        assert scorer.aggregate(80, 10, 10) == 80


class TestComputeMatch:
    """End-to-end reference scoring."""

    def test_reference_example(self, trip_a, trip_b):
        result = compute_match(trip_a, trip_b)
        assert result.route_score == 50
        assert result.date_score == 33
        assert result.interest_score == 33
        # 0.4 * 50 + 0.3 * 33 + 0.3 * 33 = 39.8
        assert result.match_score == 40
        assert result.route_overlap_cells == 2
        assert result.date_overlap_days == 3

    def test_symmetric(self, trip_a, trip_b):
        assert compute_match(trip_a, trip_b) == compute_match(trip_b, trip_a)

    def test_route_only_match(self):
        a = MatchInput(route=["a", "b"], start_date=june(1), end_date=june(5), interests=["hiking"])
        b = MatchInput(route=["b", "c"], start_date=june(10), end_date=june(15), interests=["art"])
        result = compute_match(a, b)
        assert (result.route_score, result.date_score, result.interest_score) == (50, 0, 0)
        assert result.match_score == 20

    def test_empty_inputs_score_zero(self):
        empty = MatchInput(route=[], start_date=june(1), end_date=june(1), interests=[])
        result = compute_match(empty, empty)
        assert result.match_score == 0
        assert result.to_dict() == {
            "match_score": 0,
            "route_score": 0,
            "date_score": 0,
            "interest_score": 0,
            "route_overlap_cells": 0,
            "date_overlap_days": 0,
        }

    def test_identical_trips(self, trip_a):
        result = compute_match(trip_a, trip_a)
        assert result.match_score == 100

    def test_scorer_matches_function(self, trip_a, trip_b):
        weights = ScoreWeights(route=0.2, date=0.4, interest=0.4)
        scorer = MatchScorer(weights)
        assert scorer.score(trip_a, trip_b) == compute_match(trip_a, trip_b, weights)

    def test_create_scorer_from_config(self):
        config = {"scoring": {"weights": {"route": 0.4, "date": 0.3, "interest": 0.3}}}
        scorer = create_scorer_from_config(config)
        assert scorer.weights == ScoreWeights()

    def test_create_scorer_from_bad_config(self):
        config = {"scoring": {"weights": {"route": 0.9, "date": 0.3, "interest": 0.3}}}
        with pytest.raises(ConfigurationError):
            create_scorer_from_config(config)


class TestSchema:
    """MatchInput / MatchOutput conversion."""

    def test_match_input_normalizes(self):
        trip = MatchInput(
            route=["a", "b"],
            start_date=0,
            end_date=1,
            interests=[InterestTag.FOOD, "food", "art"],
        )
        assert trip.route == ("a", "b")
        assert trip.interests == frozenset({"food", "art"})

    def test_match_input_from_dict_iso_dates(self):
        trip = MatchInput.from_dict({
            "route": ["x"],
            "startDate": "2025-06-01T00:00:00Z",
            "endDate": "2025-06-10T00:00:00Z",
            "interests": ["hiking"],
        })
        assert trip.start_date == june(1)
        assert trip.end_date == june(10)

    def test_match_input_to_dict(self, trip_a):
        d = trip_a.to_dict()
        assert d["route"] == ["a", "b", "c"]
        assert d["interests"] == ["food", "hiking"]
        assert MatchInput.from_dict(d) == trip_a

    def test_match_output_from_backend_dict(self):
        """Backend results carry only the four scores."""
        output = MatchOutput.from_dict(
            {"matchScore": 40, "routeScore": 50, "dateScore": 33, "interestScore": 33}
        )
        assert output.match_score == 40
        assert output.route_overlap_cells == 0
        assert output.date_overlap_days == 0

    def test_match_output_missing_score(self):
        with pytest.raises(KeyError):
            MatchOutput.from_dict({"matchScore": 40})

    def test_interest_flags(self):
        flags = interests_to_flags(["hiking", InterestTag.COUPLE, "not-a-tag"])
        assert len(flags) == MAX_INTERESTS == 32
        assert flags[0] is True
        assert flags[31] is True
        assert sum(flags) == 2


class TestDates:
    """ISO-8601 conversions."""

    def test_parse_utc(self):
        assert parse_instant("2025-06-01T00:00:00Z") == JUNE_1

    def test_parse_offset(self):
        assert parse_instant("2025-06-01T02:00:00+02:00") == JUNE_1

    def test_parse_naive_is_utc(self):
        assert parse_instant("2025-06-01") == JUNE_1

    def test_int_passthrough(self):
        assert parse_instant(-86400) == -86400

    @pytest.mark.parametrize("value", [
        "", "not-a-date", "now", "today", "tomorrow", "2025-13-45", "June 1, 2025", None, True, 1.5,
    ])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_instant(value)

    def test_to_iso(self):
        assert to_iso(JUNE_1) == "2025-06-01T00:00:00Z"

    def test_to_iso_negative(self):
        assert to_iso(-1) == "1969-12-31T23:59:59Z"

    def test_to_iso_beyond_timestamp_range(self):
        """Every signed 64-bit value formats, including far-future sentinels."""
        assert to_iso(253402300799) == "9999-12-31T23:59:59Z"
        assert to_iso(253402300800) == "+10000-01-01T00:00:00Z"
        assert to_iso(-62135596800) == "0001-01-01T00:00:00Z"

    @pytest.mark.parametrize("seconds", [2**62, 2**63 - 1, -(2**63)])
    def test_to_iso_i64_extremes(self, seconds):
        text = to_iso(seconds)
        assert text.endswith("Z")
        assert text[0] == ("+" if seconds > 0 else "-")
