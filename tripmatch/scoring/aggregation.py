"""
Weighted aggregation of the three match sub-scores.

Aggregation Formula:
    match = round(w_route * route + w_date * date + w_interest * interest)

Default weights are route 0.4, date 0.3, interest 0.3. Weights live in a
validated configuration object: they must each be in [0, 1] and sum to
exactly 1.0. Validation happens when the configuration is built, so a bad
configuration fails at load time and never inside a scoring call.

``compute_match`` is the reference score. Results returned by the secure
computation backend are checked against it (see ``tripmatch.evaluation``).
"""

import logging
from dataclasses import dataclass
from fractions import Fraction
from typing import Any, Dict, Optional

from ..errors import ConfigurationError
from .overlap import (
    cell_overlap,
    date_overlap_days,
    date_score,
    interest_score,
    round_half_away_from_zero,
    route_score,
)
from .schema import MatchInput, MatchOutput

logger = logging.getLogger(__name__)


def _exact(weight: float) -> Fraction:
    # Decimal reading of the weight, so 0.4 + 0.3 + 0.3 is exactly 1
    return Fraction(str(weight))


@dataclass(frozen=True)
class ScoreWeights:
    """
    Aggregation weights for the match score.

    Attributes:
        route: Weight of the route overlap score
        date: Weight of the date overlap score
        interest: Weight of the interest similarity score
    """
    route: float = 0.4
    date: float = 0.3
    interest: float = 0.3

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Validate configuration values."""
        for name in ("route", "date", "interest"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"{name} weight must be a number, got {value!r}")
            if not 0 <= value <= 1:
                raise ConfigurationError(f"{name} weight must be in [0, 1], got {value}")

        total = _exact(self.route) + _exact(self.date) + _exact(self.interest)
        if total != 1:
            raise ConfigurationError(
                f"Score weights must sum to 1.0: "
                f"{self.route} + {self.date} + {self.interest} = {float(total)}"
            )

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ScoreWeights":
        """Create from dictionary."""
        if not isinstance(d, dict):
            raise ConfigurationError(f"Score weights must be a mapping, got {type(d).__name__}")
        unknown = set(d) - {"route", "date", "interest"}
        if unknown:
            raise ConfigurationError(f"Unknown score weight keys: {sorted(unknown)}")
        return cls(**d)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "ScoreWeights":
        """Create from main config dictionary."""
        weights = config.get("scoring", {}).get("weights", {})
        return cls.from_dict(weights)


DEFAULT_WEIGHTS = ScoreWeights()


def aggregate(
    route: int,
    date: int,
    interest: int,
    weights: ScoreWeights = DEFAULT_WEIGHTS
) -> int:
    """
    Combine three sub-scores into the match score.

    Args:
        route: Route overlap score [0, 100]
        date: Date overlap score [0, 100]
        interest: Interest similarity score [0, 100]
        weights: Validated aggregation weights

    Returns:
        Weighted score rounded half away from zero, in [0, 100]
    """
    weighted = (
        _exact(weights.route) * route
        + _exact(weights.date) * date
        + _exact(weights.interest) * interest
    )
    return min(100, max(0, round_half_away_from_zero(weighted)))


class MatchScorer:
    """
    Reference match scorer.

    Stateless apart from its weights, so a single instance can be shared
    across threads.

    Attributes:
        weights: ScoreWeights used for aggregation
    """

    def __init__(self, weights: Optional[ScoreWeights] = None):
        """
        Initialize the scorer.

        Args:
            weights: ScoreWeights instance (defaults to 0.4 / 0.3 / 0.3)
        """
        self.weights = weights or DEFAULT_WEIGHTS
        logger.info(
            f"Initialized MatchScorer with weights route={self.weights.route}, "
            f"date={self.weights.date}, interest={self.weights.interest}"
        )

    def aggregate(self, route: int, date: int, interest: int) -> int:
        """Combine sub-scores with this scorer's weights."""
        return aggregate(route, date, interest, self.weights)

    def score(self, trip_a: MatchInput, trip_b: MatchInput) -> MatchOutput:
        """
        Compute the full match result for two trips.

        Args:
            trip_a: First trip
            trip_b: Second trip

        Returns:
            MatchOutput with the three sub-scores, the aggregate, and raw
            overlap counts
        """
        return compute_match(trip_a, trip_b, self.weights)


def compute_match(
    trip_a: MatchInput,
    trip_b: MatchInput,
    weights: ScoreWeights = DEFAULT_WEIGHTS
) -> MatchOutput:
    """
    Reference match computation with the given weights.

    This is the canonical score that externally computed results are
    validated against.
    """
    r_score = route_score(trip_a.route, trip_b.route)
    d_score = date_score(trip_a.start_date, trip_a.end_date, trip_b.start_date, trip_b.end_date)
    i_score = interest_score(trip_a.interests, trip_b.interests)

    return MatchOutput(
        match_score=aggregate(r_score, d_score, i_score, weights),
        route_score=r_score,
        date_score=d_score,
        interest_score=i_score,
        route_overlap_cells=cell_overlap(trip_a.route, trip_b.route),
        date_overlap_days=date_overlap_days(
            trip_a.start_date, trip_a.end_date, trip_b.start_date, trip_b.end_date
        ),
    )


def create_scorer_from_config(config: Dict[str, Any]) -> MatchScorer:
    """
    Factory function to create MatchScorer from config.

    Raises:
        ConfigurationError: If the configured weights are invalid
    """
    return MatchScorer(ScoreWeights.from_config(config))
