"""Match scoring: overlap calculators and weighted aggregation."""

from .schema import MatchInput, MatchOutput, InterestTag, interests_to_flags
from .overlap import (
    cell_overlap,
    route_score,
    date_overlap_days,
    date_score,
    interest_score,
    round_half_away_from_zero,
)
from .aggregation import (
    ScoreWeights,
    MatchScorer,
    aggregate,
    compute_match,
    create_scorer_from_config,
)

__all__ = [
    "MatchInput",
    "MatchOutput",
    "InterestTag",
    "interests_to_flags",
    "cell_overlap",
    "route_score",
    "date_overlap_days",
    "date_score",
    "interest_score",
    "round_half_away_from_zero",
    "ScoreWeights",
    "MatchScorer",
    "aggregate",
    "compute_match",
    "create_scorer_from_config",
]
