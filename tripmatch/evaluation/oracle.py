"""
Acceptance checks for externally computed match scores.

The secure computation backend returns scores computed over encrypted
data. In testing and simulation modes the plaintext inputs are available,
so each backend result can be checked against the reference
``compute_match``:

1. Per-pair verification: every score must be within ``tolerance`` of the
   reference value
2. Batch agreement: acceptance rate, mean absolute error per score, and
   rank correlation of aggregate scores

Agreement metrics describe how closely the backend reproduces the
reference; they say nothing about whether the scores are good matches.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from scipy.stats import spearmanr

from ..scoring.aggregation import MatchScorer
from ..scoring.schema import MatchInput, MatchOutput

logger = logging.getLogger(__name__)

SCORE_FIELDS = ["match_score", "route_score", "date_score", "interest_score"]

BackendResult = Union[MatchOutput, Dict[str, Any]]


@dataclass(frozen=True)
class ScoreDiscrepancy:
    """One score that differs from the reference beyond tolerance."""
    field: str
    expected: int
    observed: int

    def to_dict(self) -> Dict[str, Any]:
        return {"field": self.field, "expected": self.expected, "observed": self.observed}


def _as_output(result: BackendResult) -> MatchOutput:
    if isinstance(result, MatchOutput):
        return result
    return MatchOutput.from_dict(result)


def verify_backend_result(
    trip_a: MatchInput,
    trip_b: MatchInput,
    backend: BackendResult,
    scorer: Optional[MatchScorer] = None,
    tolerance: int = 0
) -> List[ScoreDiscrepancy]:
    """
    Compare one backend result against the reference score.

    Args:
        trip_a: First trip (plaintext)
        trip_b: Second trip (plaintext)
        backend: Backend result as MatchOutput or dict (snake or camel case)
        scorer: Reference scorer (default weights if omitted)
        tolerance: Allowed absolute difference per score

    Returns:
        List of discrepancies; empty when the result is accepted
    """
    scorer = scorer or MatchScorer()
    expected = scorer.score(trip_a, trip_b)
    observed = _as_output(backend)

    discrepancies = []
    for name in SCORE_FIELDS:
        exp_value = getattr(expected, name)
        obs_value = getattr(observed, name)
        if abs(exp_value - obs_value) > tolerance:
            discrepancies.append(ScoreDiscrepancy(name, exp_value, obs_value))

    if discrepancies:
        logger.warning(f"Backend result rejected: {[d.to_dict() for d in discrepancies]}")
    return discrepancies


@dataclass
class AgreementReport:
    """
    Agreement between backend results and reference scores over a batch.

    Attributes:
        n_pairs: Number of pairs compared
        n_accepted: Pairs with no discrepancy beyond tolerance
        mean_absolute_error: Per-score mean absolute difference
        rank_correlation: Spearman correlation of aggregate scores
        records: Per-pair expected/observed scores
    """
    n_pairs: int
    n_accepted: int
    mean_absolute_error: Dict[str, float]
    rank_correlation: float
    tolerance: int = 0
    records: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def acceptance_rate(self) -> float:
        return self.n_accepted / self.n_pairs if self.n_pairs > 0 else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "n_pairs": int(self.n_pairs),
            "n_accepted": int(self.n_accepted),
            "acceptance_rate": float(self.acceptance_rate),
            "mean_absolute_error": {k: float(v) for k, v in self.mean_absolute_error.items()},
            "rank_correlation": float(self.rank_correlation),
            "tolerance": int(self.tolerance),
        }

    def to_frame(self) -> pd.DataFrame:
        """Per-pair expected and observed scores as a DataFrame."""
        columns = ["pair"] + [f"{p}_{s}" for s in SCORE_FIELDS for p in ("expected", "observed")]
        columns.append("accepted")
        return pd.DataFrame(self.records, columns=columns)

    def save(self, filepath: str) -> None:
        """Save report to JSON file."""
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Saved agreement report to {filepath}")

    def summary(self) -> str:
        """Generate text summary of the report."""
        lines = [
            "Backend Agreement Report",
            "=" * 50,
            "",
            f"Pairs compared: {self.n_pairs}",
            f"Accepted:       {self.n_accepted} ({self.acceptance_rate:.2%})",
            f"Tolerance:      {self.tolerance}",
            "",
            "Mean Absolute Error:",
        ]
        for name, value in self.mean_absolute_error.items():
            lines.append(f"  {name}: {value:.4f}")
        lines.extend([
            "",
            f"Rank correlation (match_score): {self.rank_correlation:.4f}",
        ])
        return "\n".join(lines)


def _rank_correlation(expected: np.ndarray, observed: np.ndarray) -> float:
    # Undefined for fewer than two points or constant input
    if len(expected) < 2 or np.all(expected == expected[0]) or np.all(observed == observed[0]):
        return 0.0
    correlation, _ = spearmanr(expected, observed)
    return 0.0 if np.isnan(correlation) else float(correlation)


def build_agreement_report(
    pairs: Sequence[Tuple[MatchInput, MatchInput]],
    backend_outputs: Sequence[BackendResult],
    scorer: Optional[MatchScorer] = None,
    tolerance: int = 0
) -> AgreementReport:
    """
    Build an agreement report for a batch of backend results.

    Args:
        pairs: Plaintext trip pairs, in the same order as backend_outputs
        backend_outputs: Backend results for each pair
        scorer: Reference scorer (default weights if omitted)
        tolerance: Allowed absolute difference per score

    Returns:
        AgreementReport instance
    """
    if len(pairs) != len(backend_outputs):
        raise ValueError(
            f"pairs and backend_outputs must have same length: "
            f"{len(pairs)} vs {len(backend_outputs)}"
        )

    scorer = scorer or MatchScorer()
    n_pairs = len(pairs)
    expected = np.zeros((n_pairs, len(SCORE_FIELDS)), dtype=int)
    observed = np.zeros((n_pairs, len(SCORE_FIELDS)), dtype=int)

    for i, ((trip_a, trip_b), result) in enumerate(zip(pairs, backend_outputs)):
        ref = scorer.score(trip_a, trip_b)
        obs = _as_output(result)
        expected[i] = [getattr(ref, name) for name in SCORE_FIELDS]
        observed[i] = [getattr(obs, name) for name in SCORE_FIELDS]

    abs_diff = np.abs(expected - observed)
    accepted = np.all(abs_diff <= tolerance, axis=1) if n_pairs else np.zeros(0, dtype=bool)

    if n_pairs:
        mae = {name: float(abs_diff[:, j].mean()) for j, name in enumerate(SCORE_FIELDS)}
    else:
        mae = {name: 0.0 for name in SCORE_FIELDS}

    records = []
    for i in range(n_pairs):
        row: Dict[str, Any] = {"pair": i}
        for j, name in enumerate(SCORE_FIELDS):
            row[f"expected_{name}"] = int(expected[i, j])
            row[f"observed_{name}"] = int(observed[i, j])
        row["accepted"] = bool(accepted[i])
        records.append(row)

    report = AgreementReport(
        n_pairs=n_pairs,
        n_accepted=int(accepted.sum()),
        mean_absolute_error=mae,
        rank_correlation=_rank_correlation(expected[:, 0], observed[:, 0]),
        tolerance=tolerance,
        records=records,
    )
    logger.info(f"Backend agreement: {report.n_accepted}/{n_pairs} accepted")
    return report
