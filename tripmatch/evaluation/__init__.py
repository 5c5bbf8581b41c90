"""Evaluation of secure-backend scores against the reference scorer."""

from .oracle import (
    ScoreDiscrepancy,
    AgreementReport,
    verify_backend_result,
    build_agreement_report,
)

__all__ = [
    "ScoreDiscrepancy",
    "AgreementReport",
    "verify_backend_result",
    "build_agreement_report",
]
