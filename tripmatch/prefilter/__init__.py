"""Candidate pre-filtering before secure match computation."""

from .query import PrefilterQuery, parse_query_request
from .candidates import (
    CandidateSummary,
    PrefilterResponse,
    ScanStats,
    dates_overlap,
    filter_candidates,
    run_prefilter,
)

__all__ = [
    "PrefilterQuery",
    "parse_query_request",
    "CandidateSummary",
    "PrefilterResponse",
    "ScanStats",
    "dates_overlap",
    "filter_candidates",
    "run_prefilter",
]
