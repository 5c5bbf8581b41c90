"""
Trip Matching Engine

This package implements the local side of the private travel-companion
matcher: decoding persisted trip records, narrowing the universe of trips
before any secure computation is requested, and the deterministic scoring
function used as the reference for results returned by the secure backend.

Key Design Decisions:
- Record decoding returns a typed error value instead of raising in batch scans
- Pre-filtering is a bounded, early-exit scan in record order
- Scores are integers in [0, 100] with round-half-away-from-zero rounding
- Aggregation weights are a validated configuration, not code constants
"""

__version__ = "1.0.0"
