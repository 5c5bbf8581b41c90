"""
Candidate pre-filtering over persisted trip records.

Narrows the universe of trips before any secure computation is requested.
Each record is decoded and run through four checks, stopping at the first
that fails:

1. Destination grid hash equals the query hash (exact string match)
2. Trip is active
3. Owner is not excluded
4. Date ranges overlap, boundaries inclusive:
       query_start <= trip_end and query_end >= trip_start

Records that fail to decode are skipped. The scan stops as soon as
``limit`` candidates are collected, so records past that point are never
decoded. Candidates keep scan order.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from ..dates import to_iso
from ..errors import DecodeError
from ..records.trip_codec import Trip, try_decode_trip
from .query import PrefilterQuery

logger = logging.getLogger(__name__)

# A record is either the raw bytes or (trip_id, raw bytes)
RawRecord = Union[bytes, bytearray, memoryview, Tuple[Optional[str], bytes]]


@dataclass(frozen=True)
class CandidateSummary:
    """
    Public view of a trip that passed the pre-filter.

    The encrypted payload is deliberately absent.
    """
    owner: str
    destination_grid_hash: str
    start_date: int
    end_date: int
    is_active: bool
    created_at: int
    trip_id: Optional[str] = None

    @classmethod
    def from_trip(cls, trip: Trip, trip_id: Optional[str] = None) -> "CandidateSummary":
        return cls(
            owner=trip.owner_id,
            destination_grid_hash=trip.destination_grid_hash,
            start_date=trip.start_date,
            end_date=trip.end_date,
            is_active=trip.is_active,
            created_at=trip.created_at,
            trip_id=trip_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary with ISO-8601 dates."""
        return {
            "tripId": self.trip_id,
            "owner": self.owner,
            "destinationGridHash": self.destination_grid_hash,
            "startDate": to_iso(self.start_date),
            "endDate": to_iso(self.end_date),
            "isActive": self.is_active,
            "createdAt": to_iso(self.created_at),
        }


@dataclass
class ScanStats:
    """Counters collected during one pre-filter scan."""
    scanned: int = 0
    skipped: int = 0
    matched: int = 0


def _split_record(record: RawRecord) -> Tuple[Optional[str], bytes]:
    if isinstance(record, tuple):
        trip_id, data = record
        return trip_id, data
    return None, record


def dates_overlap(query_start: int, query_end: int, trip_start: int, trip_end: int) -> bool:
    """Inclusive interval intersection used by the pre-filter."""
    return query_start <= trip_end and query_end >= trip_start


def filter_candidates(
    records: Iterable[RawRecord],
    destination_grid_hash: str,
    query_start: int,
    query_end: int,
    exclude_owners: Iterable[str] = (),
    limit: int = 50,
    stats: Optional[ScanStats] = None
) -> List[CandidateSummary]:
    """
    Scan records and return up to ``limit`` eligible candidates.

    Args:
        records: Raw record buffers, optionally paired with a trip id
        destination_grid_hash: Grid cell to match exactly
        query_start: Query window start, Unix seconds
        query_end: Query window end, Unix seconds
        exclude_owners: Owner keys (base58 text) to leave out
        limit: Maximum number of candidates; 0 or less returns []
        stats: Optional counters updated in place

    Returns:
        Candidate summaries in scan order
    """
    stats = stats if stats is not None else ScanStats()
    candidates: List[CandidateSummary] = []
    if limit <= 0:
        return candidates

    excluded = set(exclude_owners)

    for index, record in enumerate(records):
        trip_id, data = _split_record(record)
        stats.scanned += 1

        trip = try_decode_trip(data)
        if isinstance(trip, DecodeError):
            stats.skipped += 1
            logger.debug(f"Skipping record {index} ({trip_id}): {trip}")
            continue

        if trip.destination_grid_hash != destination_grid_hash:
            continue
        if not trip.is_active:
            continue
        if trip.owner_id in excluded:
            continue
        if not dates_overlap(query_start, query_end, trip.start_date, trip.end_date):
            continue

        candidates.append(CandidateSummary.from_trip(trip, trip_id))
        if len(candidates) >= limit:
            break

    stats.matched = len(candidates)
    return candidates


@dataclass(frozen=True)
class PrefilterResponse:
    """Response body for a pre-filter query."""
    candidates: List[CandidateSummary]
    query: PrefilterQuery

    @property
    def count(self) -> int:
        return len(self.candidates)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "candidates": [c.to_dict() for c in self.candidates],
            "count": self.count,
            "query": self.query.to_dict(),
        }


def run_prefilter(records: Iterable[RawRecord], query: PrefilterQuery) -> PrefilterResponse:
    """
    Run a validated query over a sequence of records.

    Args:
        records: Raw record buffers, optionally paired with a trip id
        query: Validated PrefilterQuery

    Returns:
        PrefilterResponse with candidates and the echoed query window
    """
    stats = ScanStats()
    candidates = filter_candidates(
        records,
        query.destination_grid_hash,
        query.start_date,
        query.end_date,
        query.exclude_owners,
        query.limit,
        stats=stats,
    )
    logger.info(
        f"Pre-filter for {query.destination_grid_hash}: scanned={stats.scanned}, "
        f"skipped={stats.skipped}, matched={stats.matched}"
    )
    return PrefilterResponse(candidates=candidates, query=query)
