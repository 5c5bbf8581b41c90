"""
Input and output schema for match scoring.

MatchInput is the plaintext view of one trip as seen by the scorer (in
simulation/test mode the secure-computation boundary has already decrypted
it). MatchOutput is produced fresh per computation and never mutated.

Interest tags map to 32 fixed categories; the secure-computation circuit
consumes them as a 32-slot boolean vector.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Tuple

from ..dates import parse_instant


class InterestTag(Enum):
    """Interest categories, in circuit slot order."""
    HIKING = "hiking"
    PHOTOGRAPHY = "photography"
    FOOD = "food"
    CULTURE = "culture"
    BEACH = "beach"
    NIGHTLIFE = "nightlife"
    ADVENTURE = "adventure"
    RELAXATION = "relaxation"
    SHOPPING = "shopping"
    WILDLIFE = "wildlife"
    HISTORY = "history"
    ART = "art"
    MUSIC = "music"
    SPORTS = "sports"
    SKIING = "skiing"
    DIVING = "diving"
    SURFING = "surfing"
    CLIMBING = "climbing"
    CYCLING = "cycling"
    RUNNING = "running"
    YOGA = "yoga"
    MEDITATION = "meditation"
    COOKING = "cooking"
    WINE = "wine"
    COFFEE = "coffee"
    LOCAL = "local"
    LUXURY = "luxury"
    BUDGET = "budget"
    ECO = "eco"
    FAMILY = "family"
    SOLO = "solo"
    COUPLE = "couple"


MAX_INTERESTS = len(InterestTag)
_TAG_SLOTS = {tag.value: slot for slot, tag in enumerate(InterestTag)}


def interests_to_flags(tags: Iterable[str]) -> List[bool]:
    """
    Convert interest tags to the circuit's 32-slot boolean vector.

    Tags outside the known categories have no slot and are ignored here.
    """
    flags = [False] * MAX_INTERESTS
    for tag in tags:
        value = tag.value if isinstance(tag, InterestTag) else tag
        slot = _TAG_SLOTS.get(value)
        if slot is not None:
            flags[slot] = True
    return flags


def _normalize_tags(tags: Iterable[Any]) -> FrozenSet[str]:
    return frozenset(t.value if isinstance(t, InterestTag) else t for t in tags)


@dataclass(frozen=True)
class MatchInput:
    """
    Plaintext trip as consumed by the scorer.

    Attributes:
        route: Ordered grid cell identifiers
        start_date: Unix seconds
        end_date: Unix seconds
        interests: Interest tags; duplicates collapse
    """
    route: Tuple[str, ...]
    start_date: int
    end_date: int
    interests: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        # Accept lists/sets and InterestTag members from callers
        object.__setattr__(self, "route", tuple(self.route))
        object.__setattr__(self, "interests", _normalize_tags(self.interests))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "route": list(self.route),
            "start_date": self.start_date,
            "end_date": self.end_date,
            "interests": sorted(self.interests),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MatchInput":
        """
        Create from dictionary.

        Dates may be Unix seconds or ISO-8601 strings; both snake_case and
        camelCase keys are accepted.
        """
        start = data["start_date"] if "start_date" in data else data["startDate"]
        end = data["end_date"] if "end_date" in data else data["endDate"]
        return cls(
            route=data.get("route", []),
            start_date=parse_instant(start),
            end_date=parse_instant(end),
            interests=data.get("interests", []),
        )


@dataclass(frozen=True)
class MatchOutput:
    """
    Result of scoring one pair of trips.

    Attributes:
        match_score: Weighted aggregate [0, 100]
        route_score: Route overlap score [0, 100]
        date_score: Date overlap score [0, 100]
        interest_score: Interest similarity score [0, 100]
        route_overlap_cells: Number of distinct shared grid cells
        date_overlap_days: Whole days of date overlap
    """
    match_score: int
    route_score: int
    date_score: int
    interest_score: int
    route_overlap_cells: int
    date_overlap_days: int

    def to_dict(self) -> Dict[str, int]:
        """Convert to dictionary."""
        return {
            "match_score": self.match_score,
            "route_score": self.route_score,
            "date_score": self.date_score,
            "interest_score": self.interest_score,
            "route_overlap_cells": self.route_overlap_cells,
            "date_overlap_days": self.date_overlap_days,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MatchOutput":
        """
        Create from dictionary with snake_case or camelCase keys.

        The secure backend reveals only the four scores, so the overlap
        counts default to 0 when absent.
        """
        def pick(snake: str, camel: str, required: bool = True) -> int:
            if snake in data:
                return int(data[snake])
            if camel in data or required:
                return int(data[camel])
            return 0

        return cls(
            match_score=pick("match_score", "matchScore"),
            route_score=pick("route_score", "routeScore"),
            date_score=pick("date_score", "dateScore"),
            interest_score=pick("interest_score", "interestScore"),
            route_overlap_cells=pick("route_overlap_cells", "routeOverlapCells", required=False),
            date_overlap_days=pick("date_overlap_days", "dateOverlapDays", required=False),
        )
