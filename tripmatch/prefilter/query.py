"""
Pre-filter query parsing and validation.

The transport layer hands over the request body as a dictionary:

    {
        "destinationGridHash": "862830807ffffff",     # required
        "startDate": "2025-06-01T00:00:00Z",          # required, ISO-8601
        "endDate": "2025-06-15T00:00:00Z",            # required, ISO-8601
        "excludeOwners": ["<base58 key>", ...],       # optional, default []
        "limit": 50                                   # optional, positive
    }

Any problem raises ValidationError before a single record is scanned.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional

from ..configs.loader import get_config_value
from ..dates import parse_instant, to_iso
from ..errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50


@dataclass(frozen=True)
class PrefilterQuery:
    """
    Validated pre-filter query.

    Attributes:
        destination_grid_hash: Grid cell the candidates must be heading to
        start_date: Query window start, Unix seconds
        end_date: Query window end, Unix seconds
        exclude_owners: Owner keys (base58 text) to leave out
        limit: Maximum number of candidates to return
    """
    destination_grid_hash: str
    start_date: int
    end_date: int
    exclude_owners: FrozenSet[str] = field(default_factory=frozenset)
    limit: int = DEFAULT_LIMIT

    def to_dict(self) -> Dict[str, Any]:
        """Echo of the normalized query window."""
        return {
            "destinationGridHash": self.destination_grid_hash,
            "startDate": to_iso(self.start_date),
            "endDate": to_iso(self.end_date),
        }


def _require_instant(body: Dict[str, Any], key: str) -> int:
    value = body.get(key)
    if value is None or value == "":
        raise ValidationError(f"Missing required field: {key}", field=key)
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be an ISO-8601 string, got {type(value).__name__}", field=key)
    try:
        return parse_instant(value)
    except (ValueError, OverflowError) as e:
        raise ValidationError(f"Invalid date format for {key}: {value!r}", field=key) from e


def parse_query_request(
    body: Dict[str, Any],
    config: Optional[Dict[str, Any]] = None
) -> PrefilterQuery:
    """
    Validate a pre-filter request body.

    Args:
        body: Request fields (camelCase keys as sent by the client)
        config: Optional main config; supplies prefilter.default_limit and
            prefilter.max_limit

    Returns:
        PrefilterQuery ready for filtering

    Raises:
        ValidationError: On a missing or malformed field, or a non-positive limit
    """
    if not isinstance(body, dict):
        raise ValidationError("Request body must be an object")

    config = config or {}
    default_limit = get_config_value(config, "prefilter.default_limit", DEFAULT_LIMIT)
    max_limit = get_config_value(config, "prefilter.max_limit", None)

    grid_hash = body.get("destinationGridHash")
    if not grid_hash:
        raise ValidationError("Missing required field: destinationGridHash", field="destinationGridHash")
    if not isinstance(grid_hash, str):
        raise ValidationError("destinationGridHash must be a string", field="destinationGridHash")

    start = _require_instant(body, "startDate")
    end = _require_instant(body, "endDate")

    exclude = body.get("excludeOwners")
    if exclude is None:
        exclude = []
    if not isinstance(exclude, (list, tuple)) or not all(isinstance(o, str) for o in exclude):
        raise ValidationError("excludeOwners must be a list of strings", field="excludeOwners")

    limit = body.get("limit")
    if limit is None:
        limit = default_limit
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise ValidationError(f"limit must be an integer, got {limit!r}", field="limit")
    if limit <= 0:
        raise ValidationError(f"limit must be positive, got {limit}", field="limit")
    if max_limit is not None and limit > max_limit:
        raise ValidationError(f"limit must be at most {max_limit}, got {limit}", field="limit")

    query = PrefilterQuery(
        destination_grid_hash=grid_hash,
        start_date=start,
        end_date=end,
        exclude_owners=frozenset(exclude),
        limit=limit,
    )
    logger.debug(f"Parsed pre-filter query for {grid_hash} with limit {limit}")
    return query
