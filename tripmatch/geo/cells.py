"""
H3 grid cells for privacy-preserving location handling.

Resolution levels:
- Level 7 (~5 km² per cell): route waypoints, stored encrypted
- Level 6 (~36 km² per cell): destination grid hash, public, used by the
  pre-filter

Cells nest hierarchically, so a waypoint cell can be coarsened to its
destination-resolution parent. Matching never does geometry: two cells
overlap only when their identifiers are equal.
"""

import logging
import re
from typing import Iterable, List, Tuple

import h3

logger = logging.getLogger(__name__)

WAYPOINT_RESOLUTION = 7
DESTINATION_RESOLUTION = 6

# Fixed route capacity of the secure-computation circuit
MAX_WAYPOINTS = 20

_CELL_ID_PATTERN = re.compile(r"^(0x)?[0-9a-fA-F]{15}$")


def waypoint_to_cell(lat: float, lng: float) -> str:
    """Map a coordinate to its waypoint-resolution cell."""
    return h3.latlng_to_cell(lat, lng, WAYPOINT_RESOLUTION)


def destination_grid_hash(lat: float, lng: float) -> str:
    """Map a destination coordinate to the public grid hash used for pre-filtering."""
    return h3.latlng_to_cell(lat, lng, DESTINATION_RESOLUTION)


def waypoint_to_destination_cell(cell: str) -> str:
    """Coarsen a waypoint cell to its destination-resolution parent."""
    return h3.cell_to_parent(cell, DESTINATION_RESOLUTION)


def waypoints_to_route(points: Iterable[Tuple[float, float]]) -> List[str]:
    """
    Convert (lat, lng) waypoints into a route of grid cells.

    Consecutive or repeated waypoints falling in the same cell collapse to
    the first occurrence. At most MAX_WAYPOINTS cells are kept.
    """
    route: List[str] = []
    seen = set()
    for lat, lng in points:
        if len(route) >= MAX_WAYPOINTS:
            logger.debug(f"Route truncated at {MAX_WAYPOINTS} cells")
            break
        cell = waypoint_to_cell(lat, lng)
        if cell not in seen:
            seen.add(cell)
            route.append(cell)
    return route


def neighboring_cells(cell: str, radius: int = 1) -> List[str]:
    """Cells within ``radius`` grid steps of ``cell`` (the cell included)."""
    return sorted(h3.grid_disk(cell, radius))


def is_valid_cell_id(text: str) -> bool:
    """Check the textual form: 15 hex characters, optional 0x prefix."""
    return bool(_CELL_ID_PATTERN.match(text))


def cell_to_u64(cell: str) -> int:
    """Integer form of a cell, as fed to the secure-computation circuit."""
    if cell.startswith("0x"):
        cell = cell[2:]
    return h3.str_to_int(cell)


def u64_to_cell(value: int) -> str:
    """Inverse of ``cell_to_u64``."""
    return h3.int_to_str(value)
