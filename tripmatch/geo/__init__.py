"""Grid cell helpers."""

from .cells import (
    WAYPOINT_RESOLUTION,
    DESTINATION_RESOLUTION,
    MAX_WAYPOINTS,
    waypoint_to_cell,
    destination_grid_hash,
    waypoint_to_destination_cell,
    waypoints_to_route,
    neighboring_cells,
    is_valid_cell_id,
    cell_to_u64,
    u64_to_cell,
)

__all__ = [
    "WAYPOINT_RESOLUTION",
    "DESTINATION_RESOLUTION",
    "MAX_WAYPOINTS",
    "waypoint_to_cell",
    "destination_grid_hash",
    "waypoint_to_destination_cell",
    "waypoints_to_route",
    "neighboring_cells",
    "is_valid_cell_id",
    "cell_to_u64",
    "u64_to_cell",
]
