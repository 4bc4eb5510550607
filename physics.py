"""
Distance functions over grid coordinates.

Grid cells are not square: a column step and a row step cover different
physical distances (km_per_cell_x vs km_per_cell_y), so every range check
goes through physical_distance rather than raw grid deltas.
"""

import math

from models import Position
from scenarios import Scenario


def physical_distance(p1: Position, p2: Position, scenario: Scenario) -> float:
    """
    Euclidean distance in km between two cells.

    Args:
        p1, p2: Grid positions
        scenario: Scenario supplying the per-axis cell scale

    Returns:
        Distance in km
    """
    dx = abs(p1.x - p2.x) * scenario.km_per_cell_x
    dy = abs(p1.y - p2.y) * scenario.km_per_cell_y
    return math.hypot(dx, dy)


def within_range(p1: Position, p2: Position, range_km: float, scenario: Scenario,
                 epsilon: float = 0.0) -> bool:
    """
    Check if two cells are within range_km of each other.

    Args:
        p1, p2: Grid positions
        range_km: Threshold distance in km (inclusive)
        scenario: Scenario supplying the per-axis cell scale
        epsilon: Extra tolerance in km added to the threshold

    Returns:
        True if physical_distance(p1, p2) <= range_km + epsilon
    """
    return physical_distance(p1, p2, scenario) <= range_km + epsilon


def chebyshev_distance(p1: Position, p2: Position) -> int:
    """King-move distance on raw grid coordinates. Heuristic use only."""
    return max(abs(p1.x - p2.x), abs(p1.y - p2.y))
