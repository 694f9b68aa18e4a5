"""Utility helper functions."""
from typing import List, Optional

from ..models.level import BOMB, EMPTY


def validate_grid(grid: List[List[int]]) -> tuple[bool, Optional[str]]:
    """
    Validate board grid structure.

    Args:
        grid: Board indexed ``grid[x][y]``.

    Returns:
        Tuple of (is_valid, error_message).
    """
    if not isinstance(grid, list) or not grid:
        return False, "Grid must be a non-empty list of columns"

    size = len(grid)
    for x, column in enumerate(grid):
        if not isinstance(column, list):
            return False, f"Column {x} must be a list"
        if len(column) != size:
            return False, f"Column {x} has {len(column)} cells, expected {size}"

        for y, value in enumerate(column):
            if not isinstance(value, int) or isinstance(value, bool):
                return False, f"Cell ({x}, {y}) must be an integer"
            if value < BOMB:
                return False, f"Cell ({x}, {y}) has invalid value {value}"

    return True, None


def format_grid(grid: List[List[int]]) -> str:
    """
    Render a grid as text, one row per line, top row first.

    Bombs show as ``*``, empty cells as ``.`` and diamond cells as their count.
    """
    size = len(grid)
    lines = []
    for y in range(size - 1, -1, -1):
        cells = []
        for x in range(size):
            value = grid[x][y]
            if value == BOMB:
                cells.append("*")
            elif value == EMPTY:
                cells.append(".")
            else:
                cells.append(str(value))
        lines.append(" ".join(cells))
    return "\n".join(lines)
