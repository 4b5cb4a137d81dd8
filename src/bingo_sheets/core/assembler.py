"""Merge per-column arrangement sequences into sheet grids."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from ..errors import LengthMismatchError
from .arrangements import Arrangement

Grid = List[List[Optional[int]]]

FREE_CELL: Optional[int] = None
FREE_POSITION: Tuple[int, int] = (2, 2)


def is_free(x: int, y: int, free_position: Tuple[int, int] = FREE_POSITION) -> bool:
    return (x, y) == free_position


def cell(grid: Grid, x: int, y: int) -> Optional[int]:
    """Value at column ``x``, row ``y``; grids are stored row-major."""
    return grid[y][x]


def assemble_grid(
    column_arrangements: Sequence[Arrangement],
    free_position: Tuple[int, int] = FREE_POSITION,
) -> Grid:
    rows = len(column_arrangements[0]) if column_arrangements else 0
    grid: Grid = []
    for y in range(rows):
        row: List[Optional[int]] = []
        for x, arr in enumerate(column_arrangements):
            row.append(FREE_CELL if is_free(x, y, free_position) else arr[y])
        grid.append(row)
    return grid


def assemble_grids(
    columns: Sequence[Sequence[Arrangement]],
    free_position: Tuple[int, int] = FREE_POSITION,
) -> List[Grid]:
    """Build one grid per sheet index from per-column sequences.

    Sheet i takes the i-th arrangement of every column; the arrangement of
    column x fills column x top-to-bottom.
    """
    lengths = [len(c) for c in columns]
    if len(set(lengths)) > 1:
        raise LengthMismatchError(f"column sequences differ in length: {lengths}")
    count = lengths[0] if lengths else 0
    return [
        assemble_grid([column[i] for column in columns], free_position)
        for i in range(count)
    ]
