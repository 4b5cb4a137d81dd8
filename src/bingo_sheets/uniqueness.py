from __future__ import annotations

import hashlib
import itertools
import json
from collections import Counter
from typing import Iterable, List, Optional, Sequence, Tuple

from .core.assembler import FREE_CELL


def column_arrangements_of_grid(
    grid: Sequence[Sequence[Optional[int]]],
) -> List[Tuple[Optional[int], ...]]:
    if not grid:
        return []
    rows = len(grid)
    cols = len(grid[0])
    return [tuple(grid[y][x] for y in range(rows)) for x in range(cols)]


def duplicate_count(arrangements: Iterable[Sequence[object]]) -> int:
    seen = Counter(tuple(a) for a in arrangements)
    return sum(c - 1 for c in seen.values() if c > 1)


def max_pairwise_similarity(arrangements: Sequence[Sequence[object]]) -> int:
    """Largest number of equal positions shared by any two arrangements.

    The free cell never counts as a shared value.
    Checks position subsets from widest to narrowest; the first width with a
    projection collision is the maximum. Returns 0 for fewer than two items.
    """
    if len(arrangements) < 2:
        return 0
    k = len(arrangements[0])
    for width in range(k, 0, -1):
        for positions in itertools.combinations(range(k), width):
            seen = set()
            for arr in arrangements:
                key = tuple(arr[i] for i in positions)
                if FREE_CELL in key:
                    continue
                if key in seen:
                    return width
                seen.add(key)
    return 0


def grid_hash(grid: Sequence[Sequence[Optional[int]]]) -> str:
    payload = json.dumps(grid, ensure_ascii=True, separators=(",", ":"))
    return "sha256:" + hashlib.sha256(payload.encode("utf-8")).hexdigest()


def sheets_hash(grids: Iterable[Sequence[Sequence[Optional[int]]]]) -> str:
    hashes = [grid_hash(g) for g in grids]
    payload = json.dumps(hashes, ensure_ascii=True, separators=(",", ":"))
    return "sha256:" + hashlib.sha256(payload.encode("utf-8")).hexdigest()
