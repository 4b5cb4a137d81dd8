"""Pools and the arrangement universe of a column."""

from __future__ import annotations

import math
from functools import lru_cache
from typing import List, Sequence, Tuple

from ..errors import InvalidArgumentError

Arrangement = Tuple[int, ...]
Pool = Tuple[int, ...]

GRID_SIZE = 5
POOL_SIZE = 15


def standard_pools(*, columns: int = GRID_SIZE, per_column: int = POOL_SIZE) -> List[Pool]:
    """Contiguous blocks partitioning 1..columns*per_column (B-I-N-G-O by default)."""
    if columns <= 0 or per_column <= 0:
        raise InvalidArgumentError("columns and per_column must be positive")
    return [
        tuple(range(c * per_column + 1, (c + 1) * per_column + 1)) for c in range(columns)
    ]


def validate_pool(pool: Sequence[int], k: int) -> None:
    if len(pool) == 0:
        raise InvalidArgumentError("pool must not be empty")
    if len(set(pool)) != len(pool):
        raise InvalidArgumentError(f"pool values must be distinct: {list(pool)}")
    if k <= 0:
        raise InvalidArgumentError(f"arrangement length must be positive, got k={k}")
    if k > len(pool):
        raise InvalidArgumentError(
            f"arrangement length k={k} exceeds pool size {len(pool)}"
        )


def universe_size(n: int, k: int) -> int:
    return math.perm(n, k)


def enumerate_arrangements(pool: Sequence[int], k: int) -> List[Arrangement]:
    """All ordered, duplicate-free k-sequences drawn from ``pool``.

    Built breadth-first from singletons: every partial arrangement is
    extended by each pool value it does not contain yet, in pool order, so
    the output order is deterministic (lexicographic by pool position).
    """
    validate_pool(pool, k)
    values = tuple(pool)
    partial: List[Arrangement] = [(v,) for v in values]
    for _length in range(1, k):
        extended: List[Arrangement] = []
        for arr in partial:
            used = set(arr)
            for v in values:
                if v not in used:
                    extended.append(arr + (v,))
        partial = extended
    return partial


@lru_cache(maxsize=16)
def universe_for(pool: Pool, k: int) -> Tuple[Arrangement, ...]:
    """Cached universe; pools must be passed as tuples."""
    return tuple(enumerate_arrangements(pool, k))
