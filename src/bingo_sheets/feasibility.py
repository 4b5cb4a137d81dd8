from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from .core.arrangements import universe_size

DEFAULT_MAX_COUNT = 10_000


@dataclass
class Feasibility:
    feasible: bool
    reasons: List[str]


def check_sheet_count(*, count: int, max_count: int = DEFAULT_MAX_COUNT) -> Feasibility:
    reasons: List[str] = []
    if count < 0:
        reasons.append("count must be >= 0")
    if count > max_count:
        reasons.append(f"count {count} exceeds max_count {max_count}")
    return Feasibility(feasible=not reasons, reasons=reasons)


def check_pools(*, pools: Sequence[Sequence[int]], k: int) -> Feasibility:
    reasons: List[str] = []
    if len(pools) != k:
        reasons.append(f"expected {k} pools for a {k}x{k} grid, got {len(pools)}")
    seen: set[int] = set()
    for idx, pool in enumerate(pools):
        if not pool:
            reasons.append(f"pool {idx} is empty")
            continue
        if len(set(pool)) != len(pool):
            reasons.append(f"pool {idx} has repeated values")
        if k > len(pool):
            reasons.append(f"pool {idx} has {len(pool)} values, fewer than k={k}")
        overlap = seen.intersection(pool)
        if overlap:
            reasons.append(f"pool {idx} overlaps earlier pools: {sorted(overlap)}")
        seen.update(pool)
    return Feasibility(feasible=not reasons, reasons=reasons)


def universe_capacity(*, pools: Sequence[Sequence[int]], k: int) -> int:
    """Smallest column universe; beyond it some column must repeat an arrangement."""
    return min(universe_size(len(p), k) for p in pools)
