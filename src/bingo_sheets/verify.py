from __future__ import annotations

import math
from collections import Counter
from typing import Dict, List, Optional, Sequence

from .core.assembler import FREE_CELL, FREE_POSITION
from .uniqueness import (
    column_arrangements_of_grid,
    duplicate_count,
    grid_hash,
    max_pairwise_similarity,
)

GridLike = Sequence[Sequence[Optional[int]]]


def compute_frequencies(grids: Sequence[GridLike], numbers: Sequence[int]) -> Dict[int, int]:
    counts: Counter[int] = Counter()
    for grid in grids:
        for row in grid:
            counts.update(x for x in row if x is not FREE_CELL)
    # ensure all numbers present with 0
    for x in numbers:
        counts.setdefault(x, 0)
    return dict(counts)


def columns_of(grids: Sequence[GridLike], x: int) -> List[tuple]:
    """Arrangements of column ``x`` across all sheets, free cell included."""
    return [column_arrangements_of_grid(g)[x] for g in grids]


def check_free_cells(grids: Sequence[GridLike]) -> bool:
    fx, fy = FREE_POSITION
    for grid in grids:
        if len(grid) <= fy or len(grid[fy]) <= fx:
            continue
        if grid[fy][fx] is not FREE_CELL:
            return False
        for y, row in enumerate(grid):
            for x, value in enumerate(row):
                if (x, y) != (fx, fy) and value is FREE_CELL:
                    return False
    return True


def check_column_pools(grids: Sequence[GridLike], pools: Sequence[Sequence[int]]) -> bool:
    allowed = [set(p) for p in pools]
    for grid in grids:
        for row in grid:
            for x, value in enumerate(row):
                if value is FREE_CELL:
                    continue
                if x >= len(allowed) or value not in allowed[x]:
                    return False
    return True


def check_no_duplicates_within_columns(grids: Sequence[GridLike]) -> bool:
    for grid in grids:
        for col in column_arrangements_of_grid(grid):
            values = [v for v in col if v is not FREE_CELL]
            if len(values) != len(set(values)):
                return False
    return True


def check_no_identical_sheets(grids: Sequence[GridLike]) -> bool:
    seen = set()
    for grid in grids:
        h = grid_hash(grid)
        if h in seen:
            return False
        seen.add(h)
    return True


def chi2_wilson_hilferty_pvalue(stat: float, df: int) -> float:
    if df <= 0:
        return 1.0
    # Wilson-Hilferty approximation: transform chi-square to normal
    t = (stat / df) ** (1.0 / 3.0)
    mu = 1.0 - 2.0 / (9.0 * df)
    sigma = math.sqrt(2.0 / (9.0 * df))
    z = (t - mu) / sigma

    def phi(val: float) -> float:
        return 0.5 * (1.0 + math.erf(val / math.sqrt(2.0)))

    p_right = 1.0 - phi(z)
    return max(0.0, min(1.0, p_right))


def uniformity_test(freqs: Dict[int, int], numbers: Sequence[int], alpha: float = 0.05) -> Dict[str, object]:
    R = len(numbers)
    total = sum(freqs.get(x, 0) for x in numbers)
    if total == 0 or R == 0:
        return {"max_minus_min": 0, "chi2": {"stat": 0.0, "df": 0, "p_value": 1.0}}
    expected = total / R
    stat = 0.0
    for x in numbers:
        stat += (freqs.get(x, 0) - expected) ** 2 / expected
    df = max(R - 1, 1)
    p = chi2_wilson_hilferty_pvalue(stat, df)
    counts = [freqs.get(x, 0) for x in numbers]
    return {
        "max_minus_min": max(counts) - min(counts),
        "chi2": {"stat": round(stat, 6), "df": df, "p_value": round(p, 6)},
        "alpha": alpha,
        "engine": "wilson_hilferty",
    }


def column_report(grids: Sequence[GridLike], x: int, pool: Sequence[int]) -> Dict[str, object]:
    arrangements = columns_of(grids, x)
    freqs = dict(Counter(v for a in arrangements for v in a if v is not FREE_CELL))
    return {
        "column": x,
        "duplicate_arrangements": duplicate_count(arrangements),
        "max_pairwise_similarity": max_pairwise_similarity(arrangements),
        "uniformity": uniformity_test(freqs, pool),
    }


def verify(grids: Sequence[GridLike], *, pools: Sequence[Sequence[int]]) -> Dict[str, object]:
    numbers = sorted(v for p in pools for v in p)
    freqs = compute_frequencies(grids, numbers)
    width = len(grids[0][0]) if grids and grids[0] else 0
    columns = [column_report(grids, x, pools[x]) for x in range(min(width, len(pools)))]
    return {
        "sheet_count": len(grids),
        "frequencies": freqs,
        "columns": columns,
        "ok_free_cells": check_free_cells(grids),
        "ok_column_pools": check_column_pools(grids, pools),
        "ok_no_duplicates_within_columns": check_no_duplicates_within_columns(grids),
        "ok_no_identical_sheets": check_no_identical_sheets(grids),
        # diversity is enforced per column only
        "grid_similarity_checked": False,
    }


def failed_checks(report: Dict[str, object]) -> List[str]:
    return [k for k, v in report.items() if k.startswith("ok_") and v is not True]
