from __future__ import annotations

import pytest

from bingo_sheets.core import BuildParams, FREE_CELL, SheetBuilder, standard_pools
from bingo_sheets.core.builder import column_seed
from bingo_sheets.errors import InvalidArgumentError


def build(**kwargs):
    params = BuildParams(**{"count": 10, "seed": 20250824, **kwargs})
    return SheetBuilder().build(params)


def test_standard_sheets_shape_and_pools():
    result = build()
    pools = standard_pools()
    assert len(result.grids) == 10
    for grid in result.grids:
        assert grid[2][2] is FREE_CELL
        for y, row in enumerate(grid):
            for x, value in enumerate(row):
                if (x, y) == (2, 2):
                    continue
                assert value in pools[x]
    assert [len(c.arrangements) for c in result.columns] == [10] * 5


def test_small_batches_keep_zero_tolerance():
    result = build()
    assert result.metrics.final_tolerances == [0] * 5
    assert result.metrics.escalations == [0] * 5
    assert result.metrics.draws_per_sheet >= 5


def test_same_seed_same_sheets():
    assert build(seed=5).grids == build(seed=5).grids
    assert build(seed=5).grids != build(seed=6).grids


def test_columns_use_distinct_seeds():
    assert len({column_seed(1, idx) for idx in range(5)}) == 5


def test_parallel_matches_sequential():
    sequential = build(seed=31)
    parallel = build(seed=31, parallel=True, parallelism=2)
    assert parallel.grids == sequential.grids


def test_custom_small_pools():
    pools = [(1, 2, 3), (4, 5, 6), (7, 8, 9)]
    result = build(count=12, k=3, pools=pools)
    assert len(result.grids) == 12
    assert all(g[2][2] is FREE_CELL for g in result.grids)
    assert result.metrics.final_tolerances == [3, 3, 3]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"count": -1},
        {"pools": standard_pools()[:4]},
        {"k": 6},
        {"pools": [(1, 2, 3, 4)] * 5},
    ],
)
def test_invalid_params(kwargs):
    with pytest.raises(InvalidArgumentError):
        build(**kwargs)


def test_overlapping_pools_rejected():
    pools = standard_pools()
    pools[3] = tuple(range(40, 55))
    with pytest.raises(InvalidArgumentError, match="overlaps"):
        build(pools=pools)
