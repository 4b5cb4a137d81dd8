from __future__ import annotations

import math

from hypothesis import given, strategies as st

from bingo_sheets.core.arrangements import standard_pools
from bingo_sheets.feasibility import check_pools, check_sheet_count, universe_capacity


@given(
    count=st.integers(min_value=-5, max_value=20_000),
    max_count=st.integers(min_value=0, max_value=15_000),
)
def test_sheet_count_bounds_property(count, max_count):
    result = check_sheet_count(count=count, max_count=max_count)
    assert result.feasible == (0 <= count <= max_count)
    assert result.feasible == (result.reasons == [])


def test_default_max_count():
    assert check_sheet_count(count=10_000).feasible
    assert not check_sheet_count(count=10_001).feasible


def test_standard_pools_are_feasible():
    assert check_pools(pools=standard_pools(), k=5).feasible


def test_pool_problems_are_reported():
    result = check_pools(pools=[(1, 2, 3), (3, 4, 5), (), (6, 6, 7)], k=3)
    assert not result.feasible
    text = " ".join(result.reasons)
    assert "expected 3 pools" in text
    assert "overlaps" in text
    assert "empty" in text
    assert "repeated" in text


@given(sizes=st.lists(st.integers(min_value=3, max_value=12), min_size=1, max_size=5))
def test_universe_capacity_is_smallest_pool_universe(sizes):
    pools = [tuple(range(n)) for n in sizes]
    assert universe_capacity(pools=pools, k=3) == math.perm(min(sizes), 3)


def test_standard_capacity():
    assert universe_capacity(pools=standard_pools(), k=5) == 360360
