from __future__ import annotations

import math

import pytest
from hypothesis import given, settings, strategies as st

from bingo_sheets.core.arrangements import (
    enumerate_arrangements,
    standard_pools,
    universe_for,
    universe_size,
)
from bingo_sheets.errors import InvalidArgumentError


@settings(max_examples=40)
@given(n=st.integers(min_value=1, max_value=7), data=st.data())
def test_count_and_shape(n, data):
    k = data.draw(st.integers(min_value=1, max_value=n))
    pool = list(range(10, 10 + n))
    arrangements = enumerate_arrangements(pool, k)
    assert len(arrangements) == math.factorial(n) // math.factorial(n - k)
    assert len(set(arrangements)) == len(arrangements)
    for arr in arrangements:
        assert len(arr) == k
        assert len(set(arr)) == k
        assert set(arr) <= set(pool)


def test_enumeration_is_deterministic():
    pool = [3, 1, 4, 5, 9]
    assert enumerate_arrangements(pool, 3) == enumerate_arrangements(pool, 3)


def test_order_follows_pool_order():
    assert enumerate_arrangements([1, 2, 3], 2) == [
        (1, 2),
        (1, 3),
        (2, 1),
        (2, 3),
        (3, 1),
        (3, 2),
    ]


@pytest.mark.parametrize(
    "pool,k",
    [
        ([], 1),
        ([1, 2, 3], 0),
        ([1, 2, 3], -1),
        ([1, 2, 3], 4),
        ([1, 1, 2], 2),
    ],
)
def test_invalid_arguments(pool, k):
    with pytest.raises(InvalidArgumentError):
        enumerate_arrangements(pool, k)


def test_invalid_argument_is_a_value_error():
    with pytest.raises(ValueError):
        enumerate_arrangements([1], 2)


def test_standard_pools_partition_1_to_75():
    pools = standard_pools()
    assert len(pools) == 5
    assert all(len(p) == 15 for p in pools)
    assert pools[0] == tuple(range(1, 16))
    assert pools[4] == tuple(range(61, 76))
    assert sorted(v for p in pools for v in p) == list(range(1, 76))


def test_standard_column_universe_size():
    pool = standard_pools()[0]
    universe = universe_for(pool, 5)
    assert len(universe) == universe_size(15, 5) == 360360
    assert universe_for(pool, 5) is universe
