from __future__ import annotations

import copy

from bingo_sheets.core import FREE_CELL, BuildParams, SheetBuilder, standard_pools
from bingo_sheets.verify import columns_of, failed_checks, verify


def sheets(count: int = 8, seed: int = 123):
    return SheetBuilder().build(BuildParams(count=count, seed=seed)).grids


def test_verify_reports_clean_run():
    grids = sheets()
    rep = verify(grids, pools=standard_pools())
    assert rep["sheet_count"] == 8
    assert rep["ok_free_cells"] is True
    assert rep["ok_column_pools"] is True
    assert rep["ok_no_duplicates_within_columns"] is True
    assert rep["ok_no_identical_sheets"] is True
    assert rep["grid_similarity_checked"] is False
    assert failed_checks(rep) == []
    assert sum(rep["frequencies"].values()) == 8 * 24
    assert set(rep["frequencies"]) == set(range(1, 76))
    for col in rep["columns"]:
        assert col["duplicate_arrangements"] == 0
        # eight sheets fit into tolerance 0
        assert col["max_pairwise_similarity"] == 0
        assert 0.0 <= col["uniformity"]["chi2"]["p_value"] <= 1.0


def test_verify_flags_tampered_grids():
    grids = copy.deepcopy(sheets(count=3))
    grids[0][2][2] = 40
    grids[1][0][0] = 75
    grids[2] = copy.deepcopy(grids[1])
    rep = verify(grids, pools=standard_pools())
    assert rep["ok_free_cells"] is False
    assert rep["ok_column_pools"] is False
    assert rep["ok_no_identical_sheets"] is False
    assert "ok_free_cells" in failed_checks(rep)


def test_verify_empty():
    rep = verify([], pools=standard_pools())
    assert rep["sheet_count"] == 0
    assert rep["columns"] == []
    assert failed_checks(rep) == []


def test_free_cell_is_not_a_shared_value():
    grids = sheets(count=2, seed=7)
    center = columns_of(grids, 2)
    visible = sum(
        1 for a, b in zip(center[0], center[1]) if a is not FREE_CELL and a == b
    )
    rep = verify(grids, pools=standard_pools())
    assert rep["columns"][2]["max_pairwise_similarity"] == visible == 0
