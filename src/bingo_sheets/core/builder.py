"""Sheet builder: column samplers joined into grids."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..errors import InvalidArgumentError
from ..rng import create_rng, derive_parallel_seed
from .arrangements import GRID_SIZE, Pool, standard_pools, universe_for, validate_pool
from .assembler import FREE_POSITION, Grid, assemble_grids
from .sampler import ColumnResult, sample_column

logger = logging.getLogger(__name__)

COLUMN_SEED_PURPOSE = "column"


@dataclass
class BuildParams:
    """Parameters for sheet generation."""

    count: int
    seed: int
    rng_engine: str = "py_random"
    k: int = GRID_SIZE
    pools: Optional[List[Pool]] = None
    parallel: bool = False
    parallelism: int = 1


@dataclass
class BuildMetrics:
    """Metrics for sheet generation."""

    total_time: float
    draws_per_sheet: float
    escalations: List[int] = field(default_factory=list)
    final_tolerances: List[int] = field(default_factory=list)


@dataclass
class BuildResult:
    """Result of sheet generation."""

    grids: List[Grid]
    columns: List[ColumnResult]
    metrics: BuildMetrics


def column_seed(base_seed: int, column_index: int) -> int:
    return derive_parallel_seed(base_seed, column_index, COLUMN_SEED_PURPOSE)


def build_column(pool: Pool, k: int, count: int, rng_engine: str, seed: int) -> ColumnResult:
    """Sample one column; module level so process pools can pickle it."""
    universe = universe_for(tuple(pool), k)
    rng = create_rng(rng_engine, seed)
    return sample_column(universe, count, rng)


class SheetBuilder:
    """Generates sheets column by column, optionally in worker processes."""

    def build(self, params: BuildParams) -> BuildResult:
        pools = params.pools if params.pools is not None else standard_pools()
        self._validate(params, pools)

        start = time.perf_counter()
        seeds = [column_seed(params.seed, idx) for idx in range(len(pools))]
        if params.parallel and params.parallelism > 1:
            columns = self._build_parallel(params, pools, seeds)
        else:
            columns = [
                self._build_one(params, idx, pool, seed)
                for idx, (pool, seed) in enumerate(zip(pools, seeds))
            ]

        grids = assemble_grids([c.arrangements for c in columns], FREE_POSITION)
        total_draws = sum(c.draws for c in columns)
        metrics = BuildMetrics(
            total_time=time.perf_counter() - start,
            draws_per_sheet=(total_draws / params.count) if params.count else 0.0,
            escalations=[c.escalations for c in columns],
            final_tolerances=[c.final_tolerance for c in columns],
        )
        return BuildResult(grids=grids, columns=columns, metrics=metrics)

    def _validate(self, params: BuildParams, pools: Sequence[Pool]) -> None:
        if params.count < 0:
            raise InvalidArgumentError(f"count must be >= 0, got {params.count}")
        if len(pools) != params.k:
            raise InvalidArgumentError(
                f"a {params.k}x{params.k} grid needs {params.k} pools, got {len(pools)}"
            )
        seen: set = set()
        for idx, pool in enumerate(pools):
            validate_pool(pool, params.k)
            overlap = seen.intersection(pool)
            if overlap:
                raise InvalidArgumentError(
                    f"pool {idx} overlaps earlier pools: {sorted(overlap)}"
                )
            seen.update(pool)

    def _build_one(self, params: BuildParams, idx: int, pool: Pool, seed: int) -> ColumnResult:
        result = build_column(tuple(pool), params.k, params.count, params.rng_engine, seed)
        logger.debug(
            "Column %d done: %d draws, final tolerance %d",
            idx,
            result.draws,
            result.final_tolerance,
        )
        return result

    def _build_parallel(
        self, params: BuildParams, pools: Sequence[Pool], seeds: Sequence[int]
    ) -> List[ColumnResult]:
        workers = min(params.parallelism, len(pools))
        logger.info("Sampling %d columns in %d worker processes", len(pools), workers)
        with ProcessPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(
                    build_column, tuple(pool), params.k, params.count, params.rng_engine, seed
                )
                for pool, seed in zip(pools, seeds)
            ]
            return [f.result() for f in futures]
