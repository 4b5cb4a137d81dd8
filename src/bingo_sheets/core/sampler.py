"""Per-column diversity sampler with escalating tolerance."""

from __future__ import annotations

import enum
import itertools
import logging
from dataclasses import dataclass
from typing import List, Sequence, Set, Tuple

from ..errors import InvalidArgumentError
from ..rng import RandomSource, ShuffleBag
from .arrangements import Arrangement

logger = logging.getLogger(__name__)


def similarity(a: Sequence[int], b: Sequence[int]) -> int:
    """Number of positions where ``a`` and ``b`` hold the same value."""
    return sum(1 for x, y in zip(a, b) if x == y)


class SamplerState(enum.Enum):
    SAMPLING = "sampling"
    ESCALATING = "escalating"
    DONE = "done"


@dataclass
class ColumnResult:
    """Accepted arrangements of one column, in acceptance order."""

    arrangements: List[Arrangement]
    tolerances: List[int]
    final_tolerance: int
    draws: int
    escalations: int


class _ProjectionIndex:
    """Values of accepted arrangements at every (tolerance + 1)-subset of positions.

    A candidate has similarity > tolerance with some accepted arrangement
    iff both agree on all positions of at least one such subset.
    """

    def __init__(self, k: int, tolerance: int, accepted: Sequence[Arrangement] = ()):
        width = tolerance + 1
        self.subsets: List[Tuple[int, ...]] = (
            list(itertools.combinations(range(k), width)) if width <= k else []
        )
        self.seen: List[Set[Tuple[int, ...]]] = [set() for _ in self.subsets]
        for arr in accepted:
            self.add(arr)

    def add(self, arr: Arrangement) -> None:
        for positions, seen in zip(self.subsets, self.seen):
            seen.add(tuple(arr[i] for i in positions))

    def too_similar(self, cand: Arrangement) -> bool:
        for positions, seen in zip(self.subsets, self.seen):
            if tuple(cand[i] for i in positions) in seen:
                return True
        return False


class ColumnSampler:
    """Draws ``count`` arrangements for one column.

    SAMPLING draws from a shuffle bag over the universe and accepts a
    candidate whose similarity to every accepted arrangement is at most
    ``tolerance``. A full pass worth of consecutive rejections moves to
    ESCALATING, which raises the tolerance by one and reshuffles the bag.
    Once tolerance reaches k every candidate is accepted, so the sampler
    reaches DONE after at most k + 1 rounds.
    """

    def __init__(self, universe: Sequence[Arrangement], count: int, rng: RandomSource):
        if count < 0:
            raise InvalidArgumentError(f"count must be >= 0, got {count}")
        if len(universe) == 0:
            raise InvalidArgumentError("universe must not be empty")
        self.universe = universe
        self.count = count
        self.k = len(universe[0])
        self.bag: ShuffleBag[Arrangement] = ShuffleBag(universe, rng)
        self.tolerance = 0
        self.failed_attempts = 0
        self.draws = 0
        self.escalations = 0
        self.accepted: List[Arrangement] = []
        self.accepted_tolerances: List[int] = []
        self._index = _ProjectionIndex(self.k, self.tolerance)
        self.state = SamplerState.DONE if count == 0 else SamplerState.SAMPLING

    def accepts(self, candidate: Arrangement) -> bool:
        return not self.accepted or not self._index.too_similar(candidate)

    def step(self) -> SamplerState:
        if self.state is SamplerState.SAMPLING:
            self._sample_once()
        elif self.state is SamplerState.ESCALATING:
            self._escalate()
        return self.state

    def _sample_once(self) -> None:
        candidate = self.bag.next()
        self.draws += 1
        if self.accepts(candidate):
            self.accepted.append(candidate)
            self.accepted_tolerances.append(self.tolerance)
            self._index.add(candidate)
            self.failed_attempts = 0
            if len(self.accepted) == self.count:
                self.state = SamplerState.DONE
            return
        self.failed_attempts += 1
        if self.failed_attempts >= len(self.universe):
            self.state = SamplerState.ESCALATING

    def _escalate(self) -> None:
        self.tolerance += 1
        self.escalations += 1
        self.failed_attempts = 0
        self.bag.reset()
        self._index = _ProjectionIndex(self.k, self.tolerance, self.accepted)
        logger.info(
            "Tolerance raised to %d after %d accepted of %d",
            self.tolerance,
            len(self.accepted),
            self.count,
        )
        self.state = SamplerState.SAMPLING

    def run(self) -> ColumnResult:
        while self.state is not SamplerState.DONE:
            self.step()
        return ColumnResult(
            arrangements=list(self.accepted),
            tolerances=list(self.accepted_tolerances),
            final_tolerance=self.tolerance,
            draws=self.draws,
            escalations=self.escalations,
        )


def sample_column(universe: Sequence[Arrangement], count: int, rng: RandomSource) -> ColumnResult:
    return ColumnSampler(universe, count, rng).run()
