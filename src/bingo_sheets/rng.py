from __future__ import annotations

import hashlib
import random
from dataclasses import dataclass
from typing import Generic, List, Sequence, TypeVar


try:  # optional dependency
    import numpy as _np  # type: ignore
except Exception:  # pragma: no cover - optional
    _np = None


T = TypeVar("T")


@dataclass
class RandomSource:
    engine: str

    def randint(self, a: int, b: int) -> int:
        raise NotImplementedError

    def shuffle(self, arr: List[int]) -> None:
        raise NotImplementedError


class PyRandomSource(RandomSource):
    def __init__(self, seed: int):
        super().__init__(engine="py_random")
        self._rng = random.Random(seed)

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)

    def shuffle(self, arr: List[int]) -> None:
        self._rng.shuffle(arr)


class NumpyPCG64Source(RandomSource):  # pragma: no cover - covered when numpy present
    def __init__(self, seed: int):
        if _np is None:
            raise RuntimeError("numpy is not installed; install bingo-sheets[pcg]")
        super().__init__(engine="numpy_pcg64")
        self._rng = _np.random.Generator(_np.random.PCG64(seed))

    def randint(self, a: int, b: int) -> int:
        return int(self._rng.integers(low=a, high=b + 1))

    def shuffle(self, arr: List[int]) -> None:
        self._rng.shuffle(arr)


def create_rng(engine: str, seed: int) -> RandomSource:
    engine = (engine or "py_random").strip().lower()
    if engine == "py_random":
        return PyRandomSource(seed)
    if engine == "numpy_pcg64":
        return NumpyPCG64Source(seed)
    raise ValueError(f"Unsupported RNG engine: {engine}")


def derive_parallel_seed(base_seed: int, index: int, purpose: str) -> int:
    """Derive per-task seed from base seed, index, and purpose using sha256.

    Returns a 63-bit positive integer suitable for seeding common RNGs.
    """
    s = f"{base_seed}|{index}|{purpose}".encode("utf-8")
    digest = hashlib.sha256(s).digest()
    # take first 8 bytes, mask to 63 bits to ensure non-negative
    val = int.from_bytes(digest[:8], byteorder="big") & ((1 << 63) - 1)
    return val


class ShuffleBag(Generic[T]):
    """Draws items without replacement; reshuffles and restarts once exhausted.

    The bag shuffles an index order rather than the items, so large
    collections (a whole arrangement universe) are never copied.
    """

    def __init__(self, items: Sequence[T], rng: RandomSource):
        if len(items) == 0:
            raise ValueError("ShuffleBag needs at least one item")
        self._items = items
        self._rng = rng
        self._order: List[int] = list(range(len(items)))
        self._cursor = 0
        self.reshuffles = 0
        self.reset()

    def __len__(self) -> int:
        return len(self._items)

    @property
    def remaining(self) -> int:
        return len(self._order) - self._cursor

    def reset(self) -> None:
        """Start a fresh pass in a new random order."""
        self._rng.shuffle(self._order)
        self._cursor = 0
        self.reshuffles += 1

    def next(self) -> T:
        if self._cursor >= len(self._order):
            self.reset()
        item = self._items[self._order[self._cursor]]
        self._cursor += 1
        return item
