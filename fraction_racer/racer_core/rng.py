"""
RNG - Injectable Random Sources
===============================

Every random draw in the simulation goes through a RandomSource so that
runs are reproducible from a seed and tests can script exact values.
"""

from __future__ import annotations

import random
from typing import Iterable, List, Optional, Protocol, runtime_checkable


@runtime_checkable
class RandomSource(Protocol):
    """Subset of the random.Random API used by the simulation."""

    def random(self) -> float: ...

    def uniform(self, a: float, b: float) -> float: ...

    def randint(self, a: int, b: int) -> int: ...


def make_rng(seed: Optional[int] = None) -> random.Random:
    """
    Create a seeded random source.

    Args:
        seed: Random seed for reproducibility. Random if None.
    """
    return random.Random(seed)


class SequenceRandom:
    """
    Deterministic source replaying a fixed list of unit floats.

    Each draw consumes one value in [0, 1); the list wraps around when
    exhausted. uniform() and randint() are derived from the same value
    so a single entry controls a single attribute.
    """

    def __init__(self, values: Iterable[float]):
        self._values: List[float] = [float(v) for v in values]
        if not self._values:
            raise ValueError("SequenceRandom needs at least one value")
        for v in self._values:
            if not 0.0 <= v < 1.0:
                raise ValueError(f"Values must be in [0, 1), got {v}")
        self._index = 0

    @property
    def draws(self) -> int:
        """Number of values consumed so far."""
        return self._index

    def random(self) -> float:
        value = self._values[self._index % len(self._values)]
        self._index += 1
        return value

    def uniform(self, a: float, b: float) -> float:
        return a + (b - a) * self.random()

    def randint(self, a: int, b: int) -> int:
        return a + int(self.random() * (b - a + 1))
