"""
Random permutation providers deciding the order in which sites are opened.

Randomness is passed in explicitly so that trials are reproducible: a seeded
UniformPermutation in tests and batch jobs, an unseeded one interactively.
"""

from abc import ABC, abstractmethod
from typing import Sequence

import numpy as np

from ..exceptions import InvalidArgumentError


class RandomPermutation(ABC):
    """Abstract source of site-opening orders."""

    @abstractmethod
    def permutation(self, m: int) -> np.ndarray:
        """
        Return the integers 0..m-1 in some order.

        Args:
            m: Number of elements

        Returns:
            Integer array of shape (m,) holding each value in [0, m) once
        """
        pass


class UniformPermutation(RandomPermutation):
    """
    Uniformly random permutations from numpy's default generator.

    Args:
        seed: Seed (int, SeedSequence or None for fresh OS entropy)
    """

    def __init__(self, seed=None):
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def permutation(self, m: int) -> np.ndarray:
        if m <= 0:
            raise InvalidArgumentError(f"m must be greater than 0, got {m}")
        return self._rng.permutation(m)


class FixedPermutation(RandomPermutation):
    """
    Replays the same opening order on every call.

    Useful for forcing identical trials, e.g. to check that the statistics
    collapse to a single point.
    """

    def __init__(self, order: Sequence[int]):
        order = np.asarray(order, dtype=np.int64)
        if order.ndim != 1 or order.size == 0:
            raise InvalidArgumentError("order must be a non-empty 1-D sequence")
        if not np.array_equal(np.sort(order), np.arange(order.size)):
            raise InvalidArgumentError(
                f"order must contain each of 0..{order.size - 1} exactly once"
            )
        self._order = order

    def permutation(self, m: int) -> np.ndarray:
        if m != self._order.size:
            raise InvalidArgumentError(
                f"fixed order has {self._order.size} elements, {m} requested"
            )
        return self._order.copy()

