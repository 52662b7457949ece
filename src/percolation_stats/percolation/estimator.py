"""
Monte Carlo estimation of the site percolation threshold.

Each trial opens sites of a fresh PercolationGrid in a random order until the
grid percolates; the fraction of sites open at that moment is the trial's
threshold. ThresholdEstimator runs T independent trials and reports the mean,
sample standard deviation and 95% confidence interval of the thresholds.

Trials share no state, so a large experiment can be split into several
estimators (e.g. one per chunk job) and merged afterwards with
ThresholdEstimator.from_thresholds(); the statistics do not depend on order.
"""

import math
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

import numpy as np

from .grid import PercolationGrid, ConnectivityFactory
from .permutation import RandomPermutation, UniformPermutation
from ..exceptions import InvalidArgumentError


# z-value for a two-sided 95% confidence interval
CONFIDENCE_95 = 1.96

# Threshold recorded when an opening order runs out before percolation
NO_PERCOLATION = -1.0


def run_trial(n: int, order: Sequence[int],
              connectivity_factory: Optional[ConnectivityFactory] = None) -> float:
    """
    Run one percolation trial on a fresh n-by-n grid.

    Args:
        n: Grid side length
        order: Flat site indices in the order they are opened
        connectivity_factory: Passed through to PercolationGrid

    Returns:
        Fraction of sites open when the grid first percolates, or
        NO_PERCOLATION if the order is exhausted first
    """
    grid = PercolationGrid(n, connectivity_factory=connectivity_factory)
    total = n * n

    for opened, idx in enumerate(order, start=1):
        idx = int(idx)
        grid.open(idx // n + 1, idx % n + 1)
        if grid.percolates():
            return opened / total

    return NO_PERCOLATION


class ThresholdEstimator:
    """
    Percolation threshold statistics over independent trials.

    Example:
        stats = ThresholdEstimator(200, 100, permutation=UniformPermutation(42))
        print(stats.mean(), stats.stddev())
        print(stats.confidence_lo(), stats.confidence_hi())
    """

    def __init__(self, n: int, trials: int,
                 permutation: Optional[RandomPermutation] = None,
                 connectivity_factory: Optional[ConnectivityFactory] = None):
        """
        Run all trials immediately.

        Args:
            n: Grid side length (must be >= 1)
            trials: Number of independent trials (must be >= 1)
            permutation: Source of opening orders (default: unseeded UniformPermutation)
            connectivity_factory: Passed through to every PercolationGrid
        """
        if n <= 0 or trials <= 0:
            raise InvalidArgumentError(
                f"n and trials must be greater than 0, got n={n}, trials={trials}"
            )

        if permutation is None:
            permutation = UniformPermutation()

        thresholds = np.empty(trials, dtype=np.float64)
        for i in range(trials):
            order = permutation.permutation(n * n)
            thresholds[i] = run_trial(n, order, connectivity_factory)

        self._set_results(n, thresholds)

    def _set_results(self, n: int, thresholds: np.ndarray) -> None:
        self.n = n
        self.trials = len(thresholds)
        self._thresholds = thresholds
        self._thresholds.flags.writeable = False

    @classmethod
    def from_thresholds(cls, n: int, thresholds: Sequence[float]) -> 'ThresholdEstimator':
        """
        Build an estimator from thresholds recorded elsewhere.

        Args:
            n: Grid side length the thresholds were measured on
            thresholds: Per-trial thresholds in (0, 1], in any order

        Returns:
            ThresholdEstimator over the given thresholds
        """
        thresholds = np.array(thresholds, dtype=np.float64).ravel()
        if n <= 0 or thresholds.size == 0:
            raise InvalidArgumentError(
                f"n and number of thresholds must be greater than 0, "
                f"got n={n}, thresholds={thresholds.size}"
            )
        if not np.all((thresholds > 0) & (thresholds <= 1)):
            # Also rejects NO_PERCOLATION markers and NaN
            raise InvalidArgumentError(
                f"thresholds must lie in (0, 1], got min={thresholds.min()}, max={thresholds.max()}"
            )

        estimator = cls.__new__(cls)
        estimator._set_results(n, thresholds)
        return estimator

    @property
    def thresholds(self) -> np.ndarray:
        """Per-trial thresholds (read-only copy)."""
        return self._thresholds.copy()

    # --- Statistics ---

    def mean(self) -> float:
        return float(np.mean(self._thresholds))

    def stddev(self) -> float:
        """
        Sample standard deviation of the thresholds.

        Returns:
            Standard deviation with T - 1 degrees of freedom, NaN when T == 1
        """
        if self.trials == 1:
            return math.nan
        return float(np.std(self._thresholds, ddof=1))

    def _half_width(self) -> float:
        return CONFIDENCE_95 * self.stddev() / math.sqrt(self.trials)

    def confidence_lo(self) -> float:
        """Low endpoint of the 95% confidence interval (NaN when T <= 1)."""
        if self.trials <= 1:
            return math.nan
        return self.mean() - self._half_width()

    def confidence_hi(self) -> float:
        """High endpoint of the 95% confidence interval (NaN when T <= 1)."""
        if self.trials <= 1:
            return math.nan
        return self.mean() + self._half_width()

    def summary(self) -> Dict[str, Any]:
        """
        Collect the statistics into a flat dict (one CSV row).
        """
        return {
            'n': self.n,
            'trials': self.trials,
            'mean': self.mean(),
            'stddev': self.stddev(),
            'confidence_lo': self.confidence_lo(),
            'confidence_hi': self.confidence_hi(),
        }

    # --- Storage ---

    def save(self, filename: Union[str, Path], **metadata) -> None:
        """
        Save thresholds to an .npz file.

        Args:
            filename: Path to output .npz file
            **metadata: Extra values stored next to the thresholds (e.g. the job line)
        """
        np.savez(filename, n=self.n, thresholds=self._thresholds, **metadata)

    @classmethod
    def load(cls, filename: Union[str, Path]) -> 'ThresholdEstimator':
        """
        Load thresholds saved with save().

        Args:
            filename: Path to input .npz file

        Returns:
            ThresholdEstimator over the stored thresholds
        """
        with np.load(filename) as dump:
            n = int(dump['n'])
            thresholds = dump['thresholds']
        return cls.from_thresholds(n, thresholds)
