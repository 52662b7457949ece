"""Site percolation model and Monte Carlo threshold estimation."""

from .grid import PercolationGrid
from .permutation import RandomPermutation, UniformPermutation, FixedPermutation
from .estimator import ThresholdEstimator, run_trial, CONFIDENCE_95, NO_PERCOLATION
from .analysis import aggregate_results, load_thresholds

__all__ = [
    'PercolationGrid',
    'RandomPermutation',
    'UniformPermutation',
    'FixedPermutation',
    'ThresholdEstimator',
    'run_trial',
    'CONFIDENCE_95',
    'NO_PERCOLATION',
    'aggregate_results',
    'load_thresholds',
]
