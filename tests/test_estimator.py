"""Tests for threshold estimation and permutation providers."""

import math

import numpy as np
import pytest

from percolation_stats.exceptions import InvalidArgumentError
from percolation_stats.percolation.estimator import (
    ThresholdEstimator, run_trial, CONFIDENCE_95, NO_PERCOLATION,
)
from percolation_stats.percolation.permutation import FixedPermutation, UniformPermutation

from test_grid import QuickFind


class TestPermutations:
    """Tests for permutation providers."""

    def test_uniform_is_permutation(self):
        order = UniformPermutation(1).permutation(25)

        assert sorted(order.tolist()) == list(range(25))

    def test_uniform_seed_reproducible(self):
        a = UniformPermutation(123)
        b = UniformPermutation(123)

        for _ in range(3):
            np.testing.assert_array_equal(a.permutation(16), b.permutation(16))

    def test_uniform_invalid_size(self):
        with pytest.raises(InvalidArgumentError):
            UniformPermutation(0).permutation(0)

    def test_fixed_replays_order(self):
        perm = FixedPermutation([2, 0, 3, 1])

        np.testing.assert_array_equal(perm.permutation(4), [2, 0, 3, 1])
        np.testing.assert_array_equal(perm.permutation(4), [2, 0, 3, 1])

    @pytest.mark.parametrize('order', [[], [0, 0, 1], [1, 2, 3], [[0, 1], [2, 3]]])
    def test_fixed_rejects_non_permutations(self, order):
        with pytest.raises(InvalidArgumentError):
            FixedPermutation(order)

    def test_fixed_size_mismatch(self):
        with pytest.raises(InvalidArgumentError):
            FixedPermutation([0, 1, 2]).permutation(4)


class TestRunTrial:
    """Tests for a single trial."""

    def test_single_site(self):
        assert run_trial(1, [0]) == 1.0

    def test_column_order(self):
        """Opening the first column of a 2x2 grid percolates after 2 of 4 sites."""
        assert run_trial(2, [0, 2, 1, 3]) == 0.5

    def test_row_first_order(self):
        """The whole top row then one bottom site: 3 of 4 sites."""
        assert run_trial(2, [0, 1, 3, 2]) == 0.75

    def test_exhausted_order(self):
        """An order that ends before percolation yields the sentinel."""
        assert run_trial(3, [0, 1, 2]) == NO_PERCOLATION

    def test_full_order_always_percolates(self):
        rng = np.random.default_rng(5)
        for n in (1, 2, 3, 6):
            threshold = run_trial(n, rng.permutation(n * n))
            assert 0 < threshold <= 1

    def test_custom_connectivity(self):
        order = UniformPermutation(9).permutation(36)

        assert run_trial(6, order, connectivity_factory=QuickFind) == run_trial(6, order)


class TestThresholdEstimator:
    """Tests for ThresholdEstimator."""

    @pytest.mark.parametrize('n,trials', [(0, 5), (5, 0), (-1, 5), (5, -2)])
    def test_invalid_arguments(self, n, trials):
        with pytest.raises(InvalidArgumentError):
            ThresholdEstimator(n, trials)

    def test_single_trial_statistics_undefined(self):
        """With one trial the spread and interval are NaN, the mean is not."""
        stats = ThresholdEstimator(1, 1)

        assert stats.mean() == 1.0
        assert math.isnan(stats.stddev())
        assert math.isnan(stats.confidence_lo())
        assert math.isnan(stats.confidence_hi())

    def test_identical_trials(self):
        """Forcing the same order makes the interval collapse onto the mean."""
        stats = ThresholdEstimator(2, 5, permutation=FixedPermutation([0, 2, 1, 3]))

        np.testing.assert_array_equal(stats.thresholds, [0.5] * 5)
        assert stats.mean() == 0.5
        assert stats.stddev() == 0.0
        assert stats.confidence_lo() == stats.confidence_hi() == stats.mean()

    def test_end_to_end_small_grid(self):
        """Real uniform shuffles on a 2x2 grid."""
        stats = ThresholdEstimator(2, 50)
        thresholds = stats.thresholds

        assert len(thresholds) == 50
        assert np.all(thresholds > 0)
        assert np.all(thresholds <= 1)
        assert 0 < stats.mean() < 1
        assert stats.confidence_lo() <= stats.mean() <= stats.confidence_hi()

    def test_seed_reproducible(self):
        a = ThresholdEstimator(5, 10, permutation=UniformPermutation(42))
        b = ThresholdEstimator(5, 10, permutation=UniformPermutation(42))

        np.testing.assert_array_equal(a.thresholds, b.thresholds)

    def test_threshold_near_known_value(self):
        """The site percolation threshold on the square lattice is about 0.593."""
        stats = ThresholdEstimator(20, 200, permutation=UniformPermutation(2024))

        assert stats.mean() == pytest.approx(0.593, abs=0.03)
        assert stats.confidence_lo() < stats.mean() < stats.confidence_hi()

    def test_thresholds_read_only(self):
        stats = ThresholdEstimator(2, 3, permutation=FixedPermutation([0, 2, 1, 3]))
        copy = stats.thresholds
        copy[0] = 99.0

        assert stats.thresholds[0] == 0.5

    def test_summary(self):
        stats = ThresholdEstimator(2, 4, permutation=FixedPermutation([0, 2, 1, 3]))
        summary = stats.summary()

        assert summary['n'] == 2
        assert summary['trials'] == 4
        assert summary['mean'] == 0.5
        assert summary['stddev'] == 0.0


class TestFromThresholds:
    """Tests for building estimators from recorded thresholds."""

    def test_statistics(self):
        stats = ThresholdEstimator.from_thresholds(2, [0.5, 0.75])
        expected_std = math.sqrt(2 * 0.125 ** 2)
        half = CONFIDENCE_95 * expected_std / math.sqrt(2)

        assert stats.trials == 2
        assert stats.mean() == pytest.approx(0.625)
        assert stats.stddev() == pytest.approx(expected_std)
        assert stats.confidence_lo() == pytest.approx(0.625 - half)
        assert stats.confidence_hi() == pytest.approx(0.625 + half)

    def test_order_insensitive(self):
        values = [0.5, 0.75, 0.5, 1.0, 0.75]
        a = ThresholdEstimator.from_thresholds(2, values)
        b = ThresholdEstimator.from_thresholds(2, list(reversed(values)))

        assert a.mean() == pytest.approx(b.mean())
        assert a.stddev() == pytest.approx(b.stddev())

    def test_empty(self):
        with pytest.raises(InvalidArgumentError):
            ThresholdEstimator.from_thresholds(2, [])

    @pytest.mark.parametrize('values', [[0.5, NO_PERCOLATION], [0.0], [1.5], [0.5, float('nan')]])
    def test_rejects_out_of_range(self, values):
        with pytest.raises(InvalidArgumentError):
            ThresholdEstimator.from_thresholds(2, values)

    def test_save_keeps_metadata(self, tmp_path):
        path = tmp_path / "job.npz"
        ThresholdEstimator.from_thresholds(2, [0.5]).save(str(path), job="2\t1\tnone\tjob.npz")

        with np.load(path) as dump:
            assert str(dump['job']) == "2\t1\tnone\tjob.npz"
        assert ThresholdEstimator.load(path).trials == 1

    def test_save_and_load(self, tmp_path):
        stats = ThresholdEstimator(3, 6, permutation=UniformPermutation(7))
        path = tmp_path / "job.npz"

        stats.save(str(path))
        loaded = ThresholdEstimator.load(path)

        assert loaded.n == 3
        np.testing.assert_array_equal(loaded.thresholds, stats.thresholds)
        assert loaded.mean() == stats.mean()
