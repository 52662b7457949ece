"""Tests for the percolation grid."""

import numpy as np
import pytest

from percolation_stats.connectivity import DynamicConnectivity
from percolation_stats.exceptions import InvalidArgumentError, OutOfRangeError
from percolation_stats.percolation.grid import PercolationGrid


class QuickFind(DynamicConnectivity):
    """Minimal unbalanced disjoint set, used to check that any backend works."""

    def __init__(self, size):
        self.ids = list(range(size))

    def __len__(self):
        return len(self.ids)

    def find(self, a):
        return self.ids[a]

    def union(self, a, b):
        id_a, id_b = self.ids[a], self.ids[b]
        if id_a == id_b:
            return False
        self.ids = [id_a if x == id_b else x for x in self.ids]
        return True

    def count(self):
        return len(set(self.ids))


class ReversedQuickFind(QuickFind):
    """QuickFind that relabels the first argument's set, so the virtual nodes keep their ids."""

    def union(self, a, b):
        return super().union(b, a)


@pytest.fixture(params=['default', 'quick_find', 'reversed_quick_find'])
def make_grid(request):
    """Build grids with the default and the stub connectivity backends."""
    factory = {
        'default': None,
        'quick_find': QuickFind,
        'reversed_quick_find': ReversedQuickFind,
    }[request.param]
    return lambda n: PercolationGrid(n, connectivity_factory=factory)


class TestConstruction:
    """Tests for grid construction."""

    def test_all_sites_blocked(self, make_grid):
        grid = make_grid(4)

        assert grid.number_of_open_sites() == 0
        assert not any(grid.is_open(r, c) for r in range(1, 5) for c in range(1, 5))
        assert not grid.open_mask().any()

    def test_virtual_nodes(self):
        """Virtual top and bottom sit just past the real sites."""
        grid = PercolationGrid(3)

        assert grid.size == 9
        assert grid.virtual_top == 9
        assert grid.virtual_bottom == 10

    def test_invalid_size(self):
        """Test that non-positive sizes are rejected."""
        with pytest.raises(InvalidArgumentError):
            PercolationGrid(0)
        with pytest.raises(ValueError):
            PercolationGrid(-2)

    def test_site_index(self):
        """Test row-major flattening of 1-based coordinates."""
        grid = PercolationGrid(3)

        assert grid.site_index(1, 1) == 0
        assert grid.site_index(1, 3) == 2
        assert grid.site_index(2, 1) == 3
        assert grid.site_index(3, 3) == 8


class TestOpen:
    """Tests for opening sites."""

    def test_open_marks_site(self, make_grid):
        grid = make_grid(3)
        grid.open(2, 3)

        assert grid.is_open(2, 3)
        assert not grid.is_open(3, 2)
        assert grid.number_of_open_sites() == 1
        assert grid.open_mask()[1, 2]

    def test_open_is_idempotent(self, make_grid):
        """Opening a site twice gives the same state as opening it once."""
        once = make_grid(3)
        twice = make_grid(3)
        for grid in (once, twice):
            grid.open(1, 2)
            grid.open(2, 2)
        twice.open(2, 2)

        assert twice.number_of_open_sites() == once.number_of_open_sites() == 2
        assert twice.is_open(2, 2) == once.is_open(2, 2)
        assert twice.is_full(2, 2) == once.is_full(2, 2)
        assert twice.percolates() == once.percolates()

    def test_open_count_monotonic(self, make_grid):
        """Open count never decreases and reaches n*n when everything is open."""
        n = 4
        grid = make_grid(n)
        rng = np.random.default_rng(0)
        order = rng.integers(0, n * n, size=40).tolist() + list(range(n * n))

        previous = 0
        for idx in order:
            grid.open(idx // n + 1, idx % n + 1)
            current = grid.number_of_open_sites()
            assert current >= previous
            previous = current

        assert grid.number_of_open_sites() == n * n

    def test_open_mask_is_copy(self):
        grid = PercolationGrid(2)
        mask = grid.open_mask()
        mask[0, 0] = True

        assert not grid.is_open(1, 1)


class TestBounds:
    """Tests for index validation."""

    @pytest.mark.parametrize('row,col', [(0, 1), (1, 0), (4, 1), (1, 4), (-1, 2), (0, 0)])
    def test_out_of_range(self, row, col):
        grid = PercolationGrid(3)

        with pytest.raises(OutOfRangeError):
            grid.open(row, col)
        with pytest.raises(OutOfRangeError):
            grid.is_open(row, col)
        with pytest.raises(OutOfRangeError):
            grid.is_full(row, col)
        with pytest.raises(IndexError):
            grid.site_index(row, col)

    def test_failed_open_changes_nothing(self):
        """An out-of-range open must not count or union anything."""
        grid = PercolationGrid(1)

        with pytest.raises(OutOfRangeError):
            grid.open(2, 1)

        assert grid.number_of_open_sites() == 0
        assert not grid.percolates()

    def test_corners_are_valid(self):
        grid = PercolationGrid(3)
        for row, col in [(1, 1), (1, 3), (3, 1), (3, 3)]:
            grid.open(row, col)

        assert grid.number_of_open_sites() == 4


class TestPercolation:
    """Tests for percolates() and is_full()."""

    def test_single_site_grid(self, make_grid):
        """A 1x1 grid percolates as soon as its only site opens."""
        grid = make_grid(1)
        assert not grid.percolates()
        assert not grid.is_full(1, 1)

        grid.open(1, 1)

        assert grid.percolates()
        assert grid.is_full(1, 1)

    def test_empty_grid_does_not_percolate(self, make_grid):
        for n in (2, 3, 5):
            assert not make_grid(n).percolates()

    def test_full_grid_percolates(self, make_grid):
        n = 4
        grid = make_grid(n)
        for row in range(1, n + 1):
            for col in range(1, n + 1):
                grid.open(row, col)

        assert grid.percolates()
        assert all(grid.is_full(r, c) for r in range(1, n + 1) for c in range(1, n + 1))

    def test_vertical_path(self, make_grid):
        grid = make_grid(3)
        grid.open(1, 2)
        grid.open(2, 2)
        assert not grid.percolates()

        grid.open(3, 2)
        assert grid.percolates()

    def test_diagonal_is_not_connected(self, make_grid):
        """Only orthogonal neighbours connect."""
        grid = make_grid(3)
        grid.open(1, 1)
        grid.open(2, 2)
        grid.open(3, 3)

        assert not grid.percolates()
        assert grid.is_full(1, 1)
        assert not grid.is_full(2, 2)

    def test_blocked_site_is_never_full(self, make_grid):
        grid = make_grid(2)
        grid.open(1, 1)
        grid.open(2, 1)

        assert grid.percolates()
        assert not grid.is_full(1, 2)
        assert not grid.is_full(2, 2)

    def test_no_backwash(self, make_grid):
        """
        A site touching only the bottom row must not become full once the
        grid percolates through a separate path.
        """
        grid = make_grid(3)
        # Percolating path down the first column
        grid.open(1, 1)
        grid.open(2, 1)
        grid.open(3, 1)
        # Isolated bottom-row site on the other side
        grid.open(3, 3)

        assert grid.percolates()
        assert grid.is_open(3, 3)
        assert not grid.is_full(3, 3)
        assert grid.is_full(3, 1)

    def test_no_backwash_through_bottom_cluster(self, make_grid):
        """A bottom cluster stays not-full until it really joins the top."""
        grid = make_grid(4)
        for row in range(1, 5):
            grid.open(row, 1)
        grid.open(4, 3)
        grid.open(4, 4)
        grid.open(3, 4)

        assert grid.percolates()
        assert not grid.is_full(3, 4)
        assert not grid.is_full(4, 3)

        # Joining through (4, 2) makes the cluster really reach the top
        grid.open(4, 2)
        assert grid.is_full(3, 4)

    @pytest.mark.parametrize('factory', [QuickFind, ReversedQuickFind])
    def test_bottom_site_opened_before_path_closes(self, factory):
        grid = PercolationGrid(3, connectivity_factory=factory)
        grid.open(3, 3)
        grid.open(1, 1)
        grid.open(3, 1)
        assert not grid.percolates()

        grid.open(2, 1)

        assert grid.percolates()
        assert not grid.is_full(3, 3)
        assert grid.is_full(3, 1)

    @pytest.mark.parametrize('factory', [QuickFind, ReversedQuickFind])
    def test_bottom_site_opened_after_path_closes(self, factory):
        grid = PercolationGrid(3, connectivity_factory=factory)
        grid.open(1, 1)
        grid.open(2, 1)
        grid.open(3, 1)
        assert grid.percolates()

        grid.open(3, 3)
        grid.open(2, 3)

        assert not grid.is_full(3, 3)
        assert not grid.is_full(2, 3)
