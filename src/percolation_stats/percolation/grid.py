"""
Core site percolation model on an n-by-n grid.

Sites are addressed with 1-based (row, col) and stored in a flat boolean
buffer at index (row - 1) * n + (col - 1). Two connectivity structures are
kept in step:

- the percolation structure holds n*n + 2 elements: one per site plus a
  virtual top node (n*n) joined to every open site in row 1 and a virtual
  bottom node (n*n + 1) joined to every open site in row n. Percolation is
  then a single connected() query.
- the fullness structure holds n*n + 1 elements: the same sites and virtual
  top, but no virtual bottom.

Once the grid percolates, the virtual top and bottom of the percolation
structure share a root, so every open site touching the bottom row reads as
connected to the top there (backwash). is_full() therefore asks the fullness
structure, which is never joined to the bottom, and also requires the site
itself to be open.
"""

from typing import Callable, Optional

import numpy as np

from ..connectivity import DynamicConnectivity, WeightedQuickUnionUF
from ..exceptions import InvalidArgumentError, OutOfRangeError


ConnectivityFactory = Callable[[int], DynamicConnectivity]


class PercolationGrid:
    """
    Site percolation on an n-by-n grid with virtual top and bottom nodes.

    All sites start blocked. open() is idempotent and only ever adds unions,
    so the open-site count never decreases.

    Example:
        grid = PercolationGrid(5)
        grid.open(1, 3)
        grid.is_open(1, 3)     # True
        grid.percolates()      # False
    """

    def __init__(self, n: int, connectivity_factory: Optional[ConnectivityFactory] = None):
        """
        Initialize an n-by-n grid with every site blocked.

        Args:
            n: Grid side length (must be >= 1)
            connectivity_factory: Callable building a DynamicConnectivity of a
                given size (default: WeightedQuickUnionUF)
        """
        if n <= 0:
            raise InvalidArgumentError(f"n must be greater than 0, got {n}")

        if connectivity_factory is None:
            connectivity_factory = WeightedQuickUnionUF

        self.n = n
        self.size = n * n
        self.virtual_top = self.size
        self.virtual_bottom = self.size + 1

        self._open = np.zeros(self.size, dtype=bool)
        self._open_count = 0
        self._uf = connectivity_factory(self.size + 2)
        # Same sites and virtual top, never joined to the bottom
        self._top_uf = connectivity_factory(self.size + 1)

    # --- Index helpers ---

    def _in_bounds(self, row: int, col: int) -> bool:
        return 1 <= row <= self.n and 1 <= col <= self.n

    def _validate(self, row: int, col: int) -> None:
        if not self._in_bounds(row, col):
            raise OutOfRangeError(
                f"row and col must be between 1 and {self.n}, got ({row}, {col})"
            )

    def _flat(self, row: int, col: int) -> int:
        return (row - 1) * self.n + (col - 1)

    def site_index(self, row: int, col: int) -> int:
        """
        Flattened connectivity index of a site.

        Args:
            row: Row (1-based)
            col: Column (1-based)

        Returns:
            Index in [0, n*n)
        """
        self._validate(row, col)
        return self._flat(row, col)

    # --- Mutation ---

    def open(self, row: int, col: int) -> None:
        """
        Open the site at (row, col) and join it to its open neighbours.

        A site in row 1 is joined to the virtual top, a site in row n to the
        virtual bottom (for n == 1 the single site is joined to both).
        Opening an already-open site does nothing.

        Args:
            row: Row (1-based)
            col: Column (1-based)
        """
        self._validate(row, col)
        site = self._flat(row, col)
        if self._open[site]:
            return

        self._open[site] = True
        self._open_count += 1

        for neighbour_row, neighbour_col in (
            (row - 1, col),
            (row + 1, col),
            (row, col - 1),
            (row, col + 1),
        ):
            self._connect(site, neighbour_row, neighbour_col)

    def _connect(self, site: int, row: int, col: int) -> None:
        # row 0 and row n+1 stand for the virtual nodes
        if row == 0:
            self._uf.union(site, self.virtual_top)
            self._top_uf.union(site, self.virtual_top)
        elif row == self.n + 1:
            self._uf.union(site, self.virtual_bottom)
        elif self._in_bounds(row, col) and self._open[self._flat(row, col)]:
            neighbour = self._flat(row, col)
            self._uf.union(site, neighbour)
            self._top_uf.union(site, neighbour)

    # --- Queries ---

    def is_open(self, row: int, col: int) -> bool:
        """Check whether the site at (row, col) is open."""
        self._validate(row, col)
        return bool(self._open[self._flat(row, col)])

    def is_full(self, row: int, col: int) -> bool:
        """
        Check whether the site at (row, col) is full.

        A site is full when it is open and connected to the virtual top.
        Answered by the fullness structure, which has no virtual
        bottom (see module docstring).

        Args:
            row: Row (1-based)
            col: Column (1-based)

        Returns:
            True if open and reachable from the top row
        """
        self._validate(row, col)
        site = self._flat(row, col)
        return bool(self._open[site]) and self._top_uf.connected(site, self.virtual_top)

    def number_of_open_sites(self) -> int:
        return self._open_count

    def percolates(self) -> bool:
        """Check whether an open path joins the top row to the bottom row."""
        return self._uf.connected(self.virtual_top, self.virtual_bottom)

    def open_mask(self) -> np.ndarray:
        """
        Return a copy of the site state as an (n, n) boolean array.

        Entry [i, j] corresponds to site (i + 1, j + 1).
        """
        return self._open.reshape(self.n, self.n).copy()
