"""Dynamic connectivity (disjoint-set) structures used by percolation grids."""

from .base import DynamicConnectivity
from .weighted_quick_union import WeightedQuickUnionUF

__all__ = ['DynamicConnectivity', 'WeightedQuickUnionUF']
