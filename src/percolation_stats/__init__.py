"""
Percolation Stats - Monte Carlo estimation of the site percolation threshold.

This package provides tools for:
- Modelling an n-by-n site percolation grid with backwash-free fullness checks
- Estimating the percolation threshold with confidence intervals
- Splitting trials into chunked jobs and aggregating their results
"""

__version__ = "1.0.0"
