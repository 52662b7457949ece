"""
Exceptions raised by the percolation model and experiment driver.

Both error kinds are contract violations detected before any state is
mutated, so callers can treat them as plain ValueError / IndexError.
"""


class PercolationError(Exception):
    """Base class for percolation_stats errors."""


class InvalidArgumentError(PercolationError, ValueError):
    """A size or trial count was not a positive integer."""


class OutOfRangeError(PercolationError, IndexError):
    """A site or element index was outside the valid range."""
