"""Command-line interface (perc-stats)."""
