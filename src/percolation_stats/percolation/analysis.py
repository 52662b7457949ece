"""
Result aggregation for chunked threshold experiments.

Per-job .npz files hold raw thresholds, so results from any number of jobs
can be merged into one estimator per grid size before computing statistics.
"""

from pathlib import Path
from typing import Dict, Iterable, Optional, Union

import numpy as np
import pandas as pd

from .estimator import ThresholdEstimator
from ..path_utils import parse_result_path


RESULT_COLUMNS = ['n', 'trials', 'mean', 'stddev', 'confidence_lo', 'confidence_hi', 'n_files']


def load_thresholds(
    results_dir: Union[str, Path],
    files: Optional[Iterable[Union[str, Path]]] = None,
) -> Dict[int, Dict[str, object]]:
    """
    Collect thresholds from result files under a directory.

    Files that do not follow the n_XXXX/job_XXXX.npz layout, or cannot be
    read, are skipped with a warning.

    Args:
        results_dir: Directory containing n_XXXX/job_XXXX.npz files
        files: Only read these result files (default: every .npz under results_dir)

    Returns:
        Dict mapping grid size to {'thresholds': np.ndarray, 'n_files': int}
    """
    results_dir = Path(results_dir)
    if files is None:
        npz_files = sorted(results_dir.rglob("*.npz"))
    else:
        npz_files = sorted(Path(f) for f in files)
    print(f"Found {len(npz_files)} .npz files")

    collected = {}
    failed_count = 0

    for npz_file in npz_files:
        try:
            metadata = parse_result_path(npz_file, results_dir)
            stats = ThresholdEstimator.load(npz_file)
        except Exception as e:
            print(f"  Skipping {npz_file}: {e}")
            failed_count += 1
            continue

        if stats.n != metadata.n:
            print(f"  Skipping {npz_file}: stored n={stats.n} does not match path n={metadata.n}")
            failed_count += 1
            continue

        entry = collected.setdefault(metadata.n, {'thresholds': [], 'n_files': 0})
        entry['thresholds'].append(stats.thresholds)
        entry['n_files'] += 1

    if failed_count:
        print(f"Warning: Failed to load {failed_count} files")

    return {
        n: {'thresholds': np.concatenate(entry['thresholds']), 'n_files': entry['n_files']}
        for n, entry in collected.items()
    }


def aggregate_results(
    results_dir: Union[str, Path],
    output_csv: Union[str, Path],
    files: Optional[Iterable[Union[str, Path]]] = None,
) -> pd.DataFrame:
    """
    Merge per-job thresholds into one row of statistics per grid size.

    Args:
        results_dir: Directory containing per-job .npz files
        output_csv: Output CSV file path
        files: Only merge these result files (default: all under results_dir)

    Returns:
        DataFrame with columns n, trials, mean, stddev, confidence_lo,
        confidence_hi, n_files (sorted by n). Empty if nothing was found.
    """
    output_csv = Path(output_csv)

    collected = load_thresholds(results_dir, files)
    if not collected:
        print("No results found")
        return pd.DataFrame(columns=RESULT_COLUMNS)

    rows = []
    for n, entry in collected.items():
        stats = ThresholdEstimator.from_thresholds(n, entry['thresholds'])
        row = stats.summary()
        row['n_files'] = entry['n_files']
        rows.append(row)

    df = pd.DataFrame(rows, columns=RESULT_COLUMNS).sort_values('n').reset_index(drop=True)

    output_csv.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output_csv, index=False)
    print(f"Saved {len(df)} rows to {output_csv}")

    return df
