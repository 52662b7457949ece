"""
Result path building and parsing.

Chunked trial jobs write one file per job, grouped by grid size:

    <results_dir>/n_0200/job_0001.npz     thresholds for job 1 at n=200
    <results_dir>/n_0200/job_0001.stats   mean, stddev, lo, hi for that job

The grid size and job index are recovered from the path when aggregating.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union


_SIZE_DIR_RE = re.compile(r'^n_(\d+)$')
_JOB_FILE_RE = re.compile(r'^job_(\d+)$')


@dataclass
class ResultMetadata:
    """Parsed metadata from a trial result file path."""

    n: int                               # grid side length
    job_index: int                       # 1-based job index within that size
    file_path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'n': self.n,
            'job_index': self.job_index,
            'file_path': self.file_path,
        }


def format_size_dirname(n: int) -> str:
    """
    Format a grid size as a directory name.

    Examples:
        >>> format_size_dirname(20)
        'n_0020'
        >>> format_size_dirname(12345)
        'n_12345'
    """
    return f"n_{n:04d}"


def build_result_path(base_dir: Union[str, Path], n: int, job_index: int,
                      extension: str = '.npz') -> Path:
    """
    Build the output path for one trial job.

    Args:
        base_dir: Results directory
        n: Grid side length
        job_index: 1-based job index
        extension: File extension (default: .npz)

    Returns:
        Path like base_dir/n_0200/job_0001.npz
    """
    return Path(base_dir) / format_size_dirname(n) / f"job_{job_index:04d}{extension}"


def parse_result_path(file_path: Union[str, Path], base_dir: Union[str, Path]) -> ResultMetadata:
    """
    Parse grid size and job index from a result file path.

    Args:
        file_path: Full path to a result file
        base_dir: Results directory the path is relative to

    Returns:
        ResultMetadata

    Raises:
        ValueError: If the path does not follow the n_XXXX/job_XXXX layout
    """
    rel = Path(file_path).relative_to(Path(base_dir))
    parts = rel.parts
    if len(parts) != 2:
        raise ValueError(f"Unexpected result path layout: {rel}")

    size_match = _SIZE_DIR_RE.match(parts[0])
    job_match = _JOB_FILE_RE.match(Path(parts[1]).stem)
    if not size_match or not job_match:
        raise ValueError(f"Unexpected result path layout: {rel}")

    return ResultMetadata(
        n=int(size_match.group(1)),
        job_index=int(job_match.group(1)),
        file_path=str(file_path),
    )
