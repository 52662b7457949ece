"""
Job list and chunk file generation.

Trials are independent, so an experiment is split into jobs that each run a
share of the trials for one grid size. Jobs are grouped into chunk files that
can be processed in parallel (one chunk per array task or worker process).

Job List Format:
    One job per line, tab separated:

        n<TAB>trials<TAB>seed<TAB>output_file

    seed is an integer, or 'none' for fresh OS entropy.

    Example:
        200\t25\t3871264981\t/results/n_0200/job_0001.npz
        200\t25\t1143890472\t/results/n_0200/job_0002.npz

Workflow:
    1. Generate job list: perc-stats jobs create-list --grid-sizes 100,200 --trials 100 ...
    2. Chunk job list:    perc-stats jobs chunk --job-list jobs.txt --chunk-size 4
    3. Run each chunk:    perc-stats run-trials --chunk-file chunks/chunk_0001_of_0004.txt
    4. Aggregate:         perc-stats results aggregate --results-dir results/ --output thresholds.csv
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

import numpy as np

from ..path_utils import build_result_path


NO_SEED = 'none'


@dataclass
class TrialJob:
    """One unit of work: run `trials` trials on an n-by-n grid."""
    n: int
    trials: int
    seed: Optional[int]
    output_file: Path

    def to_line(self) -> str:
        seed = NO_SEED if self.seed is None else str(self.seed)
        return f"{self.n}\t{self.trials}\t{seed}\t{self.output_file}"

    @classmethod
    def from_line(cls, line: str) -> 'TrialJob':
        """
        Parse a job line.

        Raises:
            ValueError: If the line is malformed
        """
        parts = line.strip().split('\t')
        if len(parts) != 4:
            raise ValueError(f"Expected 4 tab-separated fields, got {len(parts)}: {line!r}")

        n_str, trials_str, seed_str, output_file = parts
        seed = None if seed_str.lower() == NO_SEED else int(seed_str)
        return cls(n=int(n_str), trials=int(trials_str), seed=seed, output_file=Path(output_file))

    def is_complete(self) -> bool:
        """
        Check whether output_file holds the results of this exact job.

        The worker stores the job line in the .npz; an output written for a
        different size, trial count or seed does not count as complete.
        """
        if not self.output_file.exists():
            return False
        try:
            with np.load(self.output_file) as dump:
                return 'job' in dump.files and str(dump['job']) == self.to_line()
        except Exception as e:
            print(f"  Unreadable output {self.output_file}: {e}")
            return False


def read_job_list(job_list_file: Union[str, Path]) -> List[str]:
    """
    Read job list from a file.

    Args:
        job_list_file: Path to job list file (one job per line)

    Returns:
        List of job lines (stripped, non-empty, non-comment)
    """
    job_list_file = Path(job_list_file)
    jobs = []
    with open(job_list_file, 'r') as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith('#'):
                jobs.append(line)
    return jobs


def write_job_list(jobs: List[str], output_file: Union[str, Path]) -> Path:
    """
    Write job list to a file.

    Args:
        jobs: List of job lines
        output_file: Path to output file

    Returns:
        Path to created file
    """
    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    with open(output_file, 'w') as f:
        for job in jobs:
            f.write(job + '\n')

    print(f"Created job list with {len(jobs)} jobs: {output_file}")
    return output_file


def split_trials(total: int, trials_per_job: int) -> List[int]:
    """
    Split a trial count into job-sized pieces.

    Args:
        total: Total number of trials
        trials_per_job: Maximum trials per job

    Returns:
        List of trial counts summing to total, e.g. split_trials(10, 4) -> [4, 4, 2]
    """
    if total <= 0 or trials_per_job <= 0:
        raise ValueError(
            f"total and trials_per_job must be positive, got {total} and {trials_per_job}"
        )
    full, rest = divmod(total, trials_per_job)
    return [trials_per_job] * full + ([rest] if rest else [])


def generate_trial_jobs(
    grid_sizes: Sequence[int],
    trials: int,
    trials_per_job: int,
    output_dir: Union[str, Path],
    seed: Optional[int] = None,
) -> List[str]:
    """
    Generate the job list for a threshold experiment.

    Each grid size gets its trials split into jobs. With a seed, per-job seeds
    are spawned from one SeedSequence so that jobs draw independent streams
    and the whole experiment is reproducible.

    Args:
        grid_sizes: Grid side lengths to measure
        trials: Total trials per grid size
        trials_per_job: Maximum trials per job
        output_dir: Results directory
        seed: Root seed (None for fresh entropy in every job)

    Returns:
        List of job lines
    """
    pieces = split_trials(trials, trials_per_job)

    job_seeds = None
    if seed is not None:
        children = np.random.SeedSequence(seed).spawn(len(grid_sizes) * len(pieces))
        job_seeds = [int(child.generate_state(1)[0]) for child in children]

    jobs = []
    for size_idx, n in enumerate(grid_sizes):
        for job_idx, job_trials in enumerate(pieces):
            job_seed = None
            if job_seeds is not None:
                job_seed = job_seeds[size_idx * len(pieces) + job_idx]
            job = TrialJob(
                n=int(n),
                trials=job_trials,
                seed=job_seed,
                output_file=build_result_path(output_dir, int(n), job_idx + 1),
            )
            jobs.append(job.to_line())

    return jobs


def create_chunk_files(
    job_list: List[str],
    output_dir: Union[str, Path],
    chunk_size: int = 1,
) -> List[Path]:
    """
    Split a job list into chunk files of at most chunk_size jobs.

    Chunks are named chunk_XXXX_of_YYYY.txt so that a 1-based array task id
    selects one through get_chunk_file().

    Args:
        job_list: List of job lines
        output_dir: Directory to save chunk files
        chunk_size: Number of jobs per chunk

    Returns:
        List of chunk file paths
    """
    if not job_list:
        raise ValueError("Cannot chunk an empty job list")
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    groups = [job_list[i:i + chunk_size] for i in range(0, len(job_list), chunk_size)]
    print(f"Creating {len(groups)} chunk(s) from {len(job_list)} jobs")

    chunk_files = []
    for i, group in enumerate(groups, start=1):
        chunk_path = output_dir / f"chunk_{i:04d}_of_{len(groups):04d}.txt"
        chunk_path.write_text(''.join(job + '\n' for job in group))
        chunk_files.append(chunk_path)

    return chunk_files


def count_chunks(chunks_dir: Union[str, Path]) -> int:
    """Count chunk files in a directory."""
    return len(list(Path(chunks_dir).glob("chunk_*_of_*.txt")))


def get_chunk_file(chunks_dir: Union[str, Path], task_id: int) -> Optional[Path]:
    """
    Get the chunk file for a 1-based task ID.

    Args:
        chunks_dir: Directory containing chunk files
        task_id: 1-based task ID (as in SGE_TASK_ID)

    Returns:
        Path to chunk file, or None if not found
    """
    matches = sorted(Path(chunks_dir).glob(f"chunk_{task_id:04d}_of_*.txt"))
    return matches[0] if matches else None
