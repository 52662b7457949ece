"""
Trial worker for processing chunk files of threshold jobs.

This worker runs the trials listed in a chunk and saves per-job results.
"""

from pathlib import Path
from typing import Union

from .estimator import ThresholdEstimator
from .permutation import UniformPermutation
from ..jobs.job_generator import TrialJob, read_job_list


def process_trial_chunk(chunk_file: Union[str, Path]) -> int:
    """
    Run every trial job listed in a chunk file.

    For each job line (n, trials, seed, output_file) this worker:
    1. Runs a ThresholdEstimator with a UniformPermutation seeded from the job
    2. Saves the thresholds and the job line to output_file (.npz)
    3. Saves mean, stddev and confidence bounds next to it (.stats)

    A job that fails is reported and skipped; the rest of the chunk still runs.

    Args:
        chunk_file: Path to chunk file containing job lines

    Returns:
        Number of jobs processed
    """
    jobs = read_job_list(chunk_file)
    print(f"Processing {len(jobs)} trial jobs from chunk")

    processed = 0

    for line in jobs:
        try:
            job = TrialJob.from_line(line)

            stats = ThresholdEstimator(job.n, job.trials,
                                       permutation=UniformPermutation(job.seed))

            output_file = Path(job.output_file)
            output_file.parent.mkdir(parents=True, exist_ok=True)
            stats.save(str(output_file), job=job.to_line())

            # Small summary for quick inspection without loading arrays
            stats_file = output_file.with_suffix('.stats')
            with open(stats_file, 'w') as f:
                f.write(f"{stats.mean()}\t{stats.stddev()}\t"
                        f"{stats.confidence_lo()}\t{stats.confidence_hi()}\n")

            print(f"  n={job.n} trials={job.trials} mean={stats.mean():.6f} -> {output_file}")
            processed += 1

        except Exception as e:
            print(f"  ERROR processing job {line!r}: {e}")
            continue

    print(f"Completed {processed}/{len(jobs)} trial jobs")
    return processed
