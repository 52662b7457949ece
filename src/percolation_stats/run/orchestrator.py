"""
Experiment orchestrator - generates job lists from an ExperimentConfig,
runs them and aggregates the results.

Usage:
    orchestrator = ExperimentOrchestrator(config)
    orchestrator.prepare()      # Generate job list + chunks
    orchestrator.run_local()    # Run every chunk in this process
    orchestrator.aggregate()    # Merge results into the scores CSV
"""

from pathlib import Path
from typing import List

import pandas as pd

from .manifest import ExperimentConfig
from ..jobs.job_generator import (
    generate_trial_jobs, write_job_list, create_chunk_files, TrialJob,
)
from ..percolation.analysis import aggregate_results
from ..percolation.worker import process_trial_chunk


class ExperimentOrchestrator:
    """
    Prepares, runs and aggregates a threshold experiment.

    Chunks produced by prepare() are independent; they can be run here with
    run_local() or handed to any parallel runner calling
    `perc-stats run-trials --chunk-file <chunk>`.
    """

    def __init__(self, config: ExperimentConfig, skip_completed: bool = True):
        """
        Initialize orchestrator.

        Args:
            config: Experiment configuration
            skip_completed: If True, leave out jobs whose output was already
                written by the same job line
        """
        self.config = config
        self.skip_completed = skip_completed

    def _all_jobs(self) -> List[str]:
        config = self.config
        return generate_trial_jobs(
            grid_sizes=config.grid_sizes,
            trials=config.trials,
            trials_per_job=config.trials_per_job,
            output_dir=config.results_dir,
            seed=config.seed,
        )

    def generate_jobs(self) -> List[str]:
        """Generate job lines for every grid size in the config."""
        jobs = self._all_jobs()

        if not self.skip_completed:
            return jobs

        pending = []
        for line in jobs:
            if TrialJob.from_line(line).is_complete():
                continue
            pending.append(line)

        skipped = len(jobs) - len(pending)
        if skipped:
            print(f"  Skipping {skipped} completed jobs")
        return pending

    def prepare(self) -> List[Path]:
        """
        Write the job list and chunk files.

        Returns:
            List of chunk file paths (empty if nothing is pending)
        """
        config = self.config
        print(f"Preparing run: {config.run_name}")
        print(f"  Grid sizes: {config.grid_sizes}")
        print(f"  Trials per size: {config.trials} ({config.trials_per_job} per job)")

        # Chunks from an earlier prepare must not be picked up by run_local()
        for old_chunk in self.chunk_files():
            old_chunk.unlink()

        jobs = self.generate_jobs()
        if not jobs:
            print("  All jobs already completed")
            return []

        write_job_list(jobs, config.job_list_file)

        return create_chunk_files(jobs, config.chunks_dir, config.chunk_size)

    def chunk_files(self) -> List[Path]:
        return sorted(self.config.chunks_dir.glob("chunk_*_of_*.txt"))

    def run_local(self) -> int:
        """
        Run every prepared chunk sequentially in this process.

        Returns:
            Total number of jobs processed
        """
        chunks = self.chunk_files()
        if not chunks:
            print("No chunk files found; run prepare() first")
            return 0

        processed = 0
        for chunk_file in chunks:
            print(f"Processing chunk: {chunk_file.name}")
            processed += process_trial_chunk(chunk_file)
        return processed

    def status(self) -> dict:
        """
        Count expected vs completed jobs.

        Returns:
            Dict with 'expected', 'completed' and 'pending' counts
        """
        all_jobs = self._all_jobs()
        completed = len(self._completed_outputs(all_jobs))
        return {
            'expected': len(all_jobs),
            'completed': completed,
            'pending': len(all_jobs) - completed,
        }

    def _completed_outputs(self, job_lines: List[str]) -> List[Path]:
        jobs = [TrialJob.from_line(line) for line in job_lines]
        return [job.output_file for job in jobs if job.is_complete()]

    def aggregate(self) -> pd.DataFrame:
        """
        Merge the results of this config's completed jobs into the scores CSV.

        Other files under results_dir (left by a run with different trials,
        trials_per_job or seed) are ignored.
        """
        outputs = self._completed_outputs(self._all_jobs())
        return aggregate_results(self.config.results_dir, self.config.scores_csv, files=outputs)
