"""
Experiment configuration.

ExperimentConfig loads a YAML experiment definition:

    run_name: threshold_sweep
    description: Threshold vs grid size
    experiment:
      grid_sizes: [50, 100, 200]
      trials: 200
      trials_per_job: 50
      seed: 12345
    output:
      base_dir: /scratch/percolation
      results_dir: results
      jobs_dir: jobs
      chunk_size: 2
      scores_csv: thresholds.csv
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


class ExperimentConfig:
    """
    Loads and validates an experiment configuration YAML.

    Example:
        config = ExperimentConfig.from_yaml('config/threshold_sweep.yaml')
        print(config.run_name)
        print(config.grid_sizes)
    """

    def __init__(self, data: Dict[str, Any]):
        self._data = data
        self._validate()

    @classmethod
    def from_yaml(cls, path: str) -> 'ExperimentConfig':
        """Load experiment config from YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Experiment config not found: {path}")

        with open(path, 'r') as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Experiment config must be a mapping: {path}")

        return cls(data)

    def _validate(self):
        """Validate required config sections and values."""
        required_sections = ['run_name', 'experiment', 'output']
        for section in required_sections:
            if section not in self._data:
                raise ValueError(f"Missing required config section: '{section}'")

        if 'base_dir' not in self._data['output']:
            raise ValueError("Missing required config key: 'output.base_dir'")

        if not self.grid_sizes:
            raise ValueError("experiment.grid_sizes must list at least one grid size")

        checks = [('grid size', n) for n in self.grid_sizes]
        checks += [
            ('trials', self.trials),
            ('trials_per_job', self.trials_per_job),
            ('chunk_size', self.chunk_size),
        ]
        for name, value in checks:
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")

    # --- Properties ---

    @property
    def run_name(self) -> str:
        return self._data['run_name']

    @property
    def description(self) -> str:
        return self._data.get('description', '')

    # --- Experiment ---

    @property
    def grid_sizes(self) -> List[int]:
        """Grid sizes to measure; a single `n` key is accepted as well."""
        experiment = self._data['experiment']
        if 'grid_sizes' in experiment:
            sizes = experiment['grid_sizes']
            return list(sizes) if isinstance(sizes, (list, tuple)) else [sizes]
        if 'n' in experiment:
            return [experiment['n']]
        return []

    @property
    def trials(self) -> int:
        return self._data['experiment'].get('trials', 100)

    @property
    def trials_per_job(self) -> int:
        return self._data['experiment'].get('trials_per_job', self.trials)

    @property
    def seed(self) -> Optional[int]:
        return self._data['experiment'].get('seed')

    # --- Output paths ---

    @property
    def base_dir(self) -> Path:
        return Path(self._data['output']['base_dir'])

    @property
    def results_dir(self) -> Path:
        return self.base_dir / self._data['output'].get('results_dir', 'results')

    @property
    def jobs_dir(self) -> Path:
        return self.base_dir / self._data['output'].get('jobs_dir', 'jobs')

    @property
    def chunks_dir(self) -> Path:
        return self.jobs_dir / 'chunks'

    @property
    def job_list_file(self) -> Path:
        return self.jobs_dir / 'jobs.txt'

    @property
    def chunk_size(self) -> int:
        return self._data['output'].get('chunk_size', 1)

    @property
    def scores_csv(self) -> Path:
        return self.base_dir / self._data['output'].get('scores_csv', 'thresholds.csv')
