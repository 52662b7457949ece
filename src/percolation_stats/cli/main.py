"""
Command-line interface for percolation_stats.

Quick estimates:
    perc-stats stats 200 100                 # n=200, 100 trials
    perc-stats stats 50 1000 --seed 7        # reproducible
    perc-stats percolate 20                  # one trial, report the threshold

Chunked pipeline (same pattern for any parallel runner):
    1. perc-stats jobs create-list --grid-sizes 100,200 --trials 400 --trials-per-job 50 \\
           --output-dir results/ --output jobs.txt
    2. perc-stats jobs chunk --job-list jobs.txt --chunks-dir chunks/ --chunk-size 2
    3. perc-stats run-trials --chunk-file chunks/chunk_0001_of_0008.txt
       (or --chunks-dir chunks/ --task-id $SGE_TASK_ID)
    4. perc-stats results aggregate --results-dir results/ --output thresholds.csv

Config-driven runs:
    perc-stats run prepare   --config experiment.yaml
    perc-stats run local     --config experiment.yaml
    perc-stats run status    --config experiment.yaml
    perc-stats run aggregate --config experiment.yaml
"""

import click
from pathlib import Path


DEFAULT_N = 200
DEFAULT_TRIALS = 100
DEFAULT_PERCOLATE_N = 20


def parse_positive_int(value, default: int, name: str) -> int:
    """
    Parse a positive integer argument, falling back to a default.

    Missing, non-integer and non-positive values do not abort the run;
    a warning is printed to stderr and the default is used instead.
    """
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        click.echo(f"Invalid {name} {value!r}, using default: {default}", err=True)
        return default
    if parsed <= 0:
        click.echo(f"{name} must be greater than 0, using default: {default}", err=True)
        return default
    return parsed


def parse_grid_sizes(value: str):
    """Parse a comma-separated list of grid sizes."""
    try:
        sizes = [int(v) for v in value.split(',') if v.strip()]
    except ValueError:
        raise click.BadParameter(f"expected comma-separated integers, got {value!r}")
    if not sizes or any(n <= 0 for n in sizes):
        raise click.BadParameter(f"grid sizes must be positive integers, got {value!r}")
    return sizes


@click.group()
@click.version_option()
def cli():
    """Percolation Stats - Monte Carlo estimation of the percolation threshold."""
    pass


# ============================================================================
# Interactive Commands
# ============================================================================

@cli.command('stats', context_settings={'ignore_unknown_options': True})
@click.argument('n', required=False)
@click.argument('trials', required=False)
@click.argument('extra', nargs=-1)
@click.option('--seed', type=int, help='Seed for reproducible trials')
def stats(n, trials, extra, seed):
    """
    Run TRIALS trials on an N-by-N grid and print threshold statistics.

    Arguments after TRIALS are ignored.
    """
    from ..percolation.estimator import ThresholdEstimator
    from ..percolation.permutation import UniformPermutation

    n = parse_positive_int(n, DEFAULT_N, 'grid size')
    trials = parse_positive_int(trials, DEFAULT_TRIALS, 'number of trials')

    result = ThresholdEstimator(n, trials, permutation=UniformPermutation(seed))

    click.echo(f"mean                    = {result.mean():.16f}")
    click.echo(f"stddev                  = {result.stddev():.16f}")
    click.echo(f"95% confidence interval = "
               f"[{result.confidence_lo():.16f}, {result.confidence_hi():.16f}]")


@cli.command('percolate', context_settings={'ignore_unknown_options': True})
@click.argument('n', required=False)
@click.option('--seed', type=int, help='Seed for a reproducible opening order')
def percolate(n, seed):
    """Open sites of an N-by-N grid at random until it percolates."""
    from ..percolation.estimator import run_trial, NO_PERCOLATION
    from ..percolation.permutation import UniformPermutation

    n = parse_positive_int(n, DEFAULT_PERCOLATE_N, 'grid size')
    order = UniformPermutation(seed).permutation(n * n)

    threshold = run_trial(n, order)
    if threshold == NO_PERCOLATION:
        click.echo("Grid did not percolate", err=True)
        raise SystemExit(1)

    click.echo(f"Percolation occurred after opening {round(threshold * n * n)} sites.")
    click.echo(f"Percolation threshold: {threshold}")


# ============================================================================
# Job Commands
# ============================================================================

@cli.group()
def jobs():
    """Job list and chunk management."""
    pass


@jobs.command('create-list')
@click.option('--grid-sizes', '-n', required=True, help='Comma-separated grid sizes (e.g. 50,100,200)')
@click.option('--trials', '-t', default=DEFAULT_TRIALS, type=click.IntRange(min=1),
              help='Trials per grid size')
@click.option('--trials-per-job', type=click.IntRange(min=1),
              help='Trials per job (default: all trials in one job)')
@click.option('--output-dir', '-d', required=True, type=click.Path(),
              help='Results directory the jobs write into')
@click.option('--seed', type=int, help='Root seed for reproducible jobs')
@click.option('--output', '-o', required=True, type=click.Path(), help='Output job list file')
def jobs_create_list(grid_sizes, trials, trials_per_job, output_dir, seed, output):
    """Create a job list splitting trials across jobs."""
    from ..jobs.job_generator import generate_trial_jobs, write_job_list

    sizes = parse_grid_sizes(grid_sizes)
    job_list = generate_trial_jobs(
        grid_sizes=sizes,
        trials=trials,
        trials_per_job=trials_per_job or trials,
        output_dir=output_dir,
        seed=seed,
    )
    write_job_list(job_list, output)


@jobs.command('chunk')
@click.option('--job-list', '-j', required=True, type=click.Path(exists=True),
              help='Job list file to chunk')
@click.option('--chunks-dir', '-c', required=True, type=click.Path(),
              help='Directory for chunk files')
@click.option('--chunk-size', '-s', default=1, type=click.IntRange(min=1),
              help='Jobs per chunk (default: 1)')
def jobs_chunk(job_list, chunks_dir, chunk_size):
    """Chunk a job list file for parallel processing."""
    from ..jobs.job_generator import read_job_list, create_chunk_files

    job_lines = read_job_list(job_list)
    if not job_lines:
        click.echo("Job list is empty", err=True)
        raise SystemExit(1)

    chunk_files = create_chunk_files(job_lines, chunks_dir, chunk_size)
    click.echo(f"\nCreated {len(chunk_files)} chunk(s) in {chunks_dir}")


# ============================================================================
# Worker Commands
# ============================================================================

@cli.command('run-trials')
@click.option('--chunk-file', '-f', type=click.Path(exists=True),
              help='Chunk file with job lines (n\\ttrials\\tseed\\toutput_file)')
@click.option('--chunks-dir', '-c', type=click.Path(exists=True),
              help='Chunk directory (used with --task-id)')
@click.option('--task-id', type=int, envvar='SGE_TASK_ID',
              help='1-based chunk index (default: $SGE_TASK_ID)')
def run_trials(chunk_file, chunks_dir, task_id):
    """Worker running the trial jobs of one chunk (creates .npz and .stats files)."""
    from ..jobs.job_generator import get_chunk_file, count_chunks
    from ..percolation.worker import process_trial_chunk

    if chunk_file is None:
        if chunks_dir is None or task_id is None:
            click.echo("Provide --chunk-file, or --chunks-dir with --task-id", err=True)
            raise SystemExit(1)
        chunk_file = get_chunk_file(chunks_dir, task_id)
        if chunk_file is None:
            click.echo(f"No chunk {task_id} in {chunks_dir} "
                       f"({count_chunks(chunks_dir)} chunks found)", err=True)
            raise SystemExit(1)

    click.echo(f"Processing chunk: {Path(chunk_file).name}")
    process_trial_chunk(chunk_file)


# ============================================================================
# Results Commands
# ============================================================================

@cli.group()
def results():
    """Result aggregation commands."""
    pass


@results.command('aggregate')
@click.option('--results-dir', '-r', required=True, type=click.Path(exists=True),
              help='Directory containing n_XXXX/job_XXXX.npz files')
@click.option('--output', '-o', required=True, type=click.Path(), help='Output CSV file')
def results_aggregate(results_dir, output):
    """Merge per-job thresholds into statistics per grid size."""
    from ..percolation.analysis import aggregate_results

    df = aggregate_results(results_dir, output)

    if len(df) > 0:
        click.echo(f"\nAggregated {int(df['trials'].sum())} trials over {len(df)} grid sizes")
    else:
        click.echo("No results found", err=True)


# ============================================================================
# Run Commands (config-driven experiments)
# ============================================================================

@cli.group()
def run():
    """Config-driven experiment management."""
    pass


@run.command('prepare')
@click.option('--config', '-c', 'config_path', required=True, type=click.Path(exists=True),
              help='Experiment config YAML file')
@click.option('--redo', is_flag=True, help='Regenerate all jobs, ignoring existing outputs')
def run_prepare(config_path, redo):
    """Generate job list and chunks for an experiment."""
    from ..run import ExperimentConfig, ExperimentOrchestrator

    config = ExperimentConfig.from_yaml(config_path)
    orch = ExperimentOrchestrator(config, skip_completed=not redo)
    chunk_files = orch.prepare()

    if chunk_files:
        click.echo(f"\nRun chunks with: perc-stats run local --config {config_path}")
        click.echo(f"  or: perc-stats run-trials --chunks-dir {config.chunks_dir} --task-id <1..{len(chunk_files)}>")


@run.command('local')
@click.option('--config', '-c', 'config_path', required=True, type=click.Path(exists=True),
              help='Experiment config YAML file')
def run_local(config_path):
    """Run all prepared chunks in this process."""
    from ..run import ExperimentConfig, ExperimentOrchestrator

    config = ExperimentConfig.from_yaml(config_path)
    processed = ExperimentOrchestrator(config).run_local()
    click.echo(f"Processed {processed} jobs")


@run.command('status')
@click.option('--config', '-c', 'config_path', required=True, type=click.Path(exists=True),
              help='Experiment config YAML file')
def run_status(config_path):
    """Show how many jobs of an experiment have completed."""
    from ..run import ExperimentConfig, ExperimentOrchestrator

    config = ExperimentConfig.from_yaml(config_path)
    status = ExperimentOrchestrator(config).status()

    click.echo(f"Run: {config.run_name}")
    click.echo(f"  Expected:  {status['expected']}")
    click.echo(f"  Completed: {status['completed']}")
    click.echo(f"  Pending:   {status['pending']}")


@run.command('aggregate')
@click.option('--config', '-c', 'config_path', required=True, type=click.Path(exists=True),
              help='Experiment config YAML file')
def run_aggregate(config_path):
    """Aggregate experiment results into the configured CSV."""
    from ..run import ExperimentConfig, ExperimentOrchestrator

    config = ExperimentConfig.from_yaml(config_path)
    df = ExperimentOrchestrator(config).aggregate()

    if len(df) == 0:
        click.echo("No results found", err=True)
        return

    for _, row in df.iterrows():
        click.echo(f"  n={int(row['n'])}: mean={row['mean']:.6f} "
                   f"[{row['confidence_lo']:.6f}, {row['confidence_hi']:.6f}] "
                   f"({int(row['trials'])} trials)")


if __name__ == '__main__':
    cli()
