"""Job lists and chunk files for splitting trials across parallel workers."""

from .job_generator import (
    TrialJob,
    read_job_list,
    write_job_list,
    split_trials,
    generate_trial_jobs,
    create_chunk_files,
    count_chunks,
    get_chunk_file,
)

__all__ = [
    'TrialJob',
    'read_job_list',
    'write_job_list',
    'split_trials',
    'generate_trial_jobs',
    'create_chunk_files',
    'count_chunks',
    'get_chunk_file',
]
