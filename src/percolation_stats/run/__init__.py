"""Experiment configuration and orchestration."""

from .manifest import ExperimentConfig
from .orchestrator import ExperimentOrchestrator

__all__ = ['ExperimentConfig', 'ExperimentOrchestrator']
