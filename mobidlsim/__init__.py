"""MobiDLSim : téléchargement sur lien intermittent WiFi + 4G/5G."""

from .batch import BatchAccumulator, BatchSummary, RunOutcome, RunStatus, run_batch, run_once
from .config import BatchConfig, load_scenario, load_scenarios
from .download import DownloadResult, DownloadStep, average_bandwidth, effective_speed, simulate
from .model import Interval, LinkState
from .session import generate_sequence
from .variates import (
    DegenerateSampleError,
    choose_initial_state,
    sample_exponential,
    sample_pareto,
)

__all__ = [
    "BatchAccumulator",
    "BatchConfig",
    "BatchSummary",
    "DegenerateSampleError",
    "DownloadResult",
    "DownloadStep",
    "Interval",
    "LinkState",
    "RunOutcome",
    "RunStatus",
    "average_bandwidth",
    "choose_initial_state",
    "effective_speed",
    "generate_sequence",
    "load_scenario",
    "load_scenarios",
    "run_batch",
    "run_once",
    "sample_exponential",
    "sample_pareto",
    "simulate",
]
