"""Campagne de runs indépendants et agrégation des statistiques."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .config import BatchConfig, PayloadConfig, SessionDurationConfig
from .download import DownloadResult, average_bandwidth, simulate
from .model import Interval, LinkState
from .session import generate_sequence
from .variates import choose_initial_state, draw_exponential, draw_pareto, draw_uniform, draw_uniform_range

logger = logging.getLogger(__name__)


class RunStatus(Enum):
    COMPLETE = "complete"
    MISSED = "missed"
    EMPTY = "empty"


@dataclass(frozen=True)
class RunOutcome:
    """Résultat d'un run : séquence générée, trace de téléchargement, marquage."""

    index: int
    session_duration: float
    initial_state: LinkState
    initial_payload: float
    sequence: Tuple[Interval, ...]
    result: DownloadResult
    status: RunStatus
    average_bandwidth: Optional[float]
    flagged: bool

    @property
    def shortfall(self) -> float:
        return self.result.shortfall if self.status is RunStatus.MISSED else 0.0


@dataclass(frozen=True)
class BatchSummary:
    iterations: int
    complete_count: int
    miss_count: int
    empty_count: int
    flagged_count: int
    miss_ratio: float
    avg_shortfall: Optional[float]
    flag_ratio: float
    shortfall_per_run: float

    def as_dict(self) -> Dict[str, Any]:
        return {
            "iterations": self.iterations,
            "complete_count": self.complete_count,
            "miss_count": self.miss_count,
            "empty_count": self.empty_count,
            "flagged_count": self.flagged_count,
            "miss_ratio": self.miss_ratio,
            "avg_shortfall": self.avg_shortfall,
            "flag_ratio": self.flag_ratio,
            "shortfall_per_run": self.shortfall_per_run,
        }


class BatchAccumulator:
    """Compteurs courants d'une campagne, mis à jour une fois par run."""

    def __init__(self) -> None:
        self.runs = 0
        self.complete_count = 0
        self.miss_count = 0
        self.empty_count = 0
        self.flagged_count = 0
        self.shortfall_sum = 0.0

    def update(self, outcome: RunOutcome) -> None:
        self.runs += 1
        if outcome.status is RunStatus.MISSED:
            self.miss_count += 1
            self.shortfall_sum += outcome.shortfall
        elif outcome.status is RunStatus.COMPLETE:
            self.complete_count += 1
        else:
            self.empty_count += 1
        if outcome.flagged:
            self.flagged_count += 1

    def finalize(self) -> BatchSummary:
        if self.runs == 0:
            raise ValueError("cannot finalize an empty batch")
        avg_shortfall = self.shortfall_sum / self.miss_count if self.miss_count else None
        return BatchSummary(
            iterations=self.runs,
            complete_count=self.complete_count,
            miss_count=self.miss_count,
            empty_count=self.empty_count,
            flagged_count=self.flagged_count,
            miss_ratio=self.miss_count / self.runs,
            avg_shortfall=avg_shortfall,
            flag_ratio=self.flagged_count / self.runs,
            shortfall_per_run=self.shortfall_sum / self.runs,
        )


def sample_session_duration(session: SessionDurationConfig, rng) -> float:
    mode = session.resolved_mode
    if mode == "fixed":
        return float(session.value)
    if mode == "exponential":
        return draw_exponential(rng, session.value)
    return draw_uniform_range(rng, session.value)


def sample_payload(payload: PayloadConfig, rng) -> float:
    """Tire la taille du fichier et la retourne en Megabits."""

    mode = payload.resolved_mode
    if mode == "fixed":
        size = float(payload.size)
    elif mode == "exponential":
        size = draw_exponential(rng, payload.mean)
    else:
        size = draw_pareto(rng, payload.alpha, payload.xm)
    return size * payload.megabits_factor


def _classify(initial_payload: float, sequence, result: DownloadResult) -> RunStatus:
    if initial_payload <= 0:
        return RunStatus.COMPLETE
    if not sequence:
        return RunStatus.EMPTY
    return RunStatus.COMPLETE if result.completed else RunStatus.MISSED


def run_once(config: BatchConfig, rng, index: int = 1) -> RunOutcome:
    """Exécute un run : tirages, génération de séquence puis téléchargement."""

    link = config.link
    ts = sample_session_duration(config.session, rng)
    payload_mb = sample_payload(config.payload, rng)
    initial_state = choose_initial_state(link.mean_disconnect, link.mean_connect, draw_uniform(rng))
    sequence = tuple(generate_sequence(initial_state, link.mean_disconnect, link.mean_connect, ts, rng))
    result = simulate(sequence, link.wifi_speed, link.mobile_speed, payload_mb)
    status = _classify(payload_mb, sequence, result)

    avg_bw = average_bandwidth(sequence, link.wifi_speed, link.mobile_speed, config.flag.weighting)
    flagged = status is not RunStatus.EMPTY and avg_bw is not None and avg_bw > config.flag.threshold

    return RunOutcome(
        index=index,
        session_duration=ts,
        initial_state=initial_state,
        initial_payload=payload_mb,
        sequence=sequence,
        result=result,
        status=status,
        average_bandwidth=avg_bw,
        flagged=flagged,
    )


def run_batch(config: BatchConfig, rng, reporter=None) -> BatchSummary:
    """Exécute ``config.iterations`` runs indépendants et agrège les résultats.

    La configuration est validée avant le premier run : aucun run partiel
    n'est produit pour des paramètres invalides. Chaque :class:`RunOutcome`
    est transmis à ``reporter.on_run`` puis le résumé à
    ``reporter.on_summary``.
    """

    config.validate()
    accumulator = BatchAccumulator()
    logger.info("batch '%s': %d iterations", config.name, config.iterations)
    for index in range(1, config.iterations + 1):
        outcome = run_once(config, rng, index)
        accumulator.update(outcome)
        if reporter is not None:
            reporter.on_run(outcome)

    summary = accumulator.finalize()
    if reporter is not None:
        reporter.on_summary(summary)
    return summary


__all__ = [
    "BatchAccumulator",
    "BatchSummary",
    "RunOutcome",
    "RunStatus",
    "run_batch",
    "run_once",
    "sample_payload",
    "sample_session_duration",
]
