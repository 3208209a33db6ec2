"""Collaborateurs de restitution : journalisation et tables pandas.

Le cœur de simulation n'imprime rien ; il envoie des :class:`RunOutcome`
et un :class:`BatchSummary` aux reporters enregistrés.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import pandas as pd

from .batch import BatchSummary, RunOutcome, RunStatus
from .config import BITS_PER_BYTE

RUN_COLUMNS = [
    "run",
    "session_s",
    "initial_state",
    "payload_mb",
    "intervals",
    "processed_intervals",
    "status",
    "downloaded_mb",
    "shortfall_mb",
    "average_bandwidth_mbps",
    "flagged",
]

STEP_COLUMNS = ["run", "index", "state", "duration_s", "speed_mbps", "remaining_mb"]


class Reporter:
    """Interface minimale : les deux méthodes ne font rien par défaut."""

    def on_run(self, outcome: RunOutcome) -> None:
        pass

    def on_summary(self, summary: BatchSummary) -> None:
        pass


class MultiReporter(Reporter):
    def __init__(self, *reporters: Reporter) -> None:
        self.reporters = [r for r in reporters if r is not None]

    def on_run(self, outcome: RunOutcome) -> None:
        for reporter in self.reporters:
            reporter.on_run(outcome)

    def on_summary(self, summary: BatchSummary) -> None:
        for reporter in self.reporters:
            reporter.on_summary(summary)


class LoggingReporter(Reporter):
    """Trace chaque run au niveau DEBUG et le résumé au niveau INFO."""

    def __init__(self, logger: Optional[logging.Logger] = None, *, log_steps: bool = False) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self.log_steps = log_steps

    def on_run(self, outcome: RunOutcome) -> None:
        log = self.logger
        if not log.isEnabledFor(logging.DEBUG):
            return
        payload = outcome.initial_payload
        log.debug(
            "Iteration %d | session %.2f s | file %.2f MB (%.2f Mb) | start %s | %d intervals",
            outcome.index,
            outcome.session_duration,
            payload / BITS_PER_BYTE,
            payload,
            outcome.initial_state.label,
            len(outcome.sequence),
        )
        if self.log_steps:
            for step in outcome.result.steps:
                log.debug(
                    "State %d: %s, T: %.2f, downloading at %.2f Mbps, remaining %.2f Mb",
                    step.index,
                    step.state.label,
                    step.duration,
                    step.speed,
                    step.remaining,
                )
        if outcome.status is RunStatus.MISSED:
            downloaded = outcome.result.downloaded
            log.debug(
                "Iteration %d: download incomplete, downloaded %.2f Mb (%.2f MB), remaining %.2f Mb (%.2f MB)",
                outcome.index,
                downloaded,
                downloaded / BITS_PER_BYTE,
                outcome.shortfall,
                outcome.shortfall / BITS_PER_BYTE,
            )
        elif outcome.status is RunStatus.EMPTY:
            log.debug("Iteration %d: empty session, run not scored", outcome.index)
        else:
            log.debug("Iteration %d: download complete", outcome.index)
        log.debug("Iteration %d bandwidth flag: %d", outcome.index, int(outcome.flagged))

    def on_summary(self, summary: BatchSummary) -> None:
        log = self.logger
        log.info(
            "Deadline miss (%d) ratio after %d iterations: %.5f",
            summary.miss_count,
            summary.iterations,
            summary.miss_ratio,
        )
        if summary.avg_shortfall is None:
            log.info("Average shortfall: n/a (no deadline miss)")
        else:
            log.info(
                "Average shortfall over missed runs: %.2f Mb (%.2f MB)",
                summary.avg_shortfall,
                summary.avg_shortfall / BITS_PER_BYTE,
            )
        log.info("Ratio of iterations flagged for bandwidth: %.4f", summary.flag_ratio)
        if summary.empty_count:
            log.warning("%d run(s) had an empty session and were not scored", summary.empty_count)


class FrameReporter(Reporter):
    """Accumule une ligne par run (et par intervalle) pour export pandas."""

    def __init__(self, *, keep_steps: bool = False) -> None:
        self.keep_steps = keep_steps
        self._runs: List[Dict[str, Any]] = []
        self._steps: List[Dict[str, Any]] = []
        self.summary: Optional[BatchSummary] = None

    def on_run(self, outcome: RunOutcome) -> None:
        self._runs.append(
            {
                "run": outcome.index,
                "session_s": outcome.session_duration,
                "initial_state": outcome.initial_state.value,
                "payload_mb": outcome.initial_payload,
                "intervals": len(outcome.sequence),
                "processed_intervals": len(outcome.result.steps),
                "status": outcome.status.value,
                "downloaded_mb": outcome.result.downloaded,
                "shortfall_mb": outcome.shortfall,
                "average_bandwidth_mbps": outcome.average_bandwidth,
                "flagged": outcome.flagged,
            }
        )
        if self.keep_steps:
            for step in outcome.result.steps:
                self._steps.append(
                    {
                        "run": outcome.index,
                        "index": step.index,
                        "state": step.state.value,
                        "duration_s": step.duration,
                        "speed_mbps": step.speed,
                        "remaining_mb": step.remaining,
                    }
                )

    def on_summary(self, summary: BatchSummary) -> None:
        self.summary = summary

    def runs_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self._runs, columns=RUN_COLUMNS)

    def steps_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self._steps, columns=STEP_COLUMNS)


__all__ = [
    "FrameReporter",
    "LoggingReporter",
    "MultiReporter",
    "Reporter",
    "RUN_COLUMNS",
    "STEP_COLUMNS",
]
