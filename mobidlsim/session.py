"""Génération de la séquence Connect/Disconnect d'une session."""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence

from .model import Interval, LinkState
from .variates import _validate_positive_real, draw_exponential

logger = logging.getLogger(__name__)

MAX_EXPECTED_INTERVALS = 10_000_000


def generate_sequence(
    initial_state: LinkState,
    mean_disconnect: float,
    mean_connect: float,
    ts: float,
    rng,
) -> List[Interval]:
    """Construit la séquence alternée d'intervalles couvrant ``ts`` secondes.

    La durée brute de chaque séjour est tirée d'une loi exponentielle dont la
    moyenne dépend de l'état courant. Elle est bornée au temps restant avant
    le test de sortie, si bien que la dernière période ne dépasse jamais la
    fin de session et que la somme des durées vaut ``ts``.

    Parameters
    ----------
    initial_state:
        État de la première période.
    mean_disconnect, mean_connect:
        Durées moyennes de séjour (secondes) en Disconnect et en Connect.
    ts:
        Durée de la session. ``ts <= 0`` donne une séquence vide. Une session
        attendant plus de ``MAX_EXPECTED_INTERVALS`` périodes lève ``ValueError``.
    rng:
        Source uniforme exposant ``random()``.
    """

    state = LinkState.parse(initial_state)
    if not math.isfinite(ts):
        raise ValueError("ts must be a finite number")
    sequence: List[Interval] = []
    if ts <= 0:
        return sequence

    means = {
        LinkState.DISCONNECT: _validate_positive_real("mean_disconnect", mean_disconnect),
        LinkState.CONNECT: _validate_positive_real("mean_connect", mean_connect),
    }
    expected = 2.0 * ts / (means[LinkState.DISCONNECT] + means[LinkState.CONNECT])
    if expected > MAX_EXPECTED_INTERVALS:
        raise ValueError(
            f"session of {ts} s would need about {expected:.3g} intervals "
            f"(limit {MAX_EXPECTED_INTERVALS}); increase the mean dwell times"
        )
    elapsed = 0.0
    while True:
        remaining = ts - elapsed
        dwell = min(draw_exponential(rng, means[state]), remaining)
        if dwell >= remaining:
            if remaining > 0:
                sequence.append(Interval(state, remaining))
            break
        if elapsed + dwell == elapsed:
            raise ValueError(f"dwell of {dwell!r} s no longer advances the clock at t={elapsed!r} s")
        sequence.append(Interval(state, dwell))
        elapsed += dwell
        state = state.other()

    logger.debug("session of %.2f s split into %d intervals", ts, len(sequence))
    return sequence


def sequence_duration(sequence: Sequence[Interval]) -> float:
    return math.fsum(interval.duration for interval in sequence)


def state_time_fraction(sequence: Sequence[Interval], state: LinkState) -> Optional[float]:
    """Part du temps de session passée dans ``state`` (``None`` si vide)."""

    total = sequence_duration(sequence)
    if total <= 0:
        return None
    target = LinkState.parse(state)
    in_state = math.fsum(i.duration for i in sequence if i.state is target)
    return in_state / total


__all__ = ["MAX_EXPECTED_INTERVALS", "Interval", "LinkState", "generate_sequence", "sequence_duration", "state_time_fraction"]
