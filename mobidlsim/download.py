"""Décompte du volume restant le long d'une séquence Connect/Disconnect.

En Connect le terminal cumule WiFi et 4G/5G ; en Disconnect seul le lien
mobile reste actif. Les débits sont en Mbps, les volumes en Megabits.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .model import Interval, LinkState

BANDWIDTH_WEIGHTINGS = ("interval", "time")


def _validate_speed(name: str, value: float) -> float:
    value = float(value)
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"{name} must be a finite number >= 0")
    return value


def effective_speed(state: LinkState, wifi_speed: float, mobile_speed: float) -> float:
    if state is LinkState.CONNECT:
        return wifi_speed + mobile_speed
    return mobile_speed


@dataclass(frozen=True)
class DownloadStep:
    """Trace d'un intervalle traité (index à partir de 1)."""

    index: int
    state: LinkState
    duration: float
    speed: float
    remaining: float


@dataclass(frozen=True)
class DownloadResult:
    initial_payload: float
    remaining: float
    steps: Tuple[DownloadStep, ...]

    @property
    def completed(self) -> bool:
        return self.remaining <= 0

    @property
    def shortfall(self) -> float:
        return 0.0 if self.completed else self.remaining

    @property
    def downloaded(self) -> float:
        if self.initial_payload <= 0:
            return 0.0
        return self.initial_payload - max(self.remaining, 0.0)

    @property
    def elapsed(self) -> float:
        return math.fsum(step.duration for step in self.steps)


def simulate(
    sequence: Sequence[Interval],
    wifi_speed: float,
    mobile_speed: float,
    initial_payload: float,
) -> DownloadResult:
    """Télécharge ``initial_payload`` Megabits le long de ``sequence``.

    Chaque appel possède son propre compteur ``remaining`` : aucun état
    n'est partagé entre deux runs. L'itération s'arrête dès que le volume
    restant devient négatif ou nul ; les intervalles suivants sont ignorés.
    """

    wifi_speed = _validate_speed("wifi_speed", wifi_speed)
    mobile_speed = _validate_speed("mobile_speed", mobile_speed)
    remaining = float(initial_payload)
    steps = []
    if remaining <= 0:
        return DownloadResult(initial_payload=remaining, remaining=remaining, steps=())

    for index, interval in enumerate(sequence, start=1):
        speed = effective_speed(interval.state, wifi_speed, mobile_speed)
        remaining -= speed * interval.duration
        steps.append(DownloadStep(index, interval.state, interval.duration, speed, remaining))
        if remaining <= 0:
            break

    return DownloadResult(initial_payload=float(initial_payload), remaining=remaining, steps=tuple(steps))


def average_bandwidth(
    sequence: Sequence[Interval],
    wifi_speed: float,
    mobile_speed: float,
    weighting: str = "interval",
) -> Optional[float]:
    """Débit moyen (Mbps) de la séquence complète.

    ``weighting="interval"`` : moyenne non pondérée des débits par intervalle.
    ``weighting="time"`` : moyenne pondérée par la durée des intervalles.
    Retourne ``None`` pour une séquence vide.
    """

    if weighting not in BANDWIDTH_WEIGHTINGS:
        raise ValueError(f"unknown weighting '{weighting}', expected one of: {', '.join(BANDWIDTH_WEIGHTINGS)}")
    if not sequence:
        return None
    speeds = [effective_speed(i.state, wifi_speed, mobile_speed) for i in sequence]
    if weighting == "interval":
        return math.fsum(speeds) / len(speeds)
    total = math.fsum(i.duration for i in sequence)
    if total <= 0:
        return None
    return math.fsum(s * i.duration for s, i in zip(speeds, sequence)) / total


__all__ = [
    "BANDWIDTH_WEIGHTINGS",
    "DownloadResult",
    "DownloadStep",
    "average_bandwidth",
    "effective_speed",
    "simulate",
]
