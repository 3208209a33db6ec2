"""Configuration des campagnes de téléchargement et chargement des presets."""

from __future__ import annotations

import math
import numbers
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional

from .download import BANDWIDTH_WEIGHTINGS
from .utils import load_yaml

DEFAULT_SCENARIOS = Path(__file__).with_name("scenarios.yaml")
BITS_PER_BYTE = 8.0
DEFAULT_BANDWIDTH_THRESHOLD = 40.0

SESSION_MODES = ("fixed", "exponential", "uniform")
PAYLOAD_MODES = ("fixed", "exponential", "pareto")
PAYLOAD_UNITS = ("MB", "Mb")

_MODE_ALIASES = {
    "fixed": "fixed",
    "const": "fixed",
    "constant": "fixed",
    "exponential": "exponential",
    "exp": "exponential",
    "uniform": "uniform",
    "pareto": "pareto",
}


def _normalize_mode(value: object, allowed: tuple[str, ...], what: str) -> str:
    key = str(value).strip().lower()
    normalized = _MODE_ALIASES.get(key)
    if normalized not in allowed:
        raise ValueError(f"unknown {what} mode '{value}', expected one of: {', '.join(allowed)}")
    return normalized


def _check_real(name: str, value: object) -> float:
    if isinstance(value, bool):
        raise TypeError(f"{name} must be a real number, not bool")
    if not isinstance(value, numbers.Real):
        raise TypeError(f"{name} must be a real number")
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite")
    return float(value)


def _check_positive(name: str, value: object) -> float:
    value = _check_real(name, value)
    if value <= 0:
        raise ValueError(f"{name} must be > 0")
    return value


def _check_non_negative(name: str, value: object) -> float:
    value = _check_real(name, value)
    if value < 0:
        raise ValueError(f"{name} must be >= 0")
    return value


@dataclass(frozen=True)
class SessionDurationConfig:
    """Durée de session : fixe, exponentielle (moyenne) ou uniforme (borne)."""

    mode: str = "fixed"
    value: float = 50.0

    @property
    def resolved_mode(self) -> str:
        return _normalize_mode(self.mode, SESSION_MODES, "session")

    def validate(self) -> None:
        mode = self.resolved_mode
        if mode == "fixed":
            _check_non_negative("session.value", self.value)
        else:
            _check_positive("session.value", self.value)


@dataclass(frozen=True)
class PayloadConfig:
    """Taille du fichier. ``unit="MB"`` est converti en Megabits (x8)."""

    mode: str = "pareto"
    mean: float = 250.0
    alpha: float = 25.0 / 3.0
    xm: float = 220.0
    size: float = 0.0
    unit: str = "MB"

    @property
    def resolved_mode(self) -> str:
        return _normalize_mode(self.mode, PAYLOAD_MODES, "payload")

    def validate(self) -> None:
        mode = self.resolved_mode
        if self.unit not in PAYLOAD_UNITS:
            raise ValueError(f"payload.unit must be one of: {', '.join(PAYLOAD_UNITS)}")
        if mode == "exponential":
            _check_positive("payload.mean", self.mean)
        elif mode == "pareto":
            _check_positive("payload.alpha", self.alpha)
            _check_positive("payload.xm", self.xm)
        else:
            _check_non_negative("payload.size", self.size)

    @property
    def megabits_factor(self) -> float:
        return BITS_PER_BYTE if self.unit == "MB" else 1.0


@dataclass(frozen=True)
class LinkConfig:
    """Paramètres radio : durées moyennes de séjour (s) et débits (Mbps)."""

    mean_disconnect: float = 500.0
    mean_connect: float = 50.0
    wifi_speed: float = 60.0
    mobile_speed: float = 40.0

    def validate(self) -> None:
        _check_positive("link.mean_disconnect", self.mean_disconnect)
        _check_positive("link.mean_connect", self.mean_connect)
        _check_non_negative("link.wifi_speed", self.wifi_speed)
        _check_non_negative("link.mobile_speed", self.mobile_speed)


@dataclass(frozen=True)
class BandwidthFlagConfig:
    """Seuil de débit moyen au-delà duquel un run est marqué."""

    threshold: float = DEFAULT_BANDWIDTH_THRESHOLD
    weighting: str = "interval"

    def validate(self) -> None:
        _check_real("flag.threshold", self.threshold)
        if self.weighting not in BANDWIDTH_WEIGHTINGS:
            raise ValueError(f"flag.weighting must be one of: {', '.join(BANDWIDTH_WEIGHTINGS)}")


@dataclass(frozen=True)
class BatchConfig:
    """Configuration agrégée d'une campagne."""

    iterations: int = 1000
    link: LinkConfig = field(default_factory=LinkConfig)
    session: SessionDurationConfig = field(default_factory=SessionDurationConfig)
    payload: PayloadConfig = field(default_factory=PayloadConfig)
    flag: BandwidthFlagConfig = field(default_factory=BandwidthFlagConfig)
    seed: Optional[int] = None
    name: str = "custom"

    def validate(self) -> "BatchConfig":
        if isinstance(self.iterations, bool) or not isinstance(self.iterations, numbers.Integral):
            raise TypeError("iterations must be an integer")
        if self.iterations <= 0:
            raise ValueError("iterations must be > 0")
        if self.seed is not None and (isinstance(self.seed, bool) or not isinstance(self.seed, numbers.Integral)):
            raise TypeError("seed must be an integer or None")
        self.link.validate()
        self.session.validate()
        self.payload.validate()
        self.flag.validate()
        return self


def _section(data: Mapping[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, Mapping):
        raise ValueError(f"section '{key}' must be a mapping")
    return dict(value)


def config_from_mapping(data: Mapping[str, Any], name: str = "custom") -> BatchConfig:
    """Construit un :class:`BatchConfig` depuis un dictionnaire (YAML).

    Les clés absentes gardent les valeurs par défaut ; les clés inconnues
    d'une section lèvent ``ValueError``.
    """

    def build(cls, key):
        values = _section(data, key)
        try:
            return cls(**values)
        except TypeError as exc:
            raise ValueError(f"invalid keys in section '{key}': {exc}") from exc

    config = BatchConfig(
        iterations=data.get("iterations", BatchConfig.iterations),
        link=build(LinkConfig, "link"),
        session=build(SessionDurationConfig, "session"),
        payload=build(PayloadConfig, "payload"),
        flag=build(BandwidthFlagConfig, "flag"),
        seed=data.get("seed"),
        name=str(data.get("name", name)),
    )
    return config.validate()


def _read_scenarios(path: str | Path) -> Dict[str, Any]:
    raw = load_yaml(str(path))
    scenarios = raw.get("scenarios", raw)
    if not isinstance(scenarios, Mapping):
        raise ValueError(f"{path}: expected a mapping of scenarios")
    return {str(key): value for key, value in scenarios.items()}


def load_scenarios(path: str | Path = DEFAULT_SCENARIOS) -> Dict[str, BatchConfig]:
    """Charge tous les scénarios décrits dans le YAML ``path``."""

    scenarios = _read_scenarios(path)
    return {key: config_from_mapping(value or {}, name=key) for key, value in scenarios.items()}


def load_scenario(name: str, path: str | Path = DEFAULT_SCENARIOS) -> BatchConfig:
    """Construit et valide uniquement le scénario ``name``."""

    scenarios = _read_scenarios(path)
    if name not in scenarios:
        known = ", ".join(sorted(scenarios))
        raise KeyError(f"unknown scenario '{name}', known: {known}")
    return config_from_mapping(scenarios[name] or {}, name=name)


def with_overrides(
    config: BatchConfig,
    *,
    iterations: Optional[int] = None,
    seed: Optional[int] = None,
    threshold: Optional[float] = None,
    weighting: Optional[str] = None,
) -> BatchConfig:
    """Retourne une copie de ``config`` avec les surcharges CLI appliquées."""

    updated = config
    if iterations is not None:
        updated = replace(updated, iterations=iterations)
    if seed is not None:
        updated = replace(updated, seed=seed)
    if threshold is not None or weighting is not None:
        flag = replace(
            updated.flag,
            threshold=updated.flag.threshold if threshold is None else threshold,
            weighting=updated.flag.weighting if weighting is None else weighting,
        )
        updated = replace(updated, flag=flag)
    return updated.validate()


__all__ = [
    "BITS_PER_BYTE",
    "DEFAULT_BANDWIDTH_THRESHOLD",
    "DEFAULT_SCENARIOS",
    "BandwidthFlagConfig",
    "BatchConfig",
    "LinkConfig",
    "PayloadConfig",
    "SessionDurationConfig",
    "config_from_mapping",
    "load_scenario",
    "load_scenarios",
    "with_overrides",
]
