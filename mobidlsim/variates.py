"""Tirages aléatoires (exponentielle, Pareto) par inversion de la CDF.

Les fonctions ``sample_*`` sont pures : elles reçoivent le tirage uniforme
``u`` et ne touchent à aucun générateur. Les fonctions ``draw_*`` acceptent
n'importe quelle source exposant ``random()`` (``numpy.random.Generator`` ou
``random.Random``) et rejettent les tirages dégénérés.
"""

from __future__ import annotations

import math
import numbers

from .model import LinkState

DEFAULT_MAX_RETRIES = 16


class DegenerateSampleError(RuntimeError):
    """Erreur levée quand la source uniforme ne produit que des bornes."""


def _validate_positive_real(name: str, value: object) -> float:
    """Return ``value`` as a positive real number or raise a clear error."""

    if isinstance(value, bool):
        raise TypeError(f"{name} must be a real number, not bool")
    if not isinstance(value, numbers.Real):
        raise TypeError(f"{name} must be a real number")
    if not math.isfinite(value) or value <= 0:
        raise ValueError(f"{name} must be a positive, finite number")
    return float(value)


def sample_exponential(u: float, mean: float) -> float:
    """Retourne ``-mean * ln(1 - u)`` pour ``u`` dans ``[0, 1)``.

    ``u >= 1`` correspond à une durée non bornée : on retourne ``math.inf``
    et c'est à l'appelant de la borner.
    """

    mean = _validate_positive_real("mean", mean)
    if u >= 1.0:
        return math.inf
    return -mean * math.log1p(-u)


def sample_pareto(u: float, alpha: float, xm: float) -> float:
    """Retourne ``xm / u ** (1 / alpha)`` pour ``u`` dans ``(0, 1]``."""

    alpha = _validate_positive_real("alpha", alpha)
    xm = _validate_positive_real("xm", xm)
    if u <= 0.0:
        return math.inf
    return xm / math.pow(u, 1.0 / alpha)


def choose_initial_state(mean_disconnect: float, mean_connect: float, u: float) -> LinkState:
    """Choisit l'état initial selon la probabilité stationnaire de déconnexion.

    Pour un processus de renouvellement alterné à deux états, la fraction de
    temps passée en Disconnect vaut ``T0 / (T0 + T1)``.
    """

    mean_disconnect = _validate_positive_real("mean_disconnect", mean_disconnect)
    mean_connect = _validate_positive_real("mean_connect", mean_connect)
    p_disconnect = mean_disconnect / (mean_disconnect + mean_connect)
    if u < p_disconnect:
        return LinkState.DISCONNECT
    return LinkState.CONNECT


def draw_uniform(rng, max_retries: int = DEFAULT_MAX_RETRIES) -> float:
    """Tire ``u`` strictement dans ``(0, 1)``.

    Un tirage égal à 0 (durée nulle, taille infinie) ou à 1 (durée infinie)
    est retiré au plus ``max_retries`` fois.
    """

    draw = getattr(rng, "random", None)
    if draw is None:
        raise TypeError("rng must expose a random() method")
    for _ in range(max(1, max_retries)):
        u = float(draw())
        if 0.0 < u < 1.0:
            return u
    raise DegenerateSampleError(
        f"uniform source returned only degenerate values after {max_retries} draws"
    )


def draw_exponential(rng, mean: float) -> float:
    return sample_exponential(draw_uniform(rng), mean)


def draw_pareto(rng, alpha: float, xm: float) -> float:
    return sample_pareto(draw_uniform(rng), alpha, xm)


def draw_uniform_range(rng, upper: float) -> float:
    """Tire une valeur uniforme sur ``(0, upper)``."""

    upper = _validate_positive_real("upper", upper)
    return draw_uniform(rng) * upper


__all__ = [
    "DEFAULT_MAX_RETRIES",
    "DegenerateSampleError",
    "sample_exponential",
    "sample_pareto",
    "choose_initial_state",
    "draw_uniform",
    "draw_exponential",
    "draw_pareto",
    "draw_uniform_range",
]
