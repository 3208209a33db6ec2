"""Gestion centralisée des graines aléatoires."""

from __future__ import annotations

import hashlib
from typing import Optional

import numpy as np


def spawn_rng(seed: Optional[int], stream_name: str) -> np.random.Generator:
    """Crée un flux RNG reproductible indépendant du flux principal.

    Le ``stream_name`` est haché puis combiné à ``seed`` pour garantir
    une séparation déterministe des streams (un flux par scénario).
    Sans graine, le générateur est initialisé depuis l'entropie du système.
    """
    if seed is None:
        return np.random.default_rng()
    stream_hash = hashlib.sha256(stream_name.encode("utf-8")).digest()
    stream_offset = int.from_bytes(stream_hash[:8], byteorder="big", signed=False)
    mixed_seed = (int(seed) + stream_offset) % (2**63 - 1)
    return np.random.default_rng(mixed_seed)
