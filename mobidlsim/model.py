"""Types de base partagés : états de connectivité et intervalles."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


_STATE_ALIASES = {
    "connect": "connect",
    "connected": "connect",
    "on": "connect",
    "disconnect": "disconnect",
    "disconnected": "disconnect",
    "off": "disconnect",
}


class LinkState(Enum):
    """État de connectivité du terminal."""

    CONNECT = "connect"
    DISCONNECT = "disconnect"

    def other(self) -> "LinkState":
        if self is LinkState.CONNECT:
            return LinkState.DISCONNECT
        return LinkState.CONNECT

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, value: "str | LinkState") -> "LinkState":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        normalized = _STATE_ALIASES.get(key)
        if normalized is None:
            supported = ", ".join(sorted(_STATE_ALIASES))
            raise ValueError(f"unknown link state '{value}', expected one of: {supported}")
        return cls(normalized)


@dataclass(frozen=True)
class Interval:
    """Période passée dans un état, durée en secondes."""

    state: LinkState
    duration: float


__all__ = ["LinkState", "Interval"]
