"""
Domain model for WhatsOnTV

Normalized, API-independent representation of one scheduled episode.
"""
from __future__ import annotations

from dataclasses import dataclass, field


UNKNOWN_SHOW = "Unknown Show"
UNKNOWN_TYPE = "unknown"
UNKNOWN_NETWORK = "Unknown Network"


@dataclass(frozen=True, slots=True)
class Show:
    """One scheduled episode, normalized from either upstream schedule shape."""
    id: int
    name: str
    type: str
    network: str
    language: str | None = None
    genres: tuple[str, ...] = field(default_factory=tuple)
    summary: str | None = None
    airtime: str | None = None
    season: int = 0
    number: int = 0

    def has_airtime(self) -> bool:
        return bool(self.airtime)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "language": self.language,
            "genres": list(self.genres),
            "network": self.network,
            "summary": self.summary,
            "airtime": self.airtime,
            "season": self.season,
            "number": self.number,
        }


NetworkGroups = dict[str, list[Show]]


__all__ = [
    "Show",
    "NetworkGroups",
    "UNKNOWN_SHOW",
    "UNKNOWN_TYPE",
    "UNKNOWN_NETWORK",
]
