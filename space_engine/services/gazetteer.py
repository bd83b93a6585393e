"""
Static gazetteer of well-known UK localities.

Gives instant, network-free coordinates for the most common searches.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from space_engine.integrations.base import Coordinates


@dataclass(frozen=True)
class GazetteerEntry:
    name: str
    coordinates: Coordinates


POPULAR_UK_CITIES: tuple[GazetteerEntry, ...] = (
    GazetteerEntry("London", Coordinates(51.5074, -0.1278)),
    GazetteerEntry("Manchester", Coordinates(53.4808, -2.2426)),
    GazetteerEntry("Birmingham", Coordinates(52.4862, -1.8904)),
    GazetteerEntry("Leeds", Coordinates(53.8008, -1.5491)),
    GazetteerEntry("Glasgow", Coordinates(55.8642, -4.2518)),
    GazetteerEntry("Sheffield", Coordinates(53.3811, -1.4701)),
    GazetteerEntry("Bradford", Coordinates(53.7960, -1.7594)),
    GazetteerEntry("Liverpool", Coordinates(53.4084, -2.9916)),
    GazetteerEntry("Edinburgh", Coordinates(55.9533, -3.1883)),
    GazetteerEntry("Bristol", Coordinates(51.4545, -2.5879)),
    GazetteerEntry("Cardiff", Coordinates(51.4816, -3.1791)),
    GazetteerEntry("Leicester", Coordinates(52.6369, -1.1398)),
    GazetteerEntry("Wakefield", Coordinates(53.6833, -1.5000)),
    GazetteerEntry("Coventry", Coordinates(52.4068, -1.5197)),
    GazetteerEntry("Nottingham", Coordinates(52.9548, -1.1581)),
    GazetteerEntry("Preston", Coordinates(53.7632, -2.7031)),
    GazetteerEntry("Newcastle", Coordinates(54.9783, -1.6178)),
    GazetteerEntry("Brighton", Coordinates(50.8225, -0.1372)),
    GazetteerEntry("Aberdeen", Coordinates(57.1497, -2.0943)),
    GazetteerEntry("Plymouth", Coordinates(50.3755, -4.1427)),
)


class Gazetteer:
    """Case-insensitive exact-name lookup over a fixed set of places."""

    def __init__(self, entries: Iterable[GazetteerEntry] = POPULAR_UK_CITIES):
        self._entries = tuple(entries)
        self._index = {entry.name.casefold(): entry for entry in self._entries}

    @property
    def entries(self) -> tuple[GazetteerEntry, ...]:
        return self._entries

    def lookup(self, name: str) -> Optional[GazetteerEntry]:
        """Exact match after trimming and case folding; no partial matches."""
        return self._index.get(name.strip().casefold())

    def __len__(self) -> int:
        return len(self._entries)
