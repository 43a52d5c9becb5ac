from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Pattern, Protocol, Sequence, Tuple


@dataclass(frozen=True, slots=True)
class GeoHub:
    """A named location with the title keywords that point at it."""

    name: str
    lat: float
    lon: float
    keywords: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class GeoMatch:
    hub: GeoHub
    hits: int


class GeoLookup(Protocol):
    def lookup(self, title: str) -> Sequence[GeoMatch]:
        ...


class GeoHubIndex:
    """Keyword index over a fixed list of hubs.

    ``lookup`` returns matches ordered by number of keyword hits, ties kept in
    index order. The hub name itself always counts as a keyword.
    """

    def __init__(self, hubs: Iterable[GeoHub]) -> None:
        self._entries: List[Tuple[GeoHub, List[Pattern[str]]]] = []
        for hub in hubs:
            terms = {hub.name.lower(), *(k.lower() for k in hub.keywords)}
            patterns = [re.compile(rf"\b{re.escape(t)}\b") for t in sorted(terms) if t]
            self._entries.append((hub, patterns))

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, title: str) -> List[GeoMatch]:
        lower = title.lower()
        matches = []
        for hub, patterns in self._entries:
            hits = sum(1 for p in patterns if p.search(lower))
            if hits:
                matches.append(GeoMatch(hub=hub, hits=hits))
        matches.sort(key=lambda m: m.hits, reverse=True)
        return matches
