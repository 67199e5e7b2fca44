"""In-memory memoisation tables for geocoding and routing results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

from ..models.domain import Coordinates, RouteSummary

K = TypeVar("K")
V = TypeVar("V")


class ResultCache(Generic[K, V]):
    """Unbounded key/value table that lives as long as its owner.

    Entries are never evicted. All access happens on one event loop, so a
    single get or put cannot interleave with another task.
    """

    def __init__(self) -> None:
        self._entries: dict[K, V] = {}

    def get(self, key: K) -> Optional[V]:
        return self._entries.get(key)

    def put(self, key: K, value: V) -> None:
        self._entries[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class SessionCache:
    geocodes: ResultCache[str, Coordinates] = field(default_factory=ResultCache)
    routes: ResultCache[str, RouteSummary] = field(default_factory=ResultCache)


def route_cache_key(from_lat: float, from_lon: float, to_lat: float, to_lon: float) -> str:
    """Key at 4-decimal (~11 m) resolution; requests within it share one entry."""
    return f"{from_lat:.4f},{from_lon:.4f}-{to_lat:.4f},{to_lon:.4f}"
