"""Bounded transposition cache with least-recently-used eviction."""

from __future__ import annotations

import enum
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any

from strangle.board import Direction


class Bound(enum.Enum):
    """How a stored value relates to the true minimax value."""

    EXACT = "exact"
    LOWER = "lower"
    UPPER = "upper"


@dataclass(frozen=True)
class CacheEntry:
    depth: int
    value: float
    bound: Bound
    best_move: Direction | None = None


class TranspositionCache:
    """Canonical board key to search result, holding at most *max_entries*.

    A size of 0 disables the cache: lookups miss and stores are dropped.
    """

    def __init__(self, max_entries: int) -> None:
        if max_entries < 0:
            raise ValueError("max_entries must not be negative.")
        self.max_entries = max_entries
        self._data: OrderedDict[Any, CacheEntry] = OrderedDict()
        self.hits = 0
        self.misses = 0
        self.stores = 0

    def __len__(self) -> int:
        return len(self._data)

    def get(self, key: Any) -> CacheEntry | None:
        entry = self._data.get(key)
        if entry is None:
            self.misses += 1
            return None
        self.hits += 1
        self._data.move_to_end(key)
        return entry

    def put(self, key: Any, entry: CacheEntry) -> None:
        if self.max_entries == 0:
            return
        existing = self._data.get(key)
        if existing is not None:
            # Keep the deeper result.
            if existing.depth > entry.depth:
                self._data.move_to_end(key)
                return
        self._data[key] = entry
        self._data.move_to_end(key)
        self.stores += 1
        if len(self._data) > self.max_entries:
            self._data.popitem(last=False)

    def stats(self) -> dict[str, Any]:
        total = self.hits + self.misses
        return {
            "size": len(self._data),
            "max_entries": self.max_entries,
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": (self.hits / total) if total else 0.0,
            "stores": self.stores,
        }
