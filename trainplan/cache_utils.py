from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Hashable


@dataclass
class CacheCounter:
    hits: int = 0
    misses: int = 0


class MemoTable:
    """Process-local key/value memo with hit/miss accounting.

    Entries never expire; a pace table for a given foundation value is
    immutable, so the only invalidation is an explicit ``discard``/``clear``.
    """

    def __init__(self) -> None:
        self._store: dict[Hashable, object] = {}
        self.counter = CacheCounter()

    def get_or_compute(self, key: Hashable, compute: Callable[[], object]):
        if key in self._store:
            self.counter.hits += 1
            return self._store[key]
        self.counter.misses += 1
        value = compute()
        self._store[key] = value
        return value

    def discard(self, key: Hashable) -> None:
        self._store.pop(key, None)

    def clear(self) -> None:
        self._store.clear()
        self.counter = CacheCounter()

    def __contains__(self, key: Hashable) -> bool:
        return key in self._store

    def __len__(self) -> int:
        return len(self._store)
