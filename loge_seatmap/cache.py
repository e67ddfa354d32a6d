from __future__ import annotations

import logging
from typing import Callable, Generic, Hashable, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")


class ResultCache(Generic[T]):
    """
    Memoizes computed results per filter key for the life of the owner.

    Keys compare by value, so FilterKey("Day 1 - Friday", "Rodeo") and the
    plain tuple ("Day 1 - Friday", "Rodeo") share one entry.
    """

    def __init__(self) -> None:
        self._entries: dict[Hashable, T] = {}
        self.hits = 0
        self.misses = 0

    def get_or_compute(self, key: Hashable, compute: Callable[[], T]) -> T:
        if key in self._entries:
            self.hits += 1
            return self._entries[key]
        self.misses += 1
        logger.debug("cache miss for %r; computing", key)
        value = compute()
        self._entries[key] = value
        return value

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
