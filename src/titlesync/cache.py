"""Bounded LRU of the titles last observed in each document.

Comparing a fresh read against the cached pair tells which of heading or
frontmatter the user just edited.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 256


@dataclass(frozen=True)
class CachedTitles:
    """Raw heading and frontmatter title text; None when absent."""

    heading: str | None = None
    frontmatter: str | None = None

    def get(self, source: str) -> str | None:
        return self.heading if source == "heading" else self.frontmatter


class TitleCache:
    """Path → CachedTitles with least-recently-used eviction."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._entries: OrderedDict[str, CachedTitles] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def get(self, path: str) -> CachedTitles | None:
        entry = self._entries.get(path)
        if entry is not None:
            self._entries.move_to_end(path)
        return entry

    def set(self, path: str, titles: CachedTitles) -> None:
        self._entries[path] = titles
        self._entries.move_to_end(path)
        while len(self._entries) > self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted title cache entry: %s", evicted)

    def move(self, old_path: str, new_path: str) -> None:
        """Carry an entry over to a renamed file. No-op when nothing is cached."""
        entry = self._entries.pop(old_path, None)
        if entry is not None:
            self.set(new_path, entry)
