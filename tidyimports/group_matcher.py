# tidyimports/group_matcher.py
from __future__ import annotations

import logging
import re
from collections import OrderedDict
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .config import Config, GroupRule
from .model import Declaration

log = logging.getLogger(__name__)

CACHE_CAPACITY = 500
EVICTION_RATIO = 0.2


@dataclass(frozen=True)
class CacheStats:
    hits: int
    misses: int
    size: int
    capacity: int

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0


class GroupMatcher:
    """
    Map source modules to group names with the configured rules.

    Rules are tried in `order`; the first match wins, otherwise the default
    group applies. Lookups are memoized in a bounded LRU cache.
    """

    def __init__(self, config: Config, capacity: int = CACHE_CAPACITY,
                 logger: Optional[logging.Logger] = None) -> None:
        self.log = logger or log
        self.capacity = capacity
        self._cache: "OrderedDict[str, str]" = OrderedDict()
        self._hits = 0
        self._misses = 0
        self.update_rules(config)

    def update_rules(self, config: Config) -> None:
        """Replace the rules; the cache is dropped wholesale."""
        self.config = config
        self.default_group = config.default_group
        ordered = sorted((g for g in config.groups if g.pattern is not None), key=lambda g: g.order)
        self._rules: List[Tuple[GroupRule, re.Pattern]] = [(g, g.compile()) for g in ordered]
        self._priority = [re.compile(p) for p in config.priority_imports]
        self.clear_cache()

    # ----- matching -----
    def _match_uncached(self, source: str) -> str:
        for rule, pattern in self._rules:
            if pattern.search(source):
                return rule.name
        return self.default_group

    def match(self, source: str) -> str:
        cached = self._cache.get(source)
        if cached is not None:
            self._hits += 1
            self._cache.move_to_end(source)
            return cached
        self._misses += 1
        name = self._match_uncached(source)
        if len(self._cache) >= self.capacity:
            self._evict()
        self._cache[source] = name
        return name

    def _evict(self) -> None:
        count = max(1, int(self.capacity * EVICTION_RATIO))
        for _ in range(min(count, len(self._cache))):
            self._cache.popitem(last=False)
        self.log.debug("Group cache full; evicted %d entries", count)

    def is_priority(self, source: str) -> bool:
        return any(p.search(source) for p in self._priority)

    def assign(self, declaration: Declaration) -> Declaration:
        declaration.group_name = self.match(declaration.source)
        declaration.is_priority = self.is_priority(declaration.source)
        return declaration

    # ----- cache -----
    def clear_cache(self) -> None:
        self._cache.clear()
        self._hits = 0
        self._misses = 0

    def stats(self) -> CacheStats:
        return CacheStats(self._hits, self._misses, len(self._cache), self.capacity)
