from __future__ import annotations
import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Hashable, Optional, Tuple

from expression import Expr

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 4096

# cached pass output, the guard notes raised while producing it and the
# number of nodes it took
Entry = Tuple[Expr, Tuple[str, ...], int]


@dataclass(frozen=True)
class CacheInfo:
    hits: int
    misses: int
    size: int
    capacity: int


class RewriteCache:
    """Bounded least-recently-used map from ``(config fingerprint, subtree)``
    to the simplified subtree.

    Safe to share between threads: lookups and inserts are serialized on one
    lock since an LRU hit reorders the table.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("cache capacity must be positive")
        self.capacity = capacity
        self._data: "OrderedDict[Hashable, Entry]" = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: Hashable) -> Optional[Entry]:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                self._misses += 1
                return None
            self._data.move_to_end(key)
            self._hits += 1
            return entry

    def put(self, key: Hashable, value: Entry) -> None:
        with self._lock:
            self._data[key] = value
            self._data.move_to_end(key)
            while len(self._data) > self.capacity:
                self._data.popitem(last=False)

    def info(self) -> CacheInfo:
        with self._lock:
            return CacheInfo(self._hits, self._misses, len(self._data), self.capacity)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
            self._hits = 0
            self._misses = 0
        logger.debug("rewrite cache cleared")

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._data


DEFAULT_CACHE = RewriteCache()
