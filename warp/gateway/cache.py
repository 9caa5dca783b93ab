"""
Dialog Cache - Memoizes NPC dialog by caller-supplied key.

The cache:
- Is process-local and in memory (nothing survives a restart)
- Is bounded by capacity
- Evicts the oldest-INSERTED entry (FIFO, not LRU: reads do not
  protect an entry from eviction)
- Has no expiry

Reads take no lock. Insertion and eviction share one lock over the whole
cache, since strict FIFO needs a single insertion sequence. The critical
section is one dict insert plus at most one popitem.
"""

from __future__ import annotations
from collections import OrderedDict
import threading
from typing import Optional


class DialogCache:
    """
    Bounded FIFO cache of generated dialog.

    Usage:
        cache = DialogCache(capacity=100)

        dialog = cache.get(key)
        if dialog is not None:
            return dialog

        dialog = generate(prompt)
        cache.put(key, dialog)
    """

    def __init__(self, capacity: int = 100):
        if capacity < 1:
            raise ValueError("Cache capacity must be >= 1")
        self.capacity = capacity
        self._entries: OrderedDict[str, str] = OrderedDict()
        self._insert_lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        """
        Get cached dialog for key, or None. Does not affect eviction order.
        """
        return self._entries.get(key)

    def put(self, key: str, value: str) -> list[str]:
        """
        Cache dialog under key.

        Overwriting an existing key keeps its original insertion position.

        Returns:
            Keys evicted to stay within capacity
        """
        evicted = []
        with self._insert_lock:
            self._entries[key] = value
            while len(self._entries) > self.capacity:
                oldest, _ = self._entries.popitem(last=False)
                evicted.append(oldest)
        return evicted

    def clear(self):
        """
        Clear entire cache.
        """
        with self._insert_lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
