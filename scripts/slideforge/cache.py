"""Bounded in-memory cache for fetched and re-encoded image assets.

The cache is an explicit object handed to whoever needs it; there is no
module-level instance. Eviction is a pluggable policy so the default
insertion-order behaviour can be swapped for LRU.
"""

from __future__ import annotations

import hashlib
import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 100


def cache_key(url: str) -> str:
    """Stable key for an asset URL (sha256 hex digest)."""
    return hashlib.sha256(url.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class CachedAsset:
    data: bytes
    content_type: str = "application/octet-stream"


class EvictionPolicy:
    """Decides how reads reorder entries. The first entry is evicted first."""

    name = "base"

    def on_read(self, entries: "OrderedDict[str, CachedAsset]", key: str) -> None:
        return None

    def on_write(self, entries: "OrderedDict[str, CachedAsset]", key: str) -> None:
        return None


class InsertionOrderEviction(EvictionPolicy):
    """Evict the oldest-inserted entry regardless of how often it is read."""

    name = "insertion-order"


class LRUEviction(EvictionPolicy):
    """Evict the least recently used entry."""

    name = "lru"

    def on_read(self, entries: "OrderedDict[str, CachedAsset]", key: str) -> None:
        entries.move_to_end(key)

    def on_write(self, entries: "OrderedDict[str, CachedAsset]", key: str) -> None:
        entries.move_to_end(key)


class AssetCache:
    """Key -> ``CachedAsset`` map holding at most ``max_entries`` items."""

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES, eviction: Optional[EvictionPolicy] = None):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self.eviction = eviction or InsertionOrderEviction()
        self._entries: "OrderedDict[str, CachedAsset]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def keys(self) -> list[str]:
        return list(self._entries)

    def get(self, key: str) -> Optional[CachedAsset]:
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None
        self.hits += 1
        self.eviction.on_read(self._entries, key)
        return entry

    def put(self, key: str, asset: CachedAsset) -> None:
        if key in self._entries:
            self._entries[key] = asset
            self.eviction.on_write(self._entries, key)
            return

        while len(self._entries) >= self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Asset cache full (%d); evicted %s", self.max_entries, evicted[:12])
        self._entries[key] = asset

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0
