from __future__ import annotations

import asyncio
from collections import OrderedDict

from content_analysis.storage.base import CollectionSpec, ItemCacheStore


class MemoryItemCacheStore(ItemCacheStore):
    """In-process ItemCacheStore with the same recency eviction as the SQL store."""

    def __init__(self) -> None:
        self._collections: dict[int, OrderedDict[bytes, bytes]] = {}
        self._lock = asyncio.Lock()

    async def get(self, collection_id: int, key: bytes) -> bytes | None:
        async with self._lock:
            return self._collections.get(collection_id, {}).get(key)

    async def put(self, collection_id: int, key: bytes, value: bytes, spec: CollectionSpec) -> None:
        async with self._lock:
            entries = self._collections.setdefault(collection_id, OrderedDict())
            entries.pop(key, None)
            entries[key] = value
            if len(entries) > spec.high_water_item_count:
                while len(entries) > spec.low_water_item_count:
                    entries.popitem(last=False)

    async def delete(self, collection_id: int, key: bytes) -> None:
        async with self._lock:
            self._collections.get(collection_id, {}).pop(key, None)
