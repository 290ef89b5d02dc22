from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CollectionSpec:
    """Capacity policy for one collection.

    Once a write pushes the collection above ``high_water_item_count`` entries,
    the oldest entries are evicted until ``low_water_item_count`` remain.
    """
    low_water_item_count: int
    high_water_item_count: int

    def __post_init__(self) -> None:
        if not 0 <= self.low_water_item_count <= self.high_water_item_count:
            raise ValueError(
                f"invalid collection spec low={self.low_water_item_count} high={self.high_water_item_count}"
            )


class ItemCacheStore:
    """Transactional key-value store for opaque blobs grouped into collections.

    Every call runs as its own transaction: it either fully applies or not at all.
    """

    async def get(self, collection_id: int, key: bytes) -> bytes | None:
        raise NotImplementedError

    async def put(self, collection_id: int, key: bytes, value: bytes, spec: CollectionSpec) -> None:
        raise NotImplementedError

    async def delete(self, collection_id: int, key: bytes) -> None:
        raise NotImplementedError
