from __future__ import annotations

import logging
import time

from sqlalchemy import delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from content_analysis.db.models import ItemCacheEntry
from content_analysis.storage.base import CollectionSpec, ItemCacheStore

logger = logging.getLogger(__name__)

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def upsert_stmt(dialect_name: str, collection_id: int, key: bytes, value: bytes, touched_ns: int):
    """INSERT ... ON CONFLICT (collection_id, key) DO UPDATE for *dialect_name*.

    A single statement, so concurrent writers of one key never race on the
    unique constraint.
    """
    try:
        insert = _INSERT_BY_DIALECT[dialect_name]
    except KeyError:
        raise ValueError(f"Unsupported database dialect for the item cache: {dialect_name!r}") from None

    stmt = insert(ItemCacheEntry).values(
        collection_id=collection_id,
        key=key,
        value=value,
        touched_ns=touched_ns,
    )
    return stmt.on_conflict_do_update(
        index_elements=[ItemCacheEntry.collection_id, ItemCacheEntry.key],
        set_={
            "value": stmt.excluded.value,
            "touched_ns": stmt.excluded.touched_ns,
            "updated_at": func.now(),
        },
    )


class SqlItemCacheStore(ItemCacheStore):
    """ItemCacheStore backed by the ``item_cache_entries`` table (SQLAlchemy async)."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._last_touch = 0

    async def get(self, collection_id: int, key: bytes) -> bytes | None:
        stmt = select(ItemCacheEntry.value).where(
            ItemCacheEntry.collection_id == collection_id,
            ItemCacheEntry.key == key,
        )
        async with self._session_factory() as session:
            return (await session.execute(stmt)).scalar_one_or_none()

    async def put(self, collection_id: int, key: bytes, value: bytes, spec: CollectionSpec) -> None:
        async with self._session_factory() as session, session.begin():
            dialect_name = session.get_bind().dialect.name
            await session.execute(upsert_stmt(dialect_name, collection_id, key, value, self._touch()))
            await self._evict(session, collection_id, spec)

    async def delete(self, collection_id: int, key: bytes) -> None:
        stmt = delete(ItemCacheEntry).where(
            ItemCacheEntry.collection_id == collection_id,
            ItemCacheEntry.key == key,
        )
        async with self._session_factory() as session, session.begin():
            await session.execute(stmt)

    # ------------------------------------------------------------------ #
    #  Helpers                                                            #
    # ------------------------------------------------------------------ #

    def _touch(self) -> int:
        # Strictly increasing within this process, even when the clock is coarse.
        self._last_touch = max(time.time_ns(), self._last_touch + 1)
        return self._last_touch

    async def _evict(self, session: AsyncSession, collection_id: int, spec: CollectionSpec) -> None:
        count_stmt = (
            select(func.count())
            .select_from(ItemCacheEntry)
            .where(ItemCacheEntry.collection_id == collection_id)
        )
        count = (await session.execute(count_stmt)).scalar_one()
        if count <= spec.high_water_item_count:
            return

        excess = count - spec.low_water_item_count
        oldest_stmt = (
            select(ItemCacheEntry.id)
            .where(ItemCacheEntry.collection_id == collection_id)
            .order_by(ItemCacheEntry.touched_ns, ItemCacheEntry.id)
            .limit(excess)
        )
        ids = (await session.execute(oldest_stmt)).scalars().all()
        await session.execute(delete(ItemCacheEntry).where(ItemCacheEntry.id.in_(ids)))
        logger.info(
            "item_cache_evicted",
            extra={"collection_id": collection_id, "evicted": len(ids), "remaining": count - len(ids)},
        )
