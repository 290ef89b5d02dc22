from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Integer, LargeBinary, UniqueConstraint, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class ItemCacheEntry(Base):
    """One cached artifact, addressed by ``(collection_id, key)``.

    ``touched_ns`` is refreshed on every write, so ordering by it is ordering by
    recency; the eviction pass drops the lowest values first.
    """
    __tablename__ = "item_cache_entries"
    __table_args__ = (UniqueConstraint("collection_id", "key", name="uq_item_cache_collection_key"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collection_id: Mapped[int] = mapped_column(Integer, index=True)
    key: Mapped[bytes] = mapped_column(LargeBinary(64))
    value: Mapped[bytes] = mapped_column(LargeBinary)
    touched_ns: Mapped[int] = mapped_column(BigInteger, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
