from __future__ import annotations

from content_analysis.cache.recognition_cache import RecognitionCache
from content_analysis.core.config import settings
from content_analysis.engine.base import RecognitionEngine
from content_analysis.engine.factory import get_recognition_engine
from content_analysis.recognition.orchestrator import RecognitionOrchestrator
from content_analysis.storage.base import CollectionSpec, ItemCacheStore
from content_analysis.storage.memory_store import MemoryItemCacheStore


def get_item_cache_store() -> ItemCacheStore:
    """Return the configured item cache backend.

    CACHE_BACKEND options:
        sql    — SqlItemCacheStore over DATABASE_URL
        memory — MemoryItemCacheStore (process lifetime only)
    """
    backend = settings.cache_backend.lower().strip()

    if backend == "memory":
        return MemoryItemCacheStore()

    if backend == "sql":
        from content_analysis.db.session import SessionLocal
        from content_analysis.storage.sql_store import SqlItemCacheStore
        return SqlItemCacheStore(SessionLocal)

    raise ValueError(f"Unknown CACHE_BACKEND={settings.cache_backend!r}")


def build_orchestrator(
    store: ItemCacheStore | None = None,
    engine: RecognitionEngine | None = None,
) -> RecognitionOrchestrator:
    cache = RecognitionCache(
        store or get_item_cache_store(),
        collection_id=settings.cache_collection_id,
        collection_spec=CollectionSpec(settings.cache_low_water, settings.cache_high_water),
        legacy_decode=settings.cache_legacy_decode,
    )
    return RecognitionOrchestrator(
        cache,
        engine or get_recognition_engine(),
        min_text_confidence=settings.min_text_confidence,
        single_flight=settings.dedupe_concurrent_lookups,
    )
