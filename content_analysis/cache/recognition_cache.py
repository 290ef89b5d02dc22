from __future__ import annotations

import logging

from content_analysis.cache.keys import CACHED_IMAGE_RECOGNIZED_CONTENT, MessageId, cache_key
from content_analysis.core.errors import CacheDecodeError
from content_analysis.detection.codec import decode_detections, encode_detections
from content_analysis.detection.models import Detection
from content_analysis.storage.base import CollectionSpec, ItemCacheStore

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION_SPEC = CollectionSpec(low_water_item_count=50, high_water_item_count=100)


class RecognitionCache:
    """Durable map from a message id to the detections recognized in its image."""

    def __init__(
        self,
        store: ItemCacheStore,
        *,
        collection_id: int = CACHED_IMAGE_RECOGNIZED_CONTENT,
        collection_spec: CollectionSpec = DEFAULT_COLLECTION_SPEC,
        legacy_decode: bool = False,
    ) -> None:
        self._store = store
        self._collection_id = collection_id
        self._collection_spec = collection_spec
        self._legacy_decode = legacy_decode

    async def get(self, message_id: MessageId) -> list[Detection] | None:
        """Return cached detections, or None when absent or undecodable."""
        data = await self._store.get(self._collection_id, cache_key(message_id))
        if data is None:
            return None
        try:
            return decode_detections(data, legacy=self._legacy_decode)
        except CacheDecodeError as exc:
            logger.warning(
                "recognition_cache_decode_failed",
                extra={"namespace": message_id.namespace, "message_id": message_id.id, "error": str(exc)},
            )
            return None

    async def put(self, message_id: MessageId, results: list[Detection] | None) -> None:
        """Store *results* for *message_id*; ``None`` removes the entry."""
        key = cache_key(message_id)
        if results is None:
            await self._store.delete(self._collection_id, key)
            logger.info(
                "recognition_cache_cleared",
                extra={"namespace": message_id.namespace, "message_id": message_id.id},
            )
            return

        await self._store.put(self._collection_id, key, encode_detections(results), self._collection_spec)
        logger.info(
            "recognition_cache_stored",
            extra={"namespace": message_id.namespace, "message_id": message_id.id, "count": len(results)},
        )
