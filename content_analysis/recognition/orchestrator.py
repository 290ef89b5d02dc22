"""Cache-or-compute coordination for recognized image content.

    lookup(message_id, image_supplier)
        -> cache hit:                  cached detections
        -> miss, supplier gives None:  [] (nothing cached, next call retries)
        -> miss, image:                recognize, cache (even when empty), return
"""
from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Union

from content_analysis.cache.keys import MessageId, cache_key
from content_analysis.cache.recognition_cache import RecognitionCache
from content_analysis.detection.models import DEFAULT_MIN_TEXT_CONFIDENCE, Detection
from content_analysis.engine.base import RecognitionEngine
from content_analysis.recognition.recognizer import recognize_content

logger = logging.getLogger(__name__)

ImageSupplier = Callable[[], Union[Any, Awaitable[Any]]]


@dataclass
class _Flight:
    task: asyncio.Task[list[Detection]]
    waiters: int = 0


class RecognitionOrchestrator:
    def __init__(
        self,
        cache: RecognitionCache,
        engine: RecognitionEngine,
        *,
        min_text_confidence: float = DEFAULT_MIN_TEXT_CONFIDENCE,
        single_flight: bool = False,
    ) -> None:
        self._cache = cache
        self._engine = engine
        self._min_text_confidence = min_text_confidence
        # Concurrent misses for one key share a task only when single_flight is on;
        # otherwise each computes and the last cache write wins.
        self._single_flight = single_flight
        self._in_flight: dict[bytes, _Flight] = {}

    # ------------------------------------------------------------------ #
    #  Public entry points                                                #
    # ------------------------------------------------------------------ #

    async def lookup(self, message_id: MessageId, image_supplier: ImageSupplier) -> list[Detection]:
        cached = await self._cache.get(message_id)
        if cached is not None:
            logger.debug(
                "recognition_cache_hit",
                extra={"namespace": message_id.namespace, "message_id": message_id.id},
            )
            return cached

        if not self._single_flight:
            return await self._compute(message_id, image_supplier)

        key = cache_key(message_id)
        flight = self._in_flight.get(key)
        if flight is None:
            flight = _Flight(asyncio.ensure_future(self._compute(message_id, image_supplier)))
            self._in_flight[key] = flight
            flight.task.add_done_callback(lambda _done, k=key, f=flight: self._forget(k, f))
        else:
            logger.debug(
                "recognition_joined_in_flight",
                extra={"namespace": message_id.namespace, "message_id": message_id.id},
            )

        # Shielded so one caller giving up does not cancel the others; the last
        # waiter to give up cancels the computation before it reaches the cache.
        flight.waiters += 1
        try:
            return list(await asyncio.shield(flight.task))
        except asyncio.CancelledError:
            if flight.waiters == 1 and not flight.task.done():
                self._forget(key, flight)
                flight.task.cancel()
                logger.info(
                    "recognition_abandoned",
                    extra={"namespace": message_id.namespace, "message_id": message_id.id},
                )
            raise
        finally:
            flight.waiters -= 1

    async def cached(self, message_id: MessageId) -> list[Detection] | None:
        return await self._cache.get(message_id)

    async def clear(self, message_id: MessageId) -> None:
        await self._cache.put(message_id, None)

    # ------------------------------------------------------------------ #
    #  Miss path                                                          #
    # ------------------------------------------------------------------ #

    async def _compute(self, message_id: MessageId, image_supplier: ImageSupplier) -> list[Detection]:
        image = image_supplier()
        if inspect.isawaitable(image):
            image = await image
        if image is None:
            logger.info(
                "recognition_image_unavailable",
                extra={"namespace": message_id.namespace, "message_id": message_id.id},
            )
            return []

        t0 = time.monotonic()
        results = await recognize_content(
            image,
            self._engine,
            min_text_confidence=self._min_text_confidence,
        )
        # Only reached when recognition finished; cancellation above skips the write.
        await self._cache.put(message_id, results)

        logger.info(
            "recognition_complete",
            extra={
                "namespace": message_id.namespace,
                "message_id": message_id.id,
                "count": len(results),
                "duration_ms": int((time.monotonic() - t0) * 1000),
            },
        )
        return results

    def _forget(self, key: bytes, flight: _Flight) -> None:
        if self._in_flight.get(key) is flight:
            del self._in_flight[key]
