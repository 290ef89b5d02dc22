from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import Any, TypeVar

from content_analysis.detection.models import DEFAULT_MIN_TEXT_CONFIDENCE, Detection, detection_from_observation
from content_analysis.engine.base import RecognitionEngine

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _run_pass(name: str, pass_: Awaitable[list[T] | None]) -> list[T]:
    """Await one detection pass; a failure empties this pass only."""
    try:
        return list(await pass_ or [])
    except Exception as exc:
        logger.warning("recognition_subtask_failed", extra={"subtask": name, "error": repr(exc)})
        return []


async def recognize_content(
    image: Any,
    engine: RecognitionEngine,
    *,
    min_text_confidence: float = DEFAULT_MIN_TEXT_CONFIDENCE,
) -> list[Detection]:
    """Run code and text detection concurrently and combine them, codes first.

    Both passes are always awaited before returning. Cancelling the caller
    cancels both passes.
    """
    code_observations, text_observations = await asyncio.gather(
        _run_pass("codes", engine.detect_codes(image)),
        _run_pass("text", engine.detect_text(image)),
    )

    results: list[Detection] = []
    for observation in [*code_observations, *text_observations]:
        detection = detection_from_observation(observation, min_text_confidence=min_text_confidence)
        if detection is not None:
            results.append(detection)

    logger.info(
        "recognition_passes_joined",
        extra={
            "code_observations": len(code_observations),
            "text_observations": len(text_observations),
            "detections": len(results),
        },
    )
    return results
