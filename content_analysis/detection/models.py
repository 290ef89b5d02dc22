from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Union

from content_analysis.core.errors import OffsetRangeError
from content_analysis.detection.segmentation import word_ranges
from content_analysis.engine.base import CodeObservation, TextObservation
from content_analysis.geometry.quad import GeometryQuad

logger = logging.getLogger(__name__)

DEFAULT_MIN_TEXT_CONFIDENCE = 0.5
QR_SYMBOLOGY = "qr"


@dataclass(frozen=True)
class WordBox:
    start: int  # code-point offset, inclusive
    end: int    # code-point offset, exclusive
    quad: GeometryQuad

    def slice(self, text: str) -> str:
        return text[self.start:self.end]


@dataclass(frozen=True)
class TextContent:
    text: str
    words: tuple[WordBox, ...] = ()

    def __post_init__(self) -> None:
        # Accept any iterable of words but always store a tuple.
        object.__setattr__(self, "words", tuple(self.words))
        length = len(self.text)
        for word in self.words:
            if not 0 <= word.start <= word.end <= length:
                raise OffsetRangeError(word.start, word.end, length)


@dataclass(frozen=True)
class CodeContent:
    payload: str


Content = Union[TextContent, CodeContent]


@dataclass(frozen=True)
class Detection:
    content: Content
    quad: GeometryQuad = field(default_factory=GeometryQuad)

    @classmethod
    def text(cls, text: str, words=(), quad: GeometryQuad | None = None) -> Detection:
        return cls(TextContent(text, tuple(words)), quad or GeometryQuad())

    @classmethod
    def code(cls, payload: str, quad: GeometryQuad | None = None) -> Detection:
        return cls(CodeContent(payload), quad or GeometryQuad())

    @property
    def kind(self) -> str:
        return "code" if isinstance(self.content, CodeContent) else "text"


def detection_from_observation(
    observation: object,
    *,
    min_text_confidence: float = DEFAULT_MIN_TEXT_CONFIDENCE,
) -> Detection | None:
    """Map one engine observation to a Detection, or None if it should be discarded."""
    if isinstance(observation, CodeObservation):
        if observation.symbology == QR_SYMBOLOGY and observation.payload:
            return Detection(CodeContent(observation.payload), observation.quad)
        return None

    if isinstance(observation, TextObservation):
        candidates = observation.top_candidates(1)
        if not candidates or candidates[0].confidence < min_text_confidence:
            return None
        candidate = candidates[0]
        words: list[WordBox] = []
        for start, end in word_ranges(candidate.string):
            try:
                quad = candidate.bounding_box(start, end)
            except ValueError:
                logger.debug(
                    "word_geometry_unavailable",
                    extra={"start": start, "end": end},
                )
                continue
            words.append(WordBox(start, end, quad))
        return Detection(TextContent(candidate.string, tuple(words)), observation.quad)

    return None
