from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from content_analysis.core.errors import RangeGeometryError
from content_analysis.geometry.quad import GeometryQuad, Point


def _lerp(a: Point, b: Point, t: float) -> Point:
    return Point(a.x + (b.x - a.x) * t, a.y + (b.y - a.y) * t)


@dataclass(frozen=True)
class CodeObservation:
    payload: str | None
    quad: GeometryQuad
    symbology: str = "qr"


@dataclass(frozen=True)
class TextCandidate:
    string: str
    confidence: float  # 0.0 to 1.0
    # Engines that report word geometry fill word_quads; the rest only know the line.
    line_quad: GeometryQuad | None = None
    word_quads: dict[tuple[int, int], GeometryQuad] = field(default_factory=dict)

    def bounding_box(self, start: int, end: int) -> GeometryQuad:
        """Locate the code-point range ``[start, end)`` of this candidate."""
        quad = self.word_quads.get((start, end))
        if quad is not None:
            return quad

        length = len(self.string)
        if not 0 <= start < end <= length:
            raise RangeGeometryError(f"range [{start}, {end}) outside candidate of length {length}")
        if self.line_quad is None:
            raise RangeGeometryError(f"no geometry for range [{start}, {end})")

        # Spread the line evenly over its characters.
        t0, t1 = start / length, end / length
        line = self.line_quad
        return GeometryQuad(
            top_left=_lerp(line.top_left, line.top_right, t0),
            top_right=_lerp(line.top_left, line.top_right, t1),
            bottom_left=_lerp(line.bottom_left, line.bottom_right, t0),
            bottom_right=_lerp(line.bottom_left, line.bottom_right, t1),
        )


@dataclass(frozen=True)
class TextObservation:
    candidates: list[TextCandidate]
    quad: GeometryQuad

    def top_candidates(self, count: int) -> list[TextCandidate]:
        return sorted(self.candidates, key=lambda c: c.confidence, reverse=True)[:count]


class RecognitionEngine:
    """Image-analysis capability: two independent detection passes over one decoded image.

    ``image`` is an RGB ``numpy.ndarray`` of shape ``(height, width, 3)``. Both
    passes may run concurrently and each may fail independently.
    """

    async def detect_codes(self, image: Any) -> list[CodeObservation]:
        raise NotImplementedError

    async def detect_text(self, image: Any) -> list[TextObservation]:
        raise NotImplementedError
