from __future__ import annotations

from typing import Any

from content_analysis.engine.base import CodeObservation, RecognitionEngine, TextCandidate, TextObservation
from content_analysis.geometry.quad import GeometryQuad, Point

_CODE_QUAD = GeometryQuad(
    top_left=Point(0.1, 0.9),
    top_right=Point(0.4, 0.9),
    bottom_left=Point(0.1, 0.6),
    bottom_right=Point(0.4, 0.6),
)
_LINE_QUAD = GeometryQuad(
    top_left=Point(0.1, 0.3),
    top_right=Point(0.9, 0.3),
    bottom_left=Point(0.1, 0.2),
    bottom_right=Point(0.9, 0.2),
)


class MockRecognitionEngine(RecognitionEngine):
    def __init__(
        self,
        codes: list[CodeObservation] | None = None,
        texts: list[TextObservation] | None = None,
    ) -> None:
        # Mock recognition for development/testing: one QR code above one line of text
        self._codes = codes if codes is not None else [
            CodeObservation(payload="https://example.org/invite/abc123", quad=_CODE_QUAD),
        ]
        self._texts = texts if texts is not None else [
            TextObservation(
                candidates=[TextCandidate("Boarding gate B12 closes 10.45", 0.92, line_quad=_LINE_QUAD)],
                quad=_LINE_QUAD,
            ),
        ]

    async def detect_codes(self, image: Any) -> list[CodeObservation]:
        return list(self._codes)

    async def detect_text(self, image: Any) -> list[TextObservation]:
        return list(self._texts)
