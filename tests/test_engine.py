"""Recognition engine tests — base contract, mock engine, geometry helpers, factory."""
from __future__ import annotations

import pytest

from content_analysis.core.errors import RangeGeometryError
from content_analysis.engine.base import CodeObservation, RecognitionEngine, TextCandidate, TextObservation
from content_analysis.engine.engines import normalize_polygon, textract_observations
from content_analysis.engine.mock_engine import MockRecognitionEngine
from content_analysis.geometry.quad import GeometryQuad, Point


# ---------------------------------------------------------------------------
# Base RecognitionEngine
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_base_engine_raises_not_implemented() -> None:
    engine = RecognitionEngine()
    with pytest.raises(NotImplementedError):
        await engine.detect_codes(object())
    with pytest.raises(NotImplementedError):
        await engine.detect_text(object())


# ---------------------------------------------------------------------------
# MockRecognitionEngine
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_mock_engine_returns_code_and_text() -> None:
    engine = MockRecognitionEngine()
    codes = await engine.detect_codes(None)
    texts = await engine.detect_text(None)
    assert len(codes) == 1 and codes[0].payload
    assert len(texts) == 1
    assert texts[0].top_candidates(1)[0].confidence >= 0.5


@pytest.mark.asyncio
async def test_mock_engine_accepts_custom_observations() -> None:
    engine = MockRecognitionEngine(codes=[], texts=[])
    assert await engine.detect_codes(None) == []
    assert await engine.detect_text(None) == []


# ---------------------------------------------------------------------------
# TextCandidate geometry
# ---------------------------------------------------------------------------

LINE = GeometryQuad(Point(0.0, 1.0), Point(1.0, 1.0), Point(0.0, 0.5), Point(1.0, 0.5))


def test_candidate_prefers_reported_word_quad() -> None:
    word = GeometryQuad(Point(0.7, 0.7), Point(0.8, 0.7), Point(0.7, 0.6), Point(0.8, 0.6))
    candidate = TextCandidate("abcd", 0.9, line_quad=LINE, word_quads={(0, 2): word})
    assert candidate.bounding_box(0, 2) == word


def test_candidate_interpolates_along_line() -> None:
    candidate = TextCandidate("abcd", 0.9, line_quad=LINE)
    quad = candidate.bounding_box(2, 4)
    assert quad.top_left == Point(0.5, 1.0)
    assert quad.bottom_right == Point(1.0, 0.5)


@pytest.mark.parametrize("start,end", [(2, 2), (3, 1), (0, 5), (-1, 2)])
def test_candidate_rejects_bad_ranges(start: int, end: int) -> None:
    with pytest.raises(RangeGeometryError):
        TextCandidate("abcd", 0.9, line_quad=LINE).bounding_box(start, end)


def test_candidate_without_geometry_raises() -> None:
    with pytest.raises(RangeGeometryError):
        TextCandidate("abcd", 0.9).bounding_box(0, 2)


def test_top_candidates_sorted_by_confidence() -> None:
    obs = TextObservation(
        candidates=[TextCandidate("a", 0.2), TextCandidate("b", 0.8), TextCandidate("c", 0.5)],
        quad=LINE,
    )
    assert [c.string for c in obs.top_candidates(2)] == ["b", "c"]


# ---------------------------------------------------------------------------
# Engine adapters
# ---------------------------------------------------------------------------

def test_normalize_polygon_flips_to_bottom_left_origin() -> None:
    quad = normalize_polygon([(0, 0), (100, 0), (100, 50), (0, 50)], width=100, height=50)
    assert quad.top_left == Point(0.0, 1.0)
    assert quad.top_right == Point(1.0, 1.0)
    assert quad.bottom_right == Point(1.0, 0.0)
    assert quad.bottom_left == Point(0.0, 0.0)


def _poly(x0: float, y0: float, x1: float, y1: float) -> dict:
    return {"Polygon": [{"X": x0, "Y": y0}, {"X": x1, "Y": y0}, {"X": x1, "Y": y1}, {"X": x0, "Y": y1}]}


def test_textract_lines_become_observations_with_word_quads() -> None:
    blocks = [
        {"BlockType": "PAGE", "Id": "p"},
        {
            "BlockType": "LINE", "Id": "l1", "Text": "Gate 10.45", "Confidence": 97.0,
            "Geometry": _poly(0.1, 0.5, 0.6, 0.75),
            "Relationships": [{"Type": "CHILD", "Ids": ["w1", "w2"]}],
        },
        {"BlockType": "WORD", "Id": "w1", "Text": "Gate", "Geometry": _poly(0.1, 0.5, 0.3, 0.75)},
        {"BlockType": "WORD", "Id": "w2", "Text": "10.45", "Geometry": _poly(0.35, 0.5, 0.6, 0.75)},
    ]
    [obs] = textract_observations(blocks)
    candidate = obs.top_candidates(1)[0]

    assert candidate.string == "Gate 10.45"
    assert candidate.confidence == pytest.approx(0.97)
    assert set(candidate.word_quads) == {(0, 4), (5, 10)}
    assert obs.quad.top_left == Point(0.1, 0.5)
    assert obs.quad.bottom_left == Point(0.1, 0.25)


# ---------------------------------------------------------------------------
# Engine factory
# ---------------------------------------------------------------------------

def test_engine_factory_returns_mock() -> None:
    import os
    os.environ["RECOGNITION_PROVIDER"] = "mock"

    from importlib import reload
    import content_analysis.core.config as cfg_module
    import content_analysis.engine.factory as factory_module
    reload(cfg_module)
    reload(factory_module)

    assert isinstance(factory_module.get_recognition_engine(), MockRecognitionEngine)


def test_engine_factory_raises_on_unknown_provider() -> None:
    import os
    os.environ["RECOGNITION_PROVIDER"] = "unknown_engine"

    from importlib import reload
    import content_analysis.core.config as cfg_module
    import content_analysis.engine.factory as factory_module
    reload(cfg_module)
    reload(factory_module)

    with pytest.raises(ValueError, match="Unknown RECOGNITION_PROVIDER"):
        factory_module.get_recognition_engine()

    # Restore
    os.environ["RECOGNITION_PROVIDER"] = "mock"
    reload(cfg_module)
    reload(factory_module)


def test_code_observation_defaults_to_qr() -> None:
    assert CodeObservation(payload="x", quad=LINE).symbology == "qr"
