"""Detection model tests — segmentation, engine observation mapping, offset invariant."""
from __future__ import annotations

import pytest

from content_analysis.core.errors import OffsetRangeError, RangeGeometryError
from content_analysis.detection.models import (
    CodeContent,
    Detection,
    TextContent,
    WordBox,
    detection_from_observation,
)
from content_analysis.detection.segmentation import word_ranges
from content_analysis.engine.base import CodeObservation, TextCandidate, TextObservation
from content_analysis.geometry.quad import GeometryQuad, Point

LINE = GeometryQuad(
    top_left=Point(0.0, 1.0),
    top_right=Point(1.0, 1.0),
    bottom_left=Point(0.0, 0.0),
    bottom_right=Point(1.0, 0.0),
)


def _words(text: str) -> list[str]:
    return [text[s:e] for s, e in word_ranges(text)]


# ---------------------------------------------------------------------------
# Segmentation
# ---------------------------------------------------------------------------

def test_word_ranges_splits_on_punctuation_and_spaces() -> None:
    assert _words("Hello, world!") == ["Hello", "world"]


def test_word_ranges_keeps_numbers_and_contractions_whole() -> None:
    assert _words("Total: $1,250.00 don't") == ["Total", "1,250.00", "don't"]


def test_word_ranges_are_code_point_offsets() -> None:
    text = "😀 café"
    assert word_ranges(text) == [(2, 6)]
    assert _words(text) == ["café"]


def test_word_ranges_empty_text() -> None:
    assert word_ranges("") == []
    assert word_ranges("  --  ") == []


@pytest.mark.parametrize(
    "text,expected",
    [
        ("हिन्दी", [(0, 6)]),                  # vowel signs and virama
        ("தமிழ்", [(0, 5)]),                   # spacing mark and pulli
        ("नमस्ते दुनिया", [(0, 6), (7, 13)]),
        ("كَتَبَ الدرس", [(0, 6), (7, 12)]),   # harakat
        ("안녕 세상", [(0, 2), (3, 5)]),
    ],
)
def test_word_ranges_keep_combining_marks_inside_words(text: str, expected: list[tuple[int, int]]) -> None:
    assert word_ranges(text) == expected


# ---------------------------------------------------------------------------
# Offset invariant
# ---------------------------------------------------------------------------

def test_text_content_rejects_reversed_range() -> None:
    with pytest.raises(OffsetRangeError):
        TextContent("0123456789", (WordBox(5, 3, GeometryQuad()),))


def test_text_content_rejects_range_past_end() -> None:
    with pytest.raises(OffsetRangeError):
        TextContent("abc", (WordBox(0, 4, GeometryQuad()),))


def test_text_content_accepts_empty_range_at_end() -> None:
    content = TextContent("abc", [WordBox(3, 3, GeometryQuad())])
    assert content.words[0].slice(content.text) == ""
    assert isinstance(content.words, tuple)


# ---------------------------------------------------------------------------
# detection_from_observation
# ---------------------------------------------------------------------------

def test_qr_observation_becomes_code_detection() -> None:
    detection = detection_from_observation(CodeObservation(payload="https://example.org", quad=LINE))
    assert detection == Detection(CodeContent("https://example.org"), LINE)
    assert detection.kind == "code"


@pytest.mark.parametrize(
    "observation",
    [
        CodeObservation(payload="", quad=LINE),
        CodeObservation(payload=None, quad=LINE),
        CodeObservation(payload="12345", quad=LINE, symbology="ean13"),
    ],
)
def test_unusable_code_observations_are_discarded(observation: CodeObservation) -> None:
    assert detection_from_observation(observation) is None


def test_text_observation_below_threshold_is_discarded() -> None:
    obs = TextObservation(candidates=[TextCandidate("blurry", 0.49, line_quad=LINE)], quad=LINE)
    assert detection_from_observation(obs) is None


def test_text_observation_at_threshold_is_kept() -> None:
    obs = TextObservation(candidates=[TextCandidate("ok", 0.5, line_quad=LINE)], quad=LINE)
    detection = detection_from_observation(obs)
    assert detection is not None
    assert detection.kind == "text"


def test_text_observation_without_candidates_is_discarded() -> None:
    assert detection_from_observation(TextObservation(candidates=[], quad=LINE)) is None


def test_text_observation_uses_best_candidate_and_locates_words() -> None:
    obs = TextObservation(
        candidates=[
            TextCandidate("wrong guess", 0.6, line_quad=LINE),
            TextCandidate("ab cd", 0.9, line_quad=LINE),
        ],
        quad=LINE,
    )
    detection = detection_from_observation(obs)

    assert isinstance(detection.content, TextContent)
    assert detection.content.text == "ab cd"
    assert [(w.start, w.end) for w in detection.content.words] == [(0, 2), (3, 5)]
    first = detection.content.words[0].quad
    assert first.top_left == Point(0.0, 1.0)
    assert first.top_right == Point(0.4, 1.0)
    assert detection.quad == LINE


def test_word_without_geometry_is_dropped_not_fatal() -> None:
    class _PartialCandidate(TextCandidate):
        def bounding_box(self, start: int, end: int) -> GeometryQuad:
            if start == 0:
                raise RangeGeometryError("engine could not place this word")
            return super().bounding_box(start, end)

    obs = TextObservation(candidates=[_PartialCandidate("ab cd", 0.9, line_quad=LINE)], quad=LINE)
    detection = detection_from_observation(obs)
    assert [(w.start, w.end) for w in detection.content.words] == [(3, 5)]


def test_unknown_observation_type_is_discarded() -> None:
    assert detection_from_observation(object()) is None
