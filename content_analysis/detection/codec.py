"""Binary-stable serialization of recognized content.

An envelope is UTF-8 JSON::

    {"v": 1, "results": [record, ...]}

    text record:  {"t": 0, "text": ..., "words": [{"start", "end", "rect"}, ...], "rect": quad}
    code record:  {"t": 1, "payload": ..., "rect": quad}
    quad:         {"topLeft": {"x", "y"}, "topRight": ..., "bottomLeft": ..., "bottomRight": ...}

Word offsets are code-point offsets into ``text``. Entries written before the
envelope carried a version have no ``"v"`` key; those, and records with an
unknown ``"t"``, are only accepted in legacy mode.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from content_analysis.core.errors import CacheDecodeError
from content_analysis.detection.models import CodeContent, Detection, TextContent, WordBox
from content_analysis.geometry.quad import GeometryQuad, Point

logger = logging.getLogger(__name__)

ENVELOPE_VERSION = 1

TEXT_TAG = 0
CODE_TAG = 1

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


# ---------------------------------------------------------------------------
# Wire records
# ---------------------------------------------------------------------------

class _WireModel(BaseModel):
    # Infinite and NaN coordinates are written as the JSON constants the parser reads back.
    model_config = ConfigDict(ser_json_inf_nan="constants")


class _PointRecord(_WireModel):
    x: float
    y: float


class _QuadRecord(_WireModel):
    model_config = ConfigDict(populate_by_name=True)

    top_left: _PointRecord = Field(alias="topLeft")
    top_right: _PointRecord = Field(alias="topRight")
    bottom_left: _PointRecord = Field(alias="bottomLeft")
    bottom_right: _PointRecord = Field(alias="bottomRight")


class _WordRecord(_WireModel):
    start: int = Field(ge=_INT32_MIN, le=_INT32_MAX)
    end: int = Field(ge=_INT32_MIN, le=_INT32_MAX)
    rect: _QuadRecord


class _TextRecord(_WireModel):
    t: Literal[0] = TEXT_TAG
    text: str
    words: list[_WordRecord]
    rect: _QuadRecord


class _CodeRecord(_WireModel):
    t: Literal[1] = CODE_TAG
    payload: str
    rect: _QuadRecord


_Record = Annotated[Union[_TextRecord, _CodeRecord], Field(discriminator="t")]
_RECORD_ADAPTER: TypeAdapter[_Record] = TypeAdapter(_Record)


class _Envelope(_WireModel):
    v: Literal[1] = ENVELOPE_VERSION
    results: list[_Record]


class _LegacyEnvelope(_WireModel):
    v: Literal[1] | None = None
    results: list[dict[str, Any]]


# ---------------------------------------------------------------------------
# Domain <-> record mapping
# ---------------------------------------------------------------------------

def _quad_to_record(quad: GeometryQuad) -> _QuadRecord:
    return _QuadRecord(
        top_left=_PointRecord(x=quad.top_left.x, y=quad.top_left.y),
        top_right=_PointRecord(x=quad.top_right.x, y=quad.top_right.y),
        bottom_left=_PointRecord(x=quad.bottom_left.x, y=quad.bottom_left.y),
        bottom_right=_PointRecord(x=quad.bottom_right.x, y=quad.bottom_right.y),
    )


def _quad_from_record(record: _QuadRecord) -> GeometryQuad:
    return GeometryQuad(
        top_left=Point(record.top_left.x, record.top_left.y),
        top_right=Point(record.top_right.x, record.top_right.y),
        bottom_left=Point(record.bottom_left.x, record.bottom_left.y),
        bottom_right=Point(record.bottom_right.x, record.bottom_right.y),
    )


def _to_record(detection: Detection) -> _TextRecord | _CodeRecord:
    content = detection.content
    rect = _quad_to_record(detection.quad)
    if isinstance(content, TextContent):
        words = [
            _WordRecord(start=w.start, end=w.end, rect=_quad_to_record(w.quad))
            for w in content.words
        ]
        return _TextRecord(text=content.text, words=words, rect=rect)
    if isinstance(content, CodeContent):
        return _CodeRecord(payload=content.payload, rect=rect)
    raise TypeError(f"Unsupported detection content {type(content).__name__}")


def _from_record(record: _TextRecord | _CodeRecord) -> Detection:
    quad = _quad_from_record(record.rect)
    if isinstance(record, _TextRecord):
        words = tuple(WordBox(w.start, w.end, _quad_from_record(w.rect)) for w in record.words)
        # TextContent enforces 0 <= start <= end <= len(text).
        return Detection(TextContent(record.text, words), quad)
    return Detection(CodeContent(record.payload), quad)


def _legacy_placeholder() -> Detection:
    return Detection(TextContent("", ()), GeometryQuad())


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def encode_detection(detection: Detection) -> bytes:
    return _to_record(detection).model_dump_json(by_alias=True).encode("utf-8")


def decode_detection(data: bytes | str) -> Detection:
    try:
        return _from_record(_RECORD_ADAPTER.validate_json(data))
    except ValueError as exc:
        raise CacheDecodeError(f"invalid detection record: {exc}") from exc


def encode_detections(detections: Iterable[Detection]) -> bytes:
    envelope = _Envelope(results=[_to_record(d) for d in detections])
    return envelope.model_dump_json(by_alias=True).encode("utf-8")


def decode_detections(data: bytes | str, *, legacy: bool = False) -> list[Detection]:
    """Decode an envelope produced by :func:`encode_detections`.

    Raises:
        CacheDecodeError: malformed bytes, unknown version or record tag (strict
            mode), or a word range outside its text (both modes).
    """
    try:
        if legacy:
            return _decode_legacy(data)
        envelope = _Envelope.model_validate_json(data)
        return [_from_record(r) for r in envelope.results]
    except ValueError as exc:
        raise CacheDecodeError(f"invalid recognized-content envelope: {exc}") from exc


def _decode_legacy(data: bytes | str) -> list[Detection]:
    envelope = _LegacyEnvelope.model_validate_json(data)
    detections: list[Detection] = []
    for raw in envelope.results:
        if raw.get("t") in (TEXT_TAG, CODE_TAG):
            detections.append(_from_record(_RECORD_ADAPTER.validate_python(raw)))
        else:
            logger.warning("legacy_unknown_record_tag", extra={"tag": raw.get("t")})
            detections.append(_legacy_placeholder())
    return detections
