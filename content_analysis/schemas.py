from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class PointOut(BaseModel):
    x: float
    y: float


class FrameOut(BaseModel):
    x: float
    y: float
    width: float
    height: float


class QuadOut(BaseModel):
    top_left: PointOut
    top_right: PointOut
    bottom_left: PointOut
    bottom_right: PointOut
    bounding_frame: FrameOut


class WordOut(BaseModel):
    start: int
    end: int
    text: str
    quad: QuadOut


class DetectionOut(BaseModel):
    kind: Literal["text", "code"]
    text: str | None = None
    payload: str | None = None
    words: list[WordOut] = Field(default_factory=list)
    quad: QuadOut


class RecognizedContentResponse(BaseModel):
    namespace: int
    message_id: int
    # Quads are normalized (y up) unless the request asked for a pixel canvas.
    coordinate_space: Literal["normalized", "pixels"] = "normalized"
    results: list[DetectionOut]
