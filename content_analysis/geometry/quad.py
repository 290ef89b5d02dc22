"""Normalized quadrilaterals locating detections in image space.

Coordinates are in [0, 1] relative to the image, with the origin at the
bottom-left corner (the convention recognition engines report in). Quads are
not validated: degenerate or non-convex shapes are carried through as-is.
"""
from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Point:
    x: float = 0.0
    y: float = 0.0

    def distance_to(self, other: Point) -> float:
        return math.hypot(other.x - self.x, other.y - self.y)

    def mid_point(self, other: Point) -> Point:
        return Point((self.x + other.x) / 2.0, (self.y + other.y) / 2.0)


@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass(frozen=True)
class Insets:
    top: float = 0.0
    left: float = 0.0
    bottom: float = 0.0
    right: float = 0.0


@dataclass(frozen=True)
class Frame:
    x: float
    y: float
    width: float
    height: float


def _as_point(value: Any) -> Point:
    if isinstance(value, Point):
        return value
    if hasattr(value, "x") and hasattr(value, "y"):
        return Point(float(value.x), float(value.y))
    x, y = value
    return Point(float(x), float(y))


@dataclass(frozen=True)
class GeometryQuad:
    top_left: Point = field(default_factory=Point)
    top_right: Point = field(default_factory=Point)
    bottom_left: Point = field(default_factory=Point)
    bottom_right: Point = field(default_factory=Point)

    @classmethod
    def zero(cls) -> GeometryQuad:
        return cls()

    @classmethod
    def from_observation(cls, observation: Any) -> GeometryQuad:
        """Copy the corners of an engine-native rectangle observation verbatim."""
        return cls(
            top_left=_as_point(observation.top_left),
            top_right=_as_point(observation.top_right),
            bottom_left=_as_point(observation.bottom_left),
            bottom_right=_as_point(observation.bottom_right),
        )

    @classmethod
    def from_points(cls, points: Sequence[Any]) -> GeometryQuad:
        """Build from a clockwise polygon ``[top_left, top_right, bottom_right, bottom_left]``."""
        if len(points) != 4:
            raise ValueError(f"expected 4 corner points, got {len(points)}")
        tl, tr, br, bl = (_as_point(p) for p in points)
        return cls(top_left=tl, top_right=tr, bottom_left=bl, bottom_right=br)

    @property
    def corners(self) -> tuple[Point, Point, Point, Point]:
        return (self.top_left, self.top_right, self.bottom_left, self.bottom_right)

    def bounding_frame(self) -> Frame:
        xs = [p.x for p in self.corners]
        ys = [p.y for p in self.corners]
        left, right = min(xs), max(xs)
        bottom, top = min(ys), max(ys)
        return Frame(x=left, y=bottom, width=right - left, height=top - bottom)

    def left_mid_point(self) -> Point:
        return self.top_left.mid_point(self.bottom_left)

    def right_mid_point(self) -> Point:
        return self.top_right.mid_point(self.bottom_right)

    def left_height(self) -> float:
        return self.top_left.distance_to(self.bottom_left)

    def right_height(self) -> float:
        return self.top_right.distance_to(self.bottom_right)

    def convert_to(self, size: Size, insets: Insets | None = None) -> GeometryQuad:
        """Map into a pixel canvas of *size* whose y axis points down, then apply *insets*."""
        insets = insets or Insets()
        w, h = size.width, size.height
        return GeometryQuad(
            top_left=Point(self.top_left.x * w + insets.left, h - self.top_left.y * h + insets.top),
            top_right=Point(self.top_right.x * w - insets.right, h - self.top_right.y * h + insets.top),
            bottom_left=Point(self.bottom_left.x * w + insets.left, h - self.bottom_left.y * h - insets.bottom),
            bottom_right=Point(self.bottom_right.x * w - insets.right, h - self.bottom_right.y * h - insets.bottom),
        )
