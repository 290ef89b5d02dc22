"""Error taxonomy for recognition and the recognized-content cache.

Nothing here is meant to reach an end user as a message: every failure in the
lookup path degrades to "fewer or no detections". The exceptions exist so the
layers below the orchestrator can signal precisely what went wrong.
"""
from __future__ import annotations


class ContentAnalysisError(Exception):
    pass


class CacheDecodeError(ContentAnalysisError):
    """Stored bytes do not parse as a valid recognized-content envelope."""


class OffsetRangeError(ContentAnalysisError, ValueError):
    """A word range falls outside ``0 <= start <= end <= len(text)``."""

    def __init__(self, start: int, end: int, length: int) -> None:
        super().__init__(f"word range [{start}, {end}) invalid for text of length {length}")
        self.start = start
        self.end = end
        self.length = length


class RangeGeometryError(ContentAnalysisError, ValueError):
    """The engine could not locate a quad for a character range."""


class ImageDecodeError(ContentAnalysisError):
    """Uploaded bytes are not a decodable raster image."""
