from __future__ import annotations

import io
from collections.abc import Callable

import numpy as np
from PIL import Image, UnidentifiedImageError

from content_analysis.core.errors import ImageDecodeError


def decode_image(data: bytes) -> np.ndarray:
    """Decode PNG/JPEG/... *data* into an RGB array of shape (height, width, 3)."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            return np.array(img.convert("RGB"))
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageDecodeError(f"cannot decode image: {exc}") from exc


def image_supplier(data: bytes | None) -> Callable[[], np.ndarray | None]:
    """Defer decoding until the cache has missed; empty input supplies no image."""
    def supply() -> np.ndarray | None:
        if not data:
            return None
        return decode_image(data)

    return supply
