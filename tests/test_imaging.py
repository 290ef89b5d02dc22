"""Image decoding tests — lazy supplier over uploaded bytes."""
from __future__ import annotations

import io

import numpy as np
import pytest
from PIL import Image

from content_analysis.core.errors import ImageDecodeError
from content_analysis.imaging import decode_image, image_supplier


def _encode(img: Image.Image, fmt: str) -> bytes:
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


def test_decode_image_returns_rgb_array() -> None:
    array = decode_image(_encode(Image.new("L", (6, 4), 128), "PNG"))
    assert isinstance(array, np.ndarray)
    assert array.shape == (4, 6, 3)


def test_decode_image_rejects_garbage() -> None:
    with pytest.raises(ImageDecodeError):
        decode_image(b"not an image")


def test_supplier_decodes_only_when_called() -> None:
    supply = image_supplier(b"not an image")   # no error until called
    with pytest.raises(ImageDecodeError):
        supply()


def test_supplier_without_bytes_yields_nothing() -> None:
    assert image_supplier(b"")() is None
    assert image_supplier(None)() is None
