"""Decode signature and image data-URLs for embedding."""

from __future__ import annotations

import base64
import binascii
from io import BytesIO

from PIL import Image, UnidentifiedImageError


class ImageDecodeError(ValueError):
    """Raised when a data-URL does not hold a readable raster image."""


def decode_data_url(data_url: str) -> Image.Image:
    """Return the fully loaded image held by a ``data:image/...;base64,`` URL."""
    header, sep, payload = data_url.partition(",")
    if not sep or not header.startswith("data:image/") or not header.endswith(";base64"):
        raise ImageDecodeError(f"Not a base64 image data-URL: {data_url[:40]!r}")

    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ImageDecodeError("Image data-URL payload is not valid base64") from exc

    try:
        image = Image.open(BytesIO(raw))
        image.load()
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        raise ImageDecodeError("Image data-URL payload is not a readable image") from exc
    return image
