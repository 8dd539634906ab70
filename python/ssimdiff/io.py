"""Pillow-backed decoding and encoding of pixel buffers."""

from __future__ import annotations

import base64
import binascii
import io
import logging
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from ssimdiff.buffer import MODE_CHANNELS, PixelBuffer
from ssimdiff.errors import DecodeError, EncodeError

logger = logging.getLogger(__name__)


def _to_buffer(image: Image.Image, mode: str | None) -> PixelBuffer:
    if mode is not None:
        if mode not in MODE_CHANNELS:
            raise ValueError(f"mode must be one of {sorted(MODE_CHANNELS)}, got {mode!r}")
        image = image.convert(mode)
    return PixelBuffer.from_image(image)


def load_image(path: str | Path, mode: str | None = "RGBA") -> PixelBuffer:
    """Decode an image file into a PixelBuffer.

    Args:
        path: Any file Pillow can open.
        mode: Target layout ("L", "LA", "RGB" or "RGBA"). ``None`` keeps the
            file's own layout.

    Raises:
        DecodeError: If the file is missing or not a readable image.
    """
    try:
        with Image.open(path) as image:
            image.load()
            buffer = _to_buffer(image, mode)
    except (OSError, UnidentifiedImageError) as exc:
        raise DecodeError(str(path), str(exc)) from exc
    logger.debug(f"Decoded {path}: {buffer.width}x{buffer.height}x{buffer.channels}")
    return buffer


def decode_bytes(data: bytes, mode: str | None = "RGBA", source: str = "<bytes>") -> PixelBuffer:
    """Decode an encoded image (PNG, JPEG, ...) held in memory."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            return _to_buffer(image, mode)
    except (OSError, UnidentifiedImageError) as exc:
        raise DecodeError(source, str(exc)) from exc


def decode_base64(blob: str, mode: str | None = "RGBA") -> PixelBuffer:
    """Decode a base64-encoded image container."""
    try:
        data = base64.b64decode(blob, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError("<base64>", str(exc)) from exc
    return decode_bytes(data, mode, source="<base64>")


def as_pixel_buffer(obj) -> PixelBuffer:
    """Coerce a PixelBuffer, PIL image, numpy array, base64 string or encoded bytes."""
    if isinstance(obj, PixelBuffer):
        return obj
    if isinstance(obj, Image.Image):
        return PixelBuffer.from_image(obj)
    if isinstance(obj, np.ndarray):
        return PixelBuffer.from_array(obj)
    if isinstance(obj, str):
        return decode_base64(obj)
    if isinstance(obj, (bytes, bytearray)):
        return decode_bytes(bytes(obj))
    raise TypeError(f"Cannot build a PixelBuffer from {type(obj).__name__}")


def save_image(buffer: PixelBuffer, path: str | Path) -> str:
    """Encode a buffer to ``path``; the format follows the file extension.

    Raises:
        EncodeError: If Pillow cannot encode or write the file.
    """
    try:
        buffer.to_image().save(path)
    except (OSError, ValueError, KeyError) as exc:
        raise EncodeError(str(path), str(exc)) from exc
    logger.info(f"Saved diff image: {path}")
    return str(path)
