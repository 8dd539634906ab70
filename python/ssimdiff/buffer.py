"""In-memory pixel buffers shared by the comparison engines."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from PIL import Image

from ssimdiff.errors import ConfigurationError, UnsupportedChannelLayoutError

SUPPORTED_CHANNELS = (1, 2, 3, 4)

# Pillow mode for each supported channel count, and back.
CHANNEL_MODES = {1: "L", 2: "LA", 3: "RGB", 4: "RGBA"}
MODE_CHANNELS = {mode: channels for channels, mode in CHANNEL_MODES.items()}


def check_channels(channels: int) -> None:
    if channels not in SUPPORTED_CHANNELS:
        raise UnsupportedChannelLayoutError(channels)


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """A decoded image: interleaved 8-bit samples plus their geometry.

    ``data`` has shape ``(height, width, channels)`` and is marked read-only,
    so engines can slice it freely without copying or mutating it.
    """

    width: int
    height: int
    channels: int
    data: np.ndarray

    def __post_init__(self):
        check_channels(self.channels)
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(
                f"image dimensions must be positive, got {self.width}x{self.height}"
            )
        expected = (self.height, self.width, self.channels)
        if self.data.shape != expected:
            raise ConfigurationError(
                f"pixel data has shape {self.data.shape}, expected {expected}"
            )
        if self.data.dtype != np.uint8:
            raise ConfigurationError(f"pixel data must be uint8, got {self.data.dtype}")
        view = self.data.view()
        view.setflags(write=False)
        object.__setattr__(self, "data", view)

    @property
    def shape(self) -> tuple[int, int]:
        return (self.width, self.height)

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    @classmethod
    def from_array(cls, array: np.ndarray) -> PixelBuffer:
        """Wrap a ``(H, W)`` or ``(H, W, C)`` array of 8-bit samples. The array is copied.

        Non-uint8 input must hold whole numbers in 0-255.
        """
        arr = np.asarray(array)
        if arr.dtype != np.uint8:
            if arr.size and not (
                (np.issubdtype(arr.dtype, np.integer) or np.issubdtype(arr.dtype, np.floating))
                and np.all(np.isfinite(arr))
                and arr.min() >= 0
                and arr.max() <= 255
                and np.all(arr == np.floor(arr))
            ):
                raise ConfigurationError(
                    f"pixel samples must be whole numbers in 0-255, got {arr.dtype} data"
                )
        arr = np.array(arr, dtype=np.uint8, copy=True)
        if arr.ndim == 2:
            arr = arr[:, :, np.newaxis]
        if arr.ndim != 3:
            raise ConfigurationError(f"expected a 2-D or 3-D array, got {arr.ndim}-D")
        height, width, channels = arr.shape
        return cls(width=width, height=height, channels=channels, data=arr)

    @classmethod
    def from_bytes(cls, raw: bytes, width: int, height: int, channels: int) -> PixelBuffer:
        """Build a buffer from flat row-major interleaved samples."""
        check_channels(channels)
        if len(raw) != width * height * channels:
            raise ConfigurationError(
                f"expected {width * height * channels} samples, got {len(raw)}"
            )
        arr = np.frombuffer(bytes(raw), dtype=np.uint8).reshape(height, width, channels)
        return cls(width=width, height=height, channels=channels, data=arr.copy())

    @classmethod
    def from_image(cls, image: Image.Image) -> PixelBuffer:
        """Convert a PIL image, keeping its layout where it maps to 1-4 channels."""
        mode = image.mode
        if mode not in MODE_CHANNELS:
            # Palette, CMYK, 16-bit gray etc. are normalised to the closest layout.
            if mode in ("1", "I", "I;16", "F"):
                mode = "L"
            elif "transparency" in image.info or mode.endswith("A"):
                mode = "RGBA"
            else:
                mode = "RGB"
            image = image.convert(mode)
        return cls.from_array(np.asarray(image))

    def to_image(self) -> Image.Image:
        arr = self.data[:, :, 0] if self.channels == 1 else self.data
        return Image.fromarray(np.ascontiguousarray(arr))

    def tobytes(self) -> bytes:
        return self.data.tobytes()
