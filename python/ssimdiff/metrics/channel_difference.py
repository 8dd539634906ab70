"""Per-channel error statistics with a fuzz tolerance, plus a visual diff mask."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from ssimdiff.buffer import PixelBuffer
from ssimdiff.errors import DimensionMismatchError
from ssimdiff.io import as_pixel_buffer, load_image

# Diff mask colours: unchanged pixels keep their RGB at this alpha,
# changed pixels become opaque red.
UNCHANGED_ALPHA = 100
CHANGED_PIXEL = (255, 0, 0, 255)


@dataclass
class ChannelErrorAccumulator:
    """Error sums per channel plus the count of differing pixels."""

    channels: int
    absolute_error: np.ndarray = field(init=False)
    square_error: np.ndarray = field(init=False)
    differing_pixels: int = 0

    def __post_init__(self):
        self.absolute_error = np.zeros(self.channels, dtype=np.int64)
        self.square_error = np.zeros(self.channels, dtype=np.int64)

    def add(self, distances: np.ndarray, fuzz: int) -> np.ndarray:
        """Accumulate a ``(pixels, channels)`` block of distances.

        Every channel beyond ``fuzz`` contributes to its own sums; a pixel is
        counted once however many of its channels exceed. Returns the
        per-pixel mismatch mask.
        """
        exceeded = distances > fuzz
        kept = np.where(exceeded, distances, 0)
        self.absolute_error += kept.sum(axis=0)
        self.square_error += (kept * kept).sum(axis=0)
        mismatch = exceeded.any(axis=1)
        self.differing_pixels += int(np.count_nonzero(mismatch))
        return mismatch


@dataclass(frozen=True)
class ChannelDifferences:
    absolute_errors: list[int]
    mean_absolute_errors: list[float]
    square_errors: list[int]
    mean_square_errors: list[float]
    differing_pixels: int
    differing_fraction: float
    mse_standard_deviation: float
    diff_mask: PixelBuffer | None = None


def cross_channel_std(mean_square_errors) -> float:
    """Bessel-corrected standard deviation of the colour channels' MSE.

    Only the first three channels count, so alpha is ignored. A single
    channel gives NaN.
    """
    sample = np.asarray(mean_square_errors[:3], dtype=np.float64)
    mean = sample.sum() / sample.size
    with np.errstate(divide="ignore", invalid="ignore"):
        variance = np.sum((sample - mean) ** 2) / (sample.size - 1)
        return float(np.sqrt(variance))


def build_diff_mask(buffer: PixelBuffer, mismatch: np.ndarray) -> PixelBuffer:
    """RGBA mask: matching pixels dimmed copies of ``buffer``, changes in red."""
    mask = np.array(buffer.data, copy=True)
    mask[:, :, 3] = UNCHANGED_ALPHA
    mask[mismatch.reshape(buffer.height, buffer.width)] = CHANGED_PIXEL
    return PixelBuffer.from_array(mask)


def compute_differences(
    buffer_a: PixelBuffer,
    buffer_b: PixelBuffer,
    fuzz: int = 32,
    diff_mask: bool = False,
) -> ChannelDifferences:
    """Compare two buffers channel by channel.

    A channel matches when ``|b - a| <= fuzz``. Means divide by the total
    pixel count, not by the number of differing pixels. The diff mask is
    only produced for RGBA buffers.

    Raises:
        DimensionMismatchError: If size or channel count differ.
    """
    if buffer_a.data.shape != buffer_b.data.shape:
        raise DimensionMismatchError(buffer_a.data.shape, buffer_b.data.shape)

    channels = buffer_a.channels
    total_pixels = buffer_a.pixel_count
    distances = np.abs(
        buffer_b.data.astype(np.int64) - buffer_a.data.astype(np.int64)
    ).reshape(total_pixels, channels)

    accumulator = ChannelErrorAccumulator(channels)
    mismatch = accumulator.add(distances, fuzz)

    mean_absolute = accumulator.absolute_error / total_pixels
    mean_square = accumulator.square_error / total_pixels

    mask = None
    if diff_mask and channels == 4:
        mask = build_diff_mask(buffer_a, mismatch)

    return ChannelDifferences(
        absolute_errors=accumulator.absolute_error.tolist(),
        mean_absolute_errors=mean_absolute.tolist(),
        square_errors=accumulator.square_error.tolist(),
        mean_square_errors=mean_square.tolist(),
        differing_pixels=accumulator.differing_pixels,
        differing_fraction=accumulator.differing_pixels / total_pixels,
        mse_standard_deviation=cross_channel_std(mean_square.tolist()),
        diff_mask=mask,
    )


class ChannelDifferenceMetric:
    """Fraction of pixels differing beyond ``fuzz`` on any channel."""

    def __init__(self, fuzz: int = 32):
        self.fuzz = fuzz

    def compute(self, image, reference) -> float:
        result = compute_differences(
            as_pixel_buffer(reference), as_pixel_buffer(image), fuzz=self.fuzz
        )
        return result.differing_fraction

    def compute_from_paths(self, image_path: str, reference_path: str) -> float:
        return self.compute(load_image(image_path), load_image(reference_path))
