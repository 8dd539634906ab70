"""SSIM (Structural Similarity Index) over flat, non-overlapping windows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

import numpy as np

from ssimdiff.buffer import PixelBuffer
from ssimdiff.io import as_pixel_buffer, load_image
from ssimdiff.luma import extract_luma
from ssimdiff.options import CompareOptions


class WindowResult(NamedTuple):
    ssim: float
    contrast_similarity: float


class SsimResult(NamedTuple):
    ssim: float
    mean_contrast_similarity: float


def window_statistics(
    luma_a: np.ndarray,
    luma_b: np.ndarray,
    mean_a: float,
    mean_b: float,
    c1: float,
    c2: float,
) -> WindowResult:
    """SSIM and contrast similarity of one window.

    Variances and covariance are Bessel-corrected (divided by ``n - 1``),
    so a 1x1 window yields NaN rather than raising.
    """
    dev_a = luma_a - mean_a
    dev_b = luma_b - mean_b
    n = luma_a.size - 1

    with np.errstate(divide="ignore", invalid="ignore"):
        var_a = np.sum(dev_a * dev_a) / n
        var_b = np.sum(dev_b * dev_b) / n
        cov = np.sum(dev_a * dev_b) / n

        contrast = (2 * cov + c2) / (var_a + var_b + c2)
        ssim = ((2 * mean_a * mean_b + c1) * (2 * cov + c2)) / (
            (mean_a * mean_a + mean_b * mean_b + c1) * (var_a + var_b + c2)
        )
    return WindowResult(float(ssim), float(contrast))


@dataclass
class SsimAccumulator:
    """Running sums over windows. ``c1``/``c2`` are the stability constants."""

    c1: float
    c2: float
    window_count: int = 0
    sum_ssim: float = 0.0
    sum_contrast_similarity: float = 0.0

    @classmethod
    def for_range(cls, k1: float, k2: float, bits_per_component: int) -> SsimAccumulator:
        dynamic_range = (1 << bits_per_component) - 1
        return cls(c1=(k1 * dynamic_range) ** 2, c2=(k2 * dynamic_range) ** 2)

    def add(self, window: WindowResult) -> None:
        self.sum_ssim += window.ssim
        self.sum_contrast_similarity += window.contrast_similarity
        self.window_count += 1

    def merge(self, other: SsimAccumulator) -> None:
        """Fold in the sums of an accumulator that ran over other windows."""
        self.sum_ssim += other.sum_ssim
        self.sum_contrast_similarity += other.sum_contrast_similarity
        self.window_count += other.window_count

    def finalize(self) -> SsimResult:
        if self.window_count == 0:
            return SsimResult(0.0, 0.0)
        return SsimResult(
            self.sum_ssim / self.window_count,
            self.sum_contrast_similarity / self.window_count,
        )


def iter_windows(width: int, height: int, window_size: int):
    """Yield ``(x, y, w, h)`` tiles left-to-right, top-to-bottom, clipped at the edges."""
    for y in range(0, height, window_size):
        for x in range(0, width, window_size):
            yield x, y, min(window_size, width - x), min(window_size, height - y)


def accumulate_windows(
    buffer_a: PixelBuffer,
    buffer_b: PixelBuffer,
    windows,
    accumulator: SsimAccumulator,
    use_luminance: bool = True,
) -> SsimAccumulator:
    """Run every window through ``window_statistics`` into ``accumulator``."""
    for x, y, w, h in windows:
        luma_a = extract_luma(buffer_a, x, y, w, h, use_luminance)
        luma_b = extract_luma(buffer_b, x, y, w, h, use_luminance)
        accumulator.add(window_statistics(
            luma_a, luma_b, luma_a.mean(), luma_b.mean(), accumulator.c1, accumulator.c2,
        ))
    return accumulator


def compute_ssim(
    buffer_a: PixelBuffer,
    buffer_b: PixelBuffer,
    window_size: int = 64,
    k1: float = 0.01,
    k2: float = 0.03,
    use_luminance: bool = True,
    bits_per_component: int = 8,
) -> SsimResult:
    """Mean SSIM and mean contrast similarity over all windows.

    Buffers of different width or height give ``SsimResult(0.0, 0.0)``
    instead of an error.
    """
    if buffer_a.shape != buffer_b.shape:
        return SsimResult(0.0, 0.0)

    accumulator = SsimAccumulator.for_range(k1, k2, bits_per_component)
    windows = iter_windows(buffer_a.width, buffer_a.height, window_size)
    accumulate_windows(buffer_a, buffer_b, windows, accumulator, use_luminance)
    return accumulator.finalize()


class SsimMetric:
    """Computes SSIM between two images for visual regression detection."""

    def __init__(self, **options):
        self.options = CompareOptions.resolve(options)

    def compute(self, image, reference) -> float:
        """Compute SSIM between two images (PIL images, arrays or PixelBuffers).

        Returns 1.0 for identical images; anti-correlated images go negative.
        """
        opts = self.options
        result = compute_ssim(
            as_pixel_buffer(image),
            as_pixel_buffer(reference),
            window_size=opts.window_size,
            k1=opts.k1,
            k2=opts.k2,
            use_luminance=opts.use_luminance,
            bits_per_component=opts.bits_per_component,
        )
        return result.ssim

    def compute_from_paths(self, image_path: str, reference_path: str) -> float:
        """Compute SSIM from file paths."""
        return self.compute(load_image(image_path), load_image(reference_path))
