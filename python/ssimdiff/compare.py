"""Full image comparison: SSIM plus per-channel error report."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ssimdiff.buffer import PixelBuffer
from ssimdiff.io import as_pixel_buffer, load_image, save_image
from ssimdiff.metrics.channel_difference import compute_differences
from ssimdiff.metrics.ssim import compute_ssim
from ssimdiff.options import CompareOptions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComparisonReport:
    """Everything measured about a pair of images.

    ``to_dict()`` gives the report under its external field names.
    """

    structural_similarity_index: float
    mean_cosine_similarity: float
    mean_absolute_errors: list[float]
    absolute_errors: list[int]
    square_errors: list[int]
    mean_square_errors: list[float]
    channel_distortion: int
    mean_channel_distortion: float
    mean_channel_standard_deviation: float
    diff_mask: PixelBuffer | None = field(default=None, repr=False, compare=False)

    def to_dict(self) -> dict:
        return {
            "structuralSimilarityIndex": self.structural_similarity_index,
            "meanCosineSimilarity": self.mean_cosine_similarity,
            "meanAbsoluteErrors": list(self.mean_absolute_errors),
            "absoluteErrors": list(self.absolute_errors),
            "squareErrors": list(self.square_errors),
            "meanSquareErrors": list(self.mean_square_errors),
            "channelDistortion": self.channel_distortion,
            "meanChannelDistortion": self.mean_channel_distortion,
            "meanChannelStandardDeviation": self.mean_channel_standard_deviation,
        }


def compare_data(
    image_a,
    image_b,
    options: CompareOptions | Mapping[str, Any] | None = None,
) -> ComparisonReport:
    """Compare two in-memory images.

    Args:
        image_a: Baseline image: a PixelBuffer, PIL image, uint8 array,
            base64 string or encoded bytes.
        image_b: Image compared against the baseline, same forms accepted.
        options: CompareOptions or a dict of option names.

    Returns:
        ComparisonReport. When ``output_file_name`` is set and the images are
        RGBA, the diff mask is attached and written to that file.

    Raises:
        DimensionMismatchError: If the images differ in size or layout.
        EncodeError: If the diff mask cannot be written.
    """
    opts = CompareOptions.resolve(options)
    buffer_a = as_pixel_buffer(image_a)
    buffer_b = as_pixel_buffer(image_b)

    if opts.wants_diff_mask and buffer_a.channels != 4:
        logger.warning(
            f"Diff mask needs RGBA input, got {buffer_a.channels} channels; "
            f"not writing {opts.output_file_name}"
        )

    differences = compute_differences(
        buffer_a, buffer_b, fuzz=opts.fuzz, diff_mask=opts.wants_diff_mask
    )
    ssim = compute_ssim(
        buffer_a,
        buffer_b,
        window_size=opts.window_size,
        k1=opts.k1,
        k2=opts.k2,
        use_luminance=opts.use_luminance,
        bits_per_component=opts.bits_per_component,
    )
    logger.debug(
        f"Compared {buffer_a.width}x{buffer_a.height}: ssim={ssim.ssim:.6f}, "
        f"differing={differences.differing_pixels}"
    )

    if differences.diff_mask is not None:
        save_image(differences.diff_mask, opts.output_file_name)

    return ComparisonReport(
        structural_similarity_index=ssim.ssim,
        mean_cosine_similarity=ssim.mean_contrast_similarity,
        mean_absolute_errors=differences.mean_absolute_errors,
        absolute_errors=differences.absolute_errors,
        square_errors=differences.square_errors,
        mean_square_errors=differences.mean_square_errors,
        channel_distortion=differences.differing_pixels,
        mean_channel_distortion=differences.differing_fraction,
        mean_channel_standard_deviation=differences.mse_standard_deviation,
        diff_mask=differences.diff_mask,
    )


def compare(
    path_a: str | Path,
    path_b: str | Path,
    options: CompareOptions | Mapping[str, Any] | None = None,
) -> ComparisonReport:
    """Decode two image files concurrently and compare them.

    Both files are decoded to RGBA. Decode errors propagate unchanged.
    """
    with ThreadPoolExecutor(max_workers=2) as executor:
        future_a = executor.submit(load_image, path_a)
        future_b = executor.submit(load_image, path_b)
        buffer_a = future_a.result()
        buffer_b = future_b.result()
    return compare_data(buffer_a, buffer_b, options)
