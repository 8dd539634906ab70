"""Per-pixel luma extraction for every supported channel layout."""

from __future__ import annotations

import numpy as np

from ssimdiff.buffer import PixelBuffer

# ITU-R BT.709 derived weights. They sum to 1, so weighting a gray
# channel is a no-op.
LUMA_RED = 0.212655
LUMA_GREEN = 0.715158
LUMA_BLUE = 0.072187


def extract_luma(
    buffer: PixelBuffer,
    x: int,
    y: int,
    width: int,
    height: int,
    use_luminance: bool = True,
) -> np.ndarray:
    """Return the luma of a window as a flat float64 array in row-major order.

    The window must lie inside the buffer; callers clip at the image edges.

    - gray: the sample itself.
    - gray + alpha: gray scaled by ``alpha / 255``.
    - RGB: weighted luma, or ``R + G + B`` when ``use_luminance`` is off.
      The unweighted sum is not averaged, so it spans 0-765.
    - RGBA: the RGB value scaled by ``alpha / 255``.
    """
    window = buffer.data[y:y + height, x:x + width].astype(np.float64)
    window = window.reshape(-1, buffer.channels)

    if buffer.channels == 1:
        return window[:, 0]
    if buffer.channels == 2:
        return window[:, 0] * (window[:, 1] / 255)

    rgb = window[:, :3]
    if use_luminance:
        luma = rgb[:, 0] * LUMA_RED + rgb[:, 1] * LUMA_GREEN + rgb[:, 2] * LUMA_BLUE
    else:
        luma = rgb[:, 0] + rgb[:, 1] + rgb[:, 2]
    if buffer.channels == 4:
        luma = luma * (window[:, 3] / 255)
    return luma
