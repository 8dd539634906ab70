"""ssimdiff: SSIM and per-channel difference reports for image pairs."""

from ssimdiff.buffer import PixelBuffer
from ssimdiff.compare import ComparisonReport, compare, compare_data
from ssimdiff.errors import (
    SsimdiffError,
    ConfigurationError,
    DimensionMismatchError,
    UnsupportedChannelLayoutError,
    DecodeError,
    EncodeError,
)
from ssimdiff.options import CompareOptions

__all__ = [
    "compare",
    "compare_data",
    "ComparisonReport",
    "CompareOptions",
    "PixelBuffer",
    "SsimdiffError",
    "ConfigurationError",
    "DimensionMismatchError",
    "UnsupportedChannelLayoutError",
    "DecodeError",
    "EncodeError",
]
