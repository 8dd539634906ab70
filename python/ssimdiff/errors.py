"""ssimdiff custom error types."""


class SsimdiffError(Exception):
    """Base exception for all ssimdiff errors."""


class ConfigurationError(SsimdiffError):
    """Raised for invalid option values or malformed pixel buffers."""


class DimensionMismatchError(SsimdiffError):
    """Raised when two buffers being compared differ in shape."""

    def __init__(self, shape_a: tuple, shape_b: tuple):
        self.shape_a = shape_a
        self.shape_b = shape_b
        super().__init__(f"image dimensions differ: {shape_a} vs {shape_b}")


class UnsupportedChannelLayoutError(SsimdiffError):
    """Raised for a channel count outside {1, 2, 3, 4}."""

    def __init__(self, channels: int):
        self.channels = channels
        super().__init__(
            f"unsupported channel layout: {channels} channels "
            f"(expected 1, 2, 3 or 4)"
        )


class DecodeError(SsimdiffError):
    """Raised when an image source cannot be decoded."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"could not decode {source}: {message}")


class EncodeError(SsimdiffError):
    """Raised when a pixel buffer cannot be encoded or written."""

    def __init__(self, destination: str, message: str):
        self.destination = destination
        super().__init__(f"could not encode {destination}: {message}")
