"""Comparison options with documented defaults."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from numbers import Real
from typing import Any

from ssimdiff.errors import ConfigurationError

# External (camelCase) option names accepted by from_mapping.
_ALIASES = {
    "windowSize": "window_size",
    "K1": "k1",
    "K2": "k2",
    "useLuminance": "use_luminance",
    "bitsPerComponent": "bits_per_component",
    "fuzz": "fuzz",
    "outputFileName": "output_file_name",
}


def _as_int(name: str, value) -> int:
    """Accept ints and integral floats (e.g. options parsed from JSON)."""
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if not float(value).is_integer():
        raise ConfigurationError(f"{name} must be a whole number, got {value!r}")
    return int(value)


@dataclass(frozen=True)
class CompareOptions:
    """Options shared by the SSIM and channel-difference engines.

    Attributes:
        window_size: Edge length in pixels of the square SSIM windows.
        k1: Luminance stability constant factor.
        k2: Contrast stability constant factor.
        use_luminance: Weight RGB with BT.709 luma coefficients instead of
            summing the raw channels.
        bits_per_component: Sample depth, sets the dynamic range ``2**bits - 1``.
        fuzz: Largest per-channel distance still treated as a match.
        output_file_name: Where to write the diff mask. ``None`` disables it.
    """

    window_size: int = 64
    k1: float = 0.01
    k2: float = 0.03
    use_luminance: bool = True
    bits_per_component: int = 8
    fuzz: int = 32
    output_file_name: str | None = None

    def __post_init__(self):
        for name in ("window_size", "bits_per_component", "fuzz"):
            object.__setattr__(self, name, _as_int(name, getattr(self, name)))
        for name in ("k1", "k2"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Real):
                raise ConfigurationError(f"{name} must be a number, got {value!r}")
        if self.window_size < 1:
            raise ConfigurationError(f"window_size must be >= 1, got {self.window_size}")
        if not 1 <= self.bits_per_component <= 16:
            raise ConfigurationError(
                f"bits_per_component must be between 1 and 16, got {self.bits_per_component}"
            )
        if self.k1 <= 0 or self.k2 <= 0:
            raise ConfigurationError(f"K1 and K2 must be positive, got {self.k1}, {self.k2}")
        if self.fuzz < 0:
            raise ConfigurationError(f"fuzz must be >= 0, got {self.fuzz}")

    @property
    def dynamic_range(self) -> int:
        return (1 << self.bits_per_component) - 1

    @property
    def wants_diff_mask(self) -> bool:
        return bool(self.output_file_name)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> CompareOptions:
        """Build options from a dict using external or snake_case names.

        ``None`` values fall back to the defaults.
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in mapping.items():
            name = _ALIASES.get(key, key)
            if name not in known:
                raise ConfigurationError(f"Unknown option: {key!r}")
            if value is not None:
                kwargs[name] = value
        return cls(**kwargs)

    @classmethod
    def resolve(cls, options: CompareOptions | Mapping[str, Any] | None = None) -> CompareOptions:
        """Normalise ``None``, a mapping or an instance into CompareOptions."""
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        if isinstance(options, Mapping):
            return cls.from_mapping(options)
        raise ConfigurationError(
            f"options must be a mapping or CompareOptions, got {type(options).__name__}"
        )
