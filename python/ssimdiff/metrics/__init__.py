"""ssimdiff metrics: registry and lazy factory for the comparison metrics."""

import importlib

_METRIC_REGISTRY = {
    "ssim": ("ssimdiff.metrics.ssim", "SsimMetric"),
    "channel_difference": ("ssimdiff.metrics.channel_difference", "ChannelDifferenceMetric"),
}

METRIC_META = {
    "ssim": {"category": "per_sample", "direction": "higher_is_better"},
    "channel_difference": {"category": "per_sample", "direction": "lower_is_better"},
}


def create_metric(name: str, **kwargs):
    """Create a metric instance by name with lazy imports."""
    if name not in _METRIC_REGISTRY:
        raise ValueError(
            f"Unknown metric: {name!r}. Available: {list(_METRIC_REGISTRY.keys())}"
        )
    module_path, class_name = _METRIC_REGISTRY[name]
    module = importlib.import_module(module_path)
    cls = getattr(module, class_name)
    return cls(**kwargs)


def get_metric_meta(name: str) -> dict:
    """Return category and direction metadata for a metric."""
    if name not in METRIC_META:
        return {"category": "per_sample", "direction": "higher_is_better"}
    return METRIC_META[name]


def __getattr__(name):
    if name == "SsimMetric":
        from ssimdiff.metrics.ssim import SsimMetric
        return SsimMetric
    if name == "ChannelDifferenceMetric":
        from ssimdiff.metrics.channel_difference import ChannelDifferenceMetric
        return ChannelDifferenceMetric
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["SsimMetric", "ChannelDifferenceMetric", "create_metric", "get_metric_meta"]
