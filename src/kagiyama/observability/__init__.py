"""Logging and metrics helpers used by the watcher."""

from kagiyama.observability.logging import (
    JsonFormatter,
    SamplingFilter,
    TextFormatter,
    bootstrap_logging,
    bootstrap_logging_from_settings,
)
from kagiyama.observability.metrics import (
    MetricsRegistry,
    metrics_content_type,
    render_metrics,
)

__all__ = [
    "JsonFormatter",
    "MetricsRegistry",
    "SamplingFilter",
    "TextFormatter",
    "bootstrap_logging",
    "bootstrap_logging_from_settings",
    "metrics_content_type",
    "render_metrics",
]
