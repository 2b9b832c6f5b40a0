"""Prometheus registry wrapper with prefix-addressable sub-registries."""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

import prometheus_client
from prometheus_client.registry import Collector, CollectorRegistry

from kagiyama.errors import MetricRegistrationError

_PREFIX_NORMALIZER = re.compile(r"[^a-zA-Z0-9_]+")

_InstrumentT = TypeVar("_InstrumentT")


def _sanitize_prefix(value: str) -> str:
    normalized = _PREFIX_NORMALIZER.sub("_", value.strip().lower()).strip("_")
    if normalized == "":
        raise MetricRegistrationError(f"invalid registry prefix: {value!r}")
    return normalized


class MetricsRegistry:
    """Named, hierarchically prefixed collection of Prometheus instruments.

    Sub-registries share the backing ``CollectorRegistry``; they only differ in
    the prefix prepended to the names of instruments created through them::

        root = MetricsRegistry()
        extra = root.sub_registry_with_prefix("extra_things")
        ticks = extra.counter("ticks", "Counts up every two seconds")
        # exported as extra_things_ticks_total
    """

    def __init__(
        self,
        registry: CollectorRegistry | None = None,
        *,
        prefix: str = "",
    ) -> None:
        self._registry = CollectorRegistry() if registry is None else registry
        self._prefix = prefix

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def collector_registry(self) -> CollectorRegistry:
        return self._registry

    def sub_registry_with_prefix(self, prefix: str) -> MetricsRegistry:
        segment = _sanitize_prefix(prefix)
        composed = f"{self._prefix}_{segment}" if self._prefix else segment
        return MetricsRegistry(self._registry, prefix=composed)

    def counter(
        self,
        name: str,
        documentation: str,
        *,
        labelnames: Sequence[str] = (),
        unit: str = "",
    ) -> prometheus_client.Counter:
        return self._create(
            prometheus_client.Counter,
            name,
            documentation,
            labelnames=tuple(labelnames),
            unit=unit,
        )

    def gauge(
        self,
        name: str,
        documentation: str,
        *,
        labelnames: Sequence[str] = (),
        unit: str = "",
    ) -> prometheus_client.Gauge:
        return self._create(
            prometheus_client.Gauge,
            name,
            documentation,
            labelnames=tuple(labelnames),
            unit=unit,
        )

    def histogram(
        self,
        name: str,
        documentation: str,
        *,
        labelnames: Sequence[str] = (),
        unit: str = "",
        buckets: Sequence[float] = prometheus_client.Histogram.DEFAULT_BUCKETS,
    ) -> prometheus_client.Histogram:
        return self._create(
            prometheus_client.Histogram,
            name,
            documentation,
            labelnames=tuple(labelnames),
            unit=unit,
            buckets=tuple(buckets),
        )

    def summary(
        self,
        name: str,
        documentation: str,
        *,
        labelnames: Sequence[str] = (),
        unit: str = "",
    ) -> prometheus_client.Summary:
        return self._create(
            prometheus_client.Summary,
            name,
            documentation,
            labelnames=tuple(labelnames),
            unit=unit,
        )

    def info(
        self,
        name: str,
        documentation: str,
        *,
        labelnames: Sequence[str] = (),
    ) -> prometheus_client.Info:
        return self._create(
            prometheus_client.Info,
            name,
            documentation,
            labelnames=tuple(labelnames),
        )

    def register_collector(self, collector: Collector) -> None:
        """Register a custom collector. Its metric names are used verbatim."""
        try:
            self._registry.register(collector)
        except ValueError as exc:
            raise MetricRegistrationError(str(exc)) from exc

    def unregister_collector(self, collector: Collector) -> None:
        try:
            self._registry.unregister(collector)
        except KeyError as exc:
            raise MetricRegistrationError("collector is not registered") from exc

    def get_sample_value(
        self,
        name: str,
        labels: dict[str, str] | None = None,
    ) -> float | None:
        return self._registry.get_sample_value(name, labels)

    def _create(
        self,
        factory: Callable[..., _InstrumentT],
        name: str,
        documentation: str,
        **kwargs: Any,
    ) -> _InstrumentT:
        try:
            return factory(
                name,
                documentation,
                namespace=self._prefix,
                registry=self._registry,
                **kwargs,
            )
        except ValueError as exc:
            raise MetricRegistrationError(str(exc)) from exc

    def __repr__(self) -> str:
        return f"MetricsRegistry(prefix={self._prefix!r})"


def metrics_content_type() -> str:
    """Return Prometheus exposition media type."""
    return str(prometheus_client.CONTENT_TYPE_LATEST)


def render_metrics(registry: MetricsRegistry | CollectorRegistry) -> bytes:
    """Render current metrics in exposition text format."""
    if isinstance(registry, MetricsRegistry):
        registry = registry.collector_registry
    return bytes(prometheus_client.generate_latest(registry))
