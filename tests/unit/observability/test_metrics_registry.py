"""Tests for the prefixed metrics registry."""

from __future__ import annotations

import pytest
from prometheus_client.core import GaugeMetricFamily

from kagiyama import MetricRegistrationError, MetricsRegistry, render_metrics
from kagiyama.observability.metrics import metrics_content_type


class StaticCollector:
    def __init__(self, name: str, value: float) -> None:
        self._name = name
        self._value = value

    def collect(self):
        yield GaugeMetricFamily(self._name, "Static value", value=self._value)


def test_root_registry_uses_names_verbatim() -> None:
    registry = MetricsRegistry()
    ticks = registry.counter("ticks", "Counts up")
    ticks.inc(3)

    assert registry.get_sample_value("ticks_total") == 3.0


def test_sub_registries_compose_prefixes() -> None:
    root = MetricsRegistry()
    extra = root.sub_registry_with_prefix("extra_things")
    nested = extra.sub_registry_with_prefix("inner")

    extra.counter("ticks", "Counts up every two seconds").inc()
    nested.gauge("depth", "Nested gauge").set(7)

    assert extra.prefix == "extra_things"
    assert nested.prefix == "extra_things_inner"
    assert root.get_sample_value("extra_things_ticks_total") == 1.0
    assert root.get_sample_value("extra_things_inner_depth") == 7.0


def test_sub_registry_prefix_is_sanitized() -> None:
    sub = MetricsRegistry().sub_registry_with_prefix(" Extra-Things ")

    assert sub.prefix == "extra_things"


def test_empty_prefix_is_rejected() -> None:
    with pytest.raises(MetricRegistrationError):
        MetricsRegistry().sub_registry_with_prefix("--")


def test_same_name_in_different_sub_registries_does_not_clash() -> None:
    root = MetricsRegistry()
    root.counter("ticks", "Root ticks")
    root.sub_registry_with_prefix("extra_things").counter("ticks", "Extra ticks")

    lines = render_metrics(root).decode().splitlines()

    assert "ticks_total 0.0" in lines
    assert "extra_things_ticks_total 0.0" in lines


def test_duplicate_instrument_raises_registration_error() -> None:
    registry = MetricsRegistry()
    registry.counter("ticks", "Counts up")

    with pytest.raises(MetricRegistrationError):
        registry.counter("ticks", "Counts up again")


def test_labelled_histogram_and_summary() -> None:
    registry = MetricsRegistry()
    latency = registry.histogram(
        "latency_seconds",
        "Latency",
        labelnames=("route",),
        buckets=(0.1, 1.0),
    )
    sizes = registry.summary("payload_bytes", "Payload size")

    latency.labels(route="/ready").observe(0.05)
    sizes.observe(128)

    assert registry.get_sample_value(
        "latency_seconds_bucket", {"route": "/ready", "le": "0.1"}
    ) == 1.0
    assert registry.get_sample_value("payload_bytes_sum") == 128.0


def test_custom_collectors_register_and_unregister() -> None:
    registry = MetricsRegistry()
    collector = StaticCollector("static_value", 4.0)

    registry.register_collector(collector)
    assert registry.get_sample_value("static_value") == 4.0

    registry.unregister_collector(collector)
    assert registry.get_sample_value("static_value") is None

    with pytest.raises(MetricRegistrationError):
        registry.unregister_collector(collector)


def test_content_type_is_plain_text() -> None:
    assert metrics_content_type().startswith("text/plain")
