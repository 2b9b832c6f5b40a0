"""Liveness, readiness and Prometheus metrics endpoints for long-running processes."""

from kagiyama.conditions import ALWAYS_READY, Condition, ConditionSet
from kagiyama.config import AppSettings, LoggingSettings, ServerSettings, load_config
from kagiyama.errors import (
    ConfigFileNotFoundError,
    ConfigValidationError,
    InvalidAddressError,
    KagiyamaError,
    MetricRegistrationError,
    NoActiveServerError,
    RegistryLockedError,
    ServerBindError,
    UnknownConditionError,
)
from kagiyama.observability import (
    MetricsRegistry,
    bootstrap_logging,
    bootstrap_logging_from_settings,
    render_metrics,
)
from kagiyama.readiness import ReadinessProbe
from kagiyama.signals import TerminationSignal
from kagiyama.watcher import Watcher, WatcherServer

__all__ = [
    "ALWAYS_READY",
    "AppSettings",
    "Condition",
    "ConditionSet",
    "ConfigFileNotFoundError",
    "ConfigValidationError",
    "InvalidAddressError",
    "KagiyamaError",
    "LoggingSettings",
    "MetricRegistrationError",
    "MetricsRegistry",
    "NoActiveServerError",
    "ReadinessProbe",
    "RegistryLockedError",
    "ServerBindError",
    "ServerSettings",
    "TerminationSignal",
    "UnknownConditionError",
    "Watcher",
    "WatcherServer",
    "bootstrap_logging",
    "bootstrap_logging_from_settings",
    "load_config",
    "render_metrics",
]
