"""Readiness probe: a fixed set of boolean conditions and their conjunction."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from enum import Enum

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.registry import Collector

from kagiyama._locks import ReadWriteLock
from kagiyama.conditions import Condition, ConditionSet

logger = logging.getLogger(__name__)


class ReadinessProbe:
    """Tracks named readiness conditions and mirrors their conjunction as a gauge.

    Every subsystem that receives the probe shares the same state; hand the
    object around rather than copying it. Writes update the mapping and the
    ``up`` value inside one critical section, so a reader never observes one
    without the other.

    Example::

        probe = ReadinessProbe(ConditionSet.of("database", "cache"))
        probe.mark_ready("database")
        probe.is_ready()  # False
        probe.mark_ready("cache")
        probe.is_ready()  # True
    """

    def __init__(
        self,
        conditions: ConditionSet | type[Enum] | Iterable[str] | None = None,
    ) -> None:
        self._condition_set = ConditionSet.coerce(conditions)
        self._conditions: dict[str, bool] = {name: False for name in self._condition_set}
        self._lock = ReadWriteLock()
        self._up = self._compute_up()

    @property
    def condition_set(self) -> ConditionSet:
        return self._condition_set

    @property
    def up(self) -> int:
        """Current gauge value: 1 when ready, 0 otherwise."""
        with self._lock.read():
            return self._up

    def is_ready(self) -> bool:
        """Return True iff every condition is ready. An empty set is always ready."""
        with self._lock.read():
            return all(self._conditions.values())

    def snapshot(self) -> dict[str, bool]:
        with self._lock.read():
            return dict(self._conditions)

    def state(self) -> tuple[bool, dict[str, bool]]:
        """Return readiness and the condition mapping read under one lock."""
        with self._lock.read():
            return all(self._conditions.values()), dict(self._conditions)

    def mark_ready(self, condition: Condition) -> None:
        self._set_condition(condition, True)

    def mark_not_ready(self, condition: Condition) -> None:
        self._set_condition(condition, False)

    def collector(self, name: str = "up", documentation: str = "Overall system readiness") -> Collector:
        """Build a Prometheus collector exporting the ``up`` value under ``name``."""
        return _ReadinessCollector(self, name=name, documentation=documentation)

    def _set_condition(self, condition: Condition, ready: bool) -> None:
        key = self._condition_set.key(condition)
        with self._lock.write():
            previous = self._conditions[key]
            self._conditions[key] = ready
            self._up = self._compute_up()
            up = self._up

        if previous != ready:
            logger.debug(
                "Readiness condition changed",
                extra={"condition": key, "ready": ready, "up": up},
            )

    def _compute_up(self) -> int:
        return 1 if all(self._conditions.values()) else 0

    def __repr__(self) -> str:
        return f"ReadinessProbe({self._condition_set!r}, up={self.up})"


class _ReadinessCollector(Collector):
    def __init__(self, probe: ReadinessProbe, *, name: str, documentation: str) -> None:
        self._probe = probe
        self._name = name
        self._documentation = documentation

    def describe(self) -> Iterable[GaugeMetricFamily]:
        return [GaugeMetricFamily(self._name, self._documentation)]

    def collect(self) -> Iterator[GaugeMetricFamily]:
        yield GaugeMetricFamily(self._name, self._documentation, value=self._probe.up)


__all__ = ["ReadinessProbe"]
