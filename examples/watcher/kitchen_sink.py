"""Watcher with three readiness conditions fed by simulated subsystems."""

from __future__ import annotations

import asyncio
import contextlib
from enum import Enum

from prometheus_client import Counter

from kagiyama import ReadinessProbe, Watcher, bootstrap_logging


class ReadinessConditions(Enum):
    ONE = "one"
    TWO = "two"
    THREE = "three"


async def start_subsystem(
    probe: ReadinessProbe,
    condition: ReadinessConditions,
    delay_seconds: float,
) -> None:
    await asyncio.sleep(delay_seconds)
    probe.mark_ready(condition)


async def flap(probe: ReadinessProbe, condition: ReadinessConditions, period_seconds: float) -> None:
    while True:
        probe.mark_ready(condition)
        await asyncio.sleep(period_seconds)
        probe.mark_not_ready(condition)
        await asyncio.sleep(period_seconds)


async def tick(counter: Counter, interval_seconds: float) -> None:
    while True:
        await asyncio.sleep(interval_seconds)
        counter.inc()


async def main() -> None:
    bootstrap_logging(service="kitchen-sink-demo", level="DEBUG", log_format="text")
    watcher = Watcher(ReadinessConditions)
    server = await watcher.start_server("127.0.0.1:9090")

    with watcher.metrics_registry() as registry:
        every_second = registry.counter("ticks", "A demo metric, counts up every second")
    with watcher.sub_registry("extra_things") as registry:
        every_two = registry.counter("ticks", "A demo metric, counts up every two seconds")

    probe = watcher.readiness_probe()
    tasks = [
        asyncio.create_task(start_subsystem(probe, ReadinessConditions.ONE, 2.0)),
        asyncio.create_task(start_subsystem(probe, ReadinessConditions.TWO, 6.0)),
        asyncio.create_task(flap(probe, ReadinessConditions.THREE, 5.0)),
        asyncio.create_task(tick(every_second, 1.0)),
        asyncio.create_task(tick(every_two, 2.0)),
    ]
    try:
        await asyncio.sleep(300)
    finally:
        for task in tasks:
            task.cancel()
        watcher.stop_server()
        await server.wait_closed()


if __name__ == "__main__":
    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(main())
