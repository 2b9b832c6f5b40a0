"""Watcher without readiness conditions: `/ready` always answers 200."""

from __future__ import annotations

import asyncio
import contextlib

from prometheus_client import Counter

from kagiyama import ALWAYS_READY, Watcher, bootstrap_logging


async def tick(counter: Counter, interval_seconds: float) -> None:
    while True:
        await asyncio.sleep(interval_seconds)
        counter.inc()


async def main() -> None:
    bootstrap_logging(service="always-ready-demo", log_format="text")
    watcher = Watcher(ALWAYS_READY)
    server = await watcher.start_server("127.0.0.1:9090")

    with watcher.metrics_registry() as registry:
        every_second = registry.counter("ticks", "A demo metric, counts up every second")
    with watcher.sub_registry("extra_things") as registry:
        every_two = registry.counter("ticks", "A demo metric, counts up every two seconds")

    tasks = [
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
