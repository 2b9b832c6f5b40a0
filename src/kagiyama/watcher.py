"""Watcher: liveness, readiness and metrics endpoints with coordinated shutdown."""

from __future__ import annotations

import asyncio
import functools
import json
import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeAlias

from aiohttp import hdrs, web

from kagiyama._locks import ReadWriteLock
from kagiyama.conditions import ConditionSet
from kagiyama.config.models import ServerSettings
from kagiyama.errors import (
    InvalidAddressError,
    NoActiveServerError,
    RegistryLockedError,
    ServerBindError,
)
from kagiyama.observability.metrics import (
    MetricsRegistry,
    metrics_content_type,
    render_metrics,
)
from kagiyama.readiness import ReadinessProbe
from kagiyama.signals import Subscription, TerminationSignal

logger = logging.getLogger(__name__)

Address: TypeAlias = str | tuple[str, int]

UP_METRIC_NAME = "up"
UP_METRIC_DOCUMENTATION = "Overall system readiness"

_compact_dumps = functools.partial(json.dumps, separators=(",", ":"))


@dataclass(frozen=True, slots=True)
class WatcherServer:
    """Handle for one running watcher HTTP server."""

    host: str
    port: int
    task: asyncio.Task[None]

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    async def wait_closed(self) -> None:
        await self.task


class Watcher:
    """Owns the metrics registry, the readiness probe and the shutdown broadcast.

    Example usage::

        watcher = Watcher(ReadinessConditions)
        server = await watcher.start_server("127.0.0.1:9090")

        probe = watcher.readiness_probe()
        probe.mark_ready(ReadinessConditions.DATABASE)

        with watcher.sub_registry("extra_things") as registry:
            ticks = registry.counter("ticks", "Counts up every second")

        watcher.stop_server()
        await server.wait_closed()
    """

    def __init__(
        self,
        conditions: ConditionSet | type[Enum] | Iterable[str] | None = None,
        *,
        settings: ServerSettings | None = None,
    ) -> None:
        self._settings = settings or ServerSettings()
        self._registry = MetricsRegistry()
        self._registry_lock = ReadWriteLock()
        self._probe = ReadinessProbe(conditions)
        self._termination_signal = TerminationSignal()
        self._servers: list[WatcherServer] = []

        self._registry.register_collector(
            self._probe.collector(UP_METRIC_NAME, UP_METRIC_DOCUMENTATION)
        )

    @property
    def settings(self) -> ServerSettings:
        return self._settings

    @property
    def servers(self) -> tuple[WatcherServer, ...]:
        return tuple(self._servers)

    @contextmanager
    def metrics_registry(self) -> Iterator[MetricsRegistry]:
        """Hold exclusive access to the registry for the duration of the block.

        ``/metrics`` scrapes wait while the handle is held, so keep the block short.

        Raises:
            RegistryLockedError: If exclusive access is not obtained within
                ``registry_lock_timeout_seconds``.
        """
        timeout = self._settings.registry_lock_timeout_seconds
        if not self._registry_lock.acquire_write(timeout):
            raise RegistryLockedError(timeout)
        try:
            yield self._registry
        finally:
            self._registry_lock.release_write()

    @contextmanager
    def sub_registry(self, prefix: str) -> Iterator[MetricsRegistry]:
        """Like ``metrics_registry`` but narrowed to ``prefix``."""
        with self.metrics_registry() as registry:
            yield registry.sub_registry_with_prefix(prefix)

    def readiness_probe(self) -> ReadinessProbe:
        """Return the shared probe. All callers mutate the same state."""
        return self._probe

    def render_metrics(self) -> bytes:
        with self._registry_lock.read():
            return render_metrics(self._registry)

    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_route("*", "/metrics", self._handle_metrics)
        app.router.add_route("*", "/ready", self._handle_ready)
        app.router.add_route("*", "/alive", self._handle_alive)
        app.router.add_route("*", "/{tail:.*}", self._handle_not_found)
        return app

    async def start_server(self, address: Address | None = None) -> WatcherServer:
        """Bind ``address`` and serve in a background task until ``stop_server``.

        Raises:
            InvalidAddressError: If ``address`` cannot be parsed.
            ServerBindError: If the listener cannot bind.
        """
        host, port = parse_address(
            address,
            default_host=self._settings.host,
            default_port=self._settings.port,
        )

        runner_kwargs: dict[str, Any] = {}
        if not self._settings.access_log:
            runner_kwargs["access_log"] = None
        runner = web.AppRunner(
            self.build_app(),
            handle_signals=False,
            shutdown_timeout=self._settings.shutdown_timeout_seconds,
            **runner_kwargs,
        )
        await runner.setup()

        try:
            await web.TCPSite(runner, host, port).start()
        except OSError as exc:
            await runner.cleanup()
            raise ServerBindError(host, port, exc) from exc

        bound_host, bound_port = runner.addresses[0][:2]
        subscription = self._termination_signal.subscribe()
        task = asyncio.create_task(
            self._serve(runner, subscription, f"{bound_host}:{bound_port}"),
            name=f"kagiyama-watcher-{bound_host}:{bound_port}",
        )
        server = WatcherServer(host=bound_host, port=bound_port, task=task)
        self._servers.append(server)
        task.add_done_callback(lambda _: self._forget(server))

        logger.info(
            "Watcher server listening",
            extra={"host": bound_host, "port": bound_port},
        )
        return server

    def stop_server(self) -> int:
        """Ask every running server to shut down gracefully.

        Returns:
            Number of servers notified.

        Raises:
            NoActiveServerError: If no server is listening for the signal.
        """
        logger.debug("Requesting watcher server shutdown")
        notified = self._termination_signal.send()
        if notified == 0:
            raise NoActiveServerError()
        return notified

    async def wait_closed(self) -> None:
        """Wait for every server started by this watcher to finish."""
        tasks = [server.task for server in self._servers]
        if tasks:
            await asyncio.gather(*tasks)

    async def _serve(
        self,
        runner: web.AppRunner,
        subscription: Subscription,
        address: str,
    ) -> None:
        try:
            await subscription.wait()
            logger.debug("Termination signal received", extra={"address": address})
        finally:
            subscription.close()
            await runner.cleanup()
            logger.info("Watcher server stopped", extra={"address": address})

    def _forget(self, server: WatcherServer) -> None:
        if server in self._servers:
            self._servers.remove(server)

    async def _handle_metrics(self, request: web.Request) -> web.Response:
        del request
        try:
            payload = await asyncio.to_thread(self.render_metrics)
        except Exception:
            logger.exception("Failed to render metrics")
            return web.Response(
                status=500,
                text="Internal server error",
                content_type="text/plain",
            )
        return web.Response(
            status=200,
            body=payload,
            headers={hdrs.CONTENT_TYPE: metrics_content_type()},
        )

    async def _handle_ready(self, request: web.Request) -> web.Response:
        del request
        ready, conditions = self._probe.state()
        return web.json_response(
            conditions,
            status=200 if ready else 503,
            dumps=_compact_dumps,
        )

    async def _handle_alive(self, request: web.Request) -> web.Response:
        del request
        return web.Response(status=200, text="alive", content_type="text/plain")

    async def _handle_not_found(self, request: web.Request) -> web.Response:
        del request
        return web.Response(status=404, text="Not found", content_type="text/plain")


def parse_address(
    address: Address | None,
    *,
    default_host: str,
    default_port: int,
) -> tuple[str, int]:
    """Resolve ``"host:port"``, ``"[v6]:port"`` or ``(host, port)`` into a tuple."""
    if address is None:
        return default_host, default_port

    if isinstance(address, tuple):
        if len(address) != 2:
            raise InvalidAddressError(f"expected (host, port), got {address!r}")
        host, raw_port = address
    elif isinstance(address, str):
        host, sep, raw_port = address.strip().rpartition(":")
        if not sep:
            raise InvalidAddressError(f"address must be 'host:port', got {address!r}")
        if host.startswith("[") and host.endswith("]"):
            host = host[1:-1]
    else:
        raise InvalidAddressError(f"unsupported address type: {type(address).__name__}")

    try:
        port = int(raw_port)
    except (TypeError, ValueError) as exc:
        raise InvalidAddressError(f"invalid port in address {address!r}") from exc

    host = str(host).strip()
    if host == "":
        raise InvalidAddressError(f"missing host in address {address!r}")
    if not (0 <= port <= 65535):
        raise InvalidAddressError("port must be between 0 and 65535")
    return host, port
