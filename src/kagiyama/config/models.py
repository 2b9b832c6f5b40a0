"""Typed watcher settings with Pydantic validation."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ServerSettings(BaseModel):
    """Listener and shutdown settings for the watcher HTTP server."""

    model_config = ConfigDict(frozen=True)

    host: str = Field(
        default="0.0.0.0",
        min_length=1,
        description="Bind host used when start_server is called without an address",
    )
    port: int = Field(
        default=9090,
        ge=0,
        le=65535,
        description="Bind port; 0 lets the OS pick a free port",
    )
    shutdown_timeout_seconds: float = Field(
        default=10.0,
        gt=0.0,
        description="Upper bound for in-flight requests to finish after a stop signal",
    )
    registry_lock_timeout_seconds: float = Field(
        default=5.0,
        gt=0.0,
        description="How long to wait for exclusive access to the metrics registry",
    )
    access_log: bool = Field(default=False, description="Emit aiohttp access log lines")


class LoggingSettings(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(frozen=True)

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    format: Literal["json", "text"] = Field(default="json", description="Log output format")
    sampling: float | None = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Optional sampling ratio for low-severity logs",
    )


class AppSettings(BaseModel):
    """Root settings for a process embedding a watcher."""

    model_config = ConfigDict(frozen=True)

    service: str = Field(default="kagiyama", min_length=1, description="Service name")
    server: ServerSettings = Field(default_factory=ServerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
