"""Custom exceptions for the kagiyama watcher."""


class KagiyamaError(Exception):
    """Base exception for this package."""


class UnknownConditionError(KagiyamaError, KeyError):
    """Raised when marking a condition that is not part of the probe's condition set."""

    def __init__(self, condition: object) -> None:
        self.condition = condition
        super().__init__(f"Unknown readiness condition: {condition!r}")

    def __str__(self) -> str:
        return str(self.args[0])


class RegistryLockedError(KagiyamaError):
    """Raised when exclusive access to the metrics registry could not be obtained.

    The registry is left untouched; callers may retry.
    """

    retryable = True

    def __init__(self, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Cannot lock metrics registry: still held after {timeout_seconds:g}s"
        )


class MetricRegistrationError(KagiyamaError, ValueError):
    """Raised when an instrument cannot be registered (duplicate or invalid name)."""


class InvalidAddressError(KagiyamaError, ValueError):
    """Raised when a listen address cannot be parsed."""


class ServerBindError(KagiyamaError, OSError):
    """Raised when the HTTP listener cannot bind its address."""

    def __init__(self, host: str, port: int, reason: OSError) -> None:
        self.host = host
        self.port = port
        self.reason = reason
        super().__init__(f"Cannot bind watcher server to {host}:{port}: {reason}")

    def __str__(self) -> str:
        return str(self.args[0])


class NoActiveServerError(KagiyamaError):
    """Raised by ``stop_server`` when no running server is listening for shutdown."""

    def __init__(self) -> None:
        super().__init__("No active watcher server to stop")


class ConfigValidationError(KagiyamaError):
    """Raised when watcher settings fail validation."""

    def __init__(self, errors: list[dict[str, str]]) -> None:
        self.errors = errors
        messages = []
        for err in errors:
            loc = err.get("loc", "unknown")
            msg = err.get("msg", "validation error")
            messages.append(f"  - {loc}: {msg}")
        detail = "\n".join(messages)
        super().__init__(f"Configuration validation failed:\n{detail}")


class ConfigFileNotFoundError(KagiyamaError):
    """Raised when a required configuration file is not found."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Configuration file not found: {path}")
