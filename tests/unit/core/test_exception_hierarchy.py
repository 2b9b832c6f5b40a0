"""Tests for the exception hierarchy."""

from __future__ import annotations

import pytest

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


class TestExceptionHierarchy:
    """Every package error is a KagiyamaError; some are builtin errors too."""

    @pytest.mark.parametrize(
        "error",
        [
            UnknownConditionError("x"),
            RegistryLockedError(1.0),
            MetricRegistrationError("dup"),
            InvalidAddressError("bad"),
            ServerBindError("127.0.0.1", 80, PermissionError("denied")),
            NoActiveServerError(),
            ConfigValidationError([]),
            ConfigFileNotFoundError("watcher.json"),
        ],
    )
    def test_is_kagiyama_error(self, error: Exception) -> None:
        assert isinstance(error, KagiyamaError)

    def test_builtin_bases(self) -> None:
        assert isinstance(UnknownConditionError("x"), KeyError)
        assert isinstance(MetricRegistrationError("dup"), ValueError)
        assert isinstance(InvalidAddressError("bad"), ValueError)
        assert isinstance(ServerBindError("h", 1, OSError("in use")), OSError)

    def test_registry_locked_is_retryable(self) -> None:
        error = RegistryLockedError(0.5)

        assert error.retryable is True
        assert "0.5s" in str(error)

    def test_server_bind_error_keeps_reason(self) -> None:
        reason = OSError(98, "Address already in use")
        error = ServerBindError("127.0.0.1", 9090, reason)

        assert error.reason is reason
        assert "127.0.0.1:9090" in str(error)

    def test_config_validation_error_lists_locations(self) -> None:
        error = ConfigValidationError([{"loc": "server -> port", "msg": "too large"}])

        assert "server -> port: too large" in str(error)
