"""Tests for the exception hierarchy."""

from faxrelay.errors import (
    AccountSourceError,
    ConfigError,
    DispatchError,
    FaxRelayError,
    RefreshError,
    StartupConfigurationError,
)


def test_base_error_is_exception() -> None:
    assert issubclass(FaxRelayError, Exception)


def test_startup_error_is_config_error() -> None:
    err = StartupConfigurationError("no creds")
    assert isinstance(err, ConfigError)
    assert isinstance(err, FaxRelayError)
    assert str(err) == "no creds"


def test_catch_all_with_base() -> None:
    """All subclasses catchable via FaxRelayError."""
    for cls in (
        ConfigError,
        StartupConfigurationError,
        AccountSourceError,
        RefreshError,
            DispatchError,
    ):
        try:
            raise cls("test")
        except FaxRelayError:
            pass
