"""Project-level exception hierarchy."""


class FaxRelayError(Exception):
    """Base for all faxrelay exceptions."""


class ConfigError(FaxRelayError):
    """Configuration could not be read or is invalid."""


class StartupConfigurationError(ConfigError):
    """Configuration is unsafe or incomplete; the server must not start."""


class AccountSourceError(FaxRelayError):
    """Account file is unreachable or malformed."""


class RefreshError(FaxRelayError):
    """Periodic directory reload failed."""


class DispatchError(FaxRelayError):
    """Sending a notification to one contact failed."""
