"""Defines errors raised from the connection backends."""


class UnsupportedBackendError(Exception):
    """Raised when a connection URL names a backend or driver that is not supported."""

    pass


class ConfigurationError(Exception):
    """Raised when a connection URL is missing values or carries invalid arguments."""

    pass


class BackendNotInstalledError(Exception):
    """Raised when the driver for a backend is not installed."""

    pass


class ConnectionPoolClosed(Exception):
    """Raised when a connection is leased from a pool that has been disposed."""

    pass
