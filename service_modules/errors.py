"""Startup failures of the HTTPS service.

Every error here is fatal: ``main`` logs it and exits with status 1. None of
them is retried.
"""


class ServiceError(Exception):
    """Base class for all service startup errors."""


class ConfigurationError(ServiceError):
    """An environment variable holds a value the service cannot use."""


class StartupCredentialError(ServiceError):
    """A required credential file is missing or unreadable."""

    def __init__(self, message, path=None):
        super().__init__(message)
        self.path = path


class ListenerBindError(ServiceError):
    """The listener could not be bound (address in use, privilege, TLS setup)."""

    def __init__(self, message, host=None, port=None):
        super().__init__(message)
        self.host = host
        self.port = port


class TLSConfigurationError(ListenerBindError):
    """The TLS layer rejected the credentials (malformed PEM, key mismatch, bad CA)."""


class InvalidCredentialError(StartupCredentialError):
    """The TLS layer could not parse a key, certificate or CA (not valid PEM)."""
