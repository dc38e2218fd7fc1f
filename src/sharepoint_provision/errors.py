# -*- coding: utf-8 -*-
"""
Error types raised during SharePoint provisioning.

None of these are caught or retried by the reconcilers; they propagate to
main(), which reports the message and exits with a non-zero status.
"""


class ProvisioningError(Exception):
    """Base class for every provisioning failure"""


class ConfigError(ProvisioningError):
    """A required configuration value is missing or invalid"""


class AuthError(ProvisioningError):
    """A credential input is missing or the certificate cannot be loaded"""


class SiteConnectionError(ProvisioningError, ConnectionError):
    """The token handshake or the initial site check failed"""


class NotFoundError(ProvisioningError):
    """A library that must already exist was not found"""


class RemoteRequestError(ProvisioningError):
    """
    SharePoint rejected a request.

    Attributes:
        status_code (int): HTTP status returned by SharePoint (None for network errors)
    """

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class RemoteWriteError(RemoteRequestError):
    """SharePoint rejected a create or update call"""


class FieldTypeMismatchError(ProvisioningError):
    """An existing field with the declared internal name is not a choice field"""
