"""Error taxonomy for the gateway.

``ConfigurationError``, ``UpstreamError`` and ``AccessDenied`` bubble to the
request boundary and are rendered by ``api.error_handlers``.
``CipherDecodeError`` never leaves ``crypto``: a field that cannot be
decrypted is passed through as stored.
"""


class GatewayError(Exception):
    """Base class for all gateway errors."""


class ConfigurationError(GatewayError):
    """Key material or store credentials are missing or invalid."""


class UpstreamError(GatewayError):
    """The document store returned a non-success result."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class CipherDecodeError(GatewayError):
    """A stored value looked encrypted but could not be decoded."""


class AccessDenied(GatewayError):
    """The presented credential does not grant the requested operation."""

    def __init__(self, code: str, message: str, status_code: int = 403):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
