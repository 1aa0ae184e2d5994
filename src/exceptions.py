"""Error taxonomy for the Transmission RPC client.

Every failure raised by the request pipeline derives from
``TransmissionError`` so callers can catch the whole family at once.
"""

from __future__ import annotations

from typing import Optional


class TransmissionError(Exception):
    """Base class for all errors raised by this package."""


class NetworkError(TransmissionError):
    """The transport could not complete the exchange (connect, DNS, TLS, timeout)."""


class ProtocolViolationError(TransmissionError):
    """The daemon answered in a way the RPC protocol does not allow."""


class DomainError(TransmissionError):
    """The daemon parsed the request but reported a failure in ``result``."""

    def __init__(self, message: str, arguments: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.arguments = arguments or {}


class InvalidArgumentError(TransmissionError, ValueError):
    """A call was shaped in a way the client cannot send or decode."""


class HttpError(TransmissionError):
    """The daemon replied with an HTTP status that carries no RPC envelope."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(HttpError):
    """The daemon rejected the configured credentials."""


class ConfigurationError(TransmissionError):
    """Raised when configuration is missing or invalid."""
