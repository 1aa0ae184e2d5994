"""Transmission RPC client with automatic session id renewal."""

from .client import Client
from .exceptions import (
    AuthenticationError,
    ConfigurationError,
    DomainError,
    HttpError,
    InvalidArgumentError,
    NetworkError,
    ProtocolViolationError,
    TransmissionError,
)
from .rpc_client import VERSION, RpcClient
from .session import SessionState

__version__ = VERSION
