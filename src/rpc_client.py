"""Transmission RPC request pipeline.

``RpcClient`` turns a method name and an argument mapping into an
authenticated POST, runs it through the plugin chain, and interprets the
daemon's answer. The only automatic recovery is the session id renewal:
when the daemon replies 409 with a fresh ``X-Transmission-Session-Id`` the
call is resent exactly once with that id.
"""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

import requests

from .exceptions import DomainError, InvalidArgumentError, ProtocolViolationError
from .session import SessionState
from .transport import mediator, params
from .transport.builder import Builder
from .transport.mediator import SESSION_ID_HEADER, Conflict, DomainFailure, Envelope
from .transport.plugins import (
    AuthenticationPlugin,
    ExceptionMapperPlugin,
    HeaderDefaultsPlugin,
    History,
    HistoryPlugin,
    SessionPlugin,
)
from .utils.logger import get_logger

VERSION = "2.0.0"


class CallState(enum.Enum):
    BUILDING = "building"
    SENDING = "sending"
    CLASSIFYING = "classifying"
    RENEWING = "renewing"
    DONE = "done"


@dataclass(frozen=True)
class RpcRequest:
    """One logical call. ``perform_call`` serialises it once and resends that body on retry."""

    method: str
    arguments: Dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> str:
        return json.dumps({"method": self.method, "arguments": self.arguments})


def _decode_torrent_add(envelope: Envelope) -> Dict[str, Any]:
    arguments = envelope.arguments
    if "torrent-duplicate" in arguments:
        return dict(arguments["torrent-duplicate"], duplicate=True)
    if "torrent-added" not in arguments:
        raise InvalidArgumentError(envelope.result)
    return dict(arguments["torrent-added"])


# Methods whose reply needs more than returning the envelope arguments.
_DECODERS = {
    "torrent-add": _decode_torrent_add,
}


class RpcClient:
    """Send RPC calls to a Transmission daemon.

    Parameters
    ----------
    host: str, optional
        Daemon host, loopback by default.
    port: int, optional
        Daemon RPC port, 9091 by default.
    username, password: str, optional
        HTTP Basic credentials. Authentication is only installed when a
        username is given.
    http_builder: Builder, optional
        Pre-built HTTP client. The client works on a copy, so its session
        and history plugins never leak into the caller's builder or into
        other clients built from it. A ``Builder`` around a new
        ``requests.Session`` is used when omitted.
    timeout: float, optional
        Seconds the transport may block on a single send.
    path: str, optional
        RPC endpoint path.
    session_id: str, optional
        Session id to start with, e.g. one persisted across restarts.
    """

    path = "/transmission/rpc"

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        http_builder: Optional[Builder] = None,
        timeout: Optional[float] = 30.0,
        path: Optional[str] = None,
        session_id: Optional[str] = None,
    ):
        self.host = host or "127.0.0.1"
        self.port = port or 9091
        if path:
            self.path = path
        self._enable_tls = False

        self.session = SessionState(session_id)
        self.history = History()
        self.http_builder = http_builder.clone() if http_builder is not None else Builder(timeout=timeout)
        self.http_builder.add_plugin(ExceptionMapperPlugin())
        self.http_builder.add_plugin(HistoryPlugin(self.history))
        self.http_builder.add_plugin(SessionPlugin(self.session))
        self.http_builder.add_plugin(HeaderDefaultsPlugin({"User-Agent": self.default_user_agent()}))
        self.logger = get_logger(self.__class__.__name__)

        if username:
            self.authenticate(username, password or "")

    @classmethod
    def create(cls, host=None, port=None, username=None, password=None):
        return cls(host, port, username, password)

    @classmethod
    def create_with_http_client(cls, http_client, host=None, port=None, username=None, password=None, timeout=30.0):
        """Build a client on top of an existing ``requests.Session``-like transport."""
        return cls(host, port, username, password, Builder(http_client, timeout=timeout))

    @classmethod
    def from_config(cls, config, http_client=None):
        """Build a client from a ``config_manager.Config``."""
        client = cls(
            config.host,
            config.port,
            config.username,
            config.password,
            Builder(http_client, timeout=config.timeout),
            path=config.rpc_path,
            session_id=config.session_id,
        )
        if config.enable_tls:
            client.enable_tls()
        return client

    def is_tls_enabled(self) -> bool:
        return self._enable_tls

    def enable_tls(self):
        self._enable_tls = True
        return self

    @property
    def url(self) -> str:
        scheme = "https" if self._enable_tls else "http"
        host = f"[{self.host}]" if ":" in self.host and not self.host.startswith("[") else self.host
        return f"{scheme}://{host}:{self.port}{self.path}"

    def authenticate(self, username: str, password: str = ""):
        """Use HTTP Basic credentials for all following requests."""
        self.http_builder.add_plugin(AuthenticationPlugin(username, password))
        return self

    def set_session_id(self, session_id: str):
        self.session.set(session_id)
        return self

    def get_session_id(self) -> Optional[str]:
        return self.session.get()

    def get_last_exchange(self) -> Tuple[Optional[requests.PreparedRequest], Optional[requests.Response]]:
        """Return the last (request, response) pair seen by the transport."""
        return self.history.last_exchange()

    def default_user_agent(self) -> str:
        return f"transmission-sdk/{VERSION}"

    def perform_call(self, method: str, arguments: Optional[Mapping[str, Any]] = None) -> Any:
        """Run one RPC call and return its decoded result.

        The result is the envelope's ``arguments`` mapping, except for
        methods with a dedicated decoder (``torrent-add``).

        Raises
        ------
        NetworkError
            The transport failed; the call is not retried.
        DomainError
            The daemon answered with a ``result`` other than "success".
        ProtocolViolationError
            The reply broke the protocol, including a second 409 in a row.
        InvalidArgumentError
            A ``torrent-add`` reply carried neither payload.
        """
        state = CallState.BUILDING
        request: Optional[RpcRequest] = None
        body = ""
        response: Optional[requests.Response] = None
        pinned_session_id: Optional[str] = None
        result: Any = None

        while state is not CallState.DONE:
            if state is CallState.BUILDING:
                request = RpcRequest(method, params.build(arguments))
                body = request.to_json()
                state = CallState.SENDING

            elif state is CallState.SENDING:
                response = self._send(method, body, pinned_session_id)
                state = CallState.CLASSIFYING

            elif state is CallState.CLASSIFYING:
                outcome = mediator.classify(response)
                if isinstance(outcome, Conflict):
                    if pinned_session_id is not None:
                        raise ProtocolViolationError(
                            f"Daemon rejected renewed session id for '{method}'"
                        )
                    pinned_session_id = outcome.session_id
                    state = CallState.RENEWING
                elif isinstance(outcome, DomainFailure):
                    self.logger.error("RPC '%s' failed: %s", method, outcome.message)
                    raise DomainError(outcome.message, outcome.envelope.arguments)
                else:
                    result = self._decode(method, outcome.envelope)
                    state = CallState.DONE

            elif state is CallState.RENEWING:
                self.logger.info("Session id renewed, retrying '%s'", method)
                self.session.set(pinned_session_id)
                state = CallState.SENDING

        return result

    def _send(self, method: str, body: str, session_id: Optional[str]) -> requests.Response:
        headers = {"Content-Type": "application/json"}
        if session_id is not None:
            headers[SESSION_ID_HEADER] = session_id
        self.logger.debug("Sending RPC '%s'", method)
        return self.http_builder.send("POST", self.url, headers, body)

    @staticmethod
    def _decode(method: str, envelope: Envelope) -> Any:
        decoder = _DECODERS.get(method)
        if decoder is not None:
            return decoder(envelope)
        return envelope.arguments
