"""Request/response interceptors composed around the transport call.

Each plugin receives the prepared request and a ``next_`` callable that
runs the rest of the chain, and returns the response. Plugins are
identified by a ``PluginTag`` so the builder can replace one (new
credentials, for instance) without touching the others.
"""

from __future__ import annotations

import enum
from typing import Callable, Dict, Optional, Tuple

import requests
from requests.auth import HTTPBasicAuth

from ..exceptions import NetworkError
from ..session import SessionState
from ..utils.logger import get_logger
from .mediator import SESSION_ID_HEADER

NextHandler = Callable[[requests.PreparedRequest], requests.Response]


class PluginTag(enum.Enum):
    HEADER_DEFAULTS = "header_defaults"
    AUTHENTICATION = "authentication"
    SESSION = "session"
    HISTORY = "history"
    ERROR_MAPPER = "error_mapper"


# Outermost first. The error mapper sits directly around the transport.
PLUGIN_ORDER: Tuple[PluginTag, ...] = (
    PluginTag.HEADER_DEFAULTS,
    PluginTag.AUTHENTICATION,
    PluginTag.SESSION,
    PluginTag.HISTORY,
    PluginTag.ERROR_MAPPER,
)


class Plugin:
    """Base class for interceptors."""

    tag: PluginTag

    def handle(self, request: requests.PreparedRequest, next_: NextHandler) -> requests.Response:
        raise NotImplementedError


class HeaderDefaultsPlugin(Plugin):
    """Set headers that the request does not already carry."""

    tag = PluginTag.HEADER_DEFAULTS

    def __init__(self, headers: Dict[str, str]):
        self.headers = dict(headers)

    def handle(self, request, next_):
        for name, value in self.headers.items():
            request.headers.setdefault(name, value)
        return next_(request)


class AuthenticationPlugin(Plugin):
    """Attach HTTP Basic credentials to every outgoing request."""

    tag = PluginTag.AUTHENTICATION

    def __init__(self, username: str, password: str = ""):
        self.username = username
        self._auth = HTTPBasicAuth(username, password or "")

    def handle(self, request, next_):
        return next_(self._auth(request))

    def __repr__(self) -> str:
        return f"AuthenticationPlugin(username={self.username!r})"


class SessionPlugin(Plugin):
    """Inject the current session id, read at send time.

    A request that already pins a session id (a retry after renewal) keeps
    it, so the retry carries the id its own call learned.
    """

    tag = PluginTag.SESSION

    def __init__(self, session: SessionState):
        self.session = session

    def handle(self, request, next_):
        if SESSION_ID_HEADER not in request.headers:
            current = self.session.get()
            if current:
                request.headers[SESSION_ID_HEADER] = current
        return next_(request)


class History:
    """Most recent request/response exchange, kept for diagnostics."""

    def __init__(self):
        self.last_request: Optional[requests.PreparedRequest] = None
        self.last_response: Optional[requests.Response] = None

    def record(self, request: requests.PreparedRequest, response: requests.Response) -> None:
        self.last_request = request
        self.last_response = response

    def last_exchange(self) -> Tuple[Optional[requests.PreparedRequest], Optional[requests.Response]]:
        return self.last_request, self.last_response


class HistoryPlugin(Plugin):
    tag = PluginTag.HISTORY

    def __init__(self, history: History):
        self.history = history

    def handle(self, request, next_):
        response = next_(request)
        self.history.record(request, response)
        return response


class ExceptionMapperPlugin(Plugin):
    """Translate ``requests`` transport failures into ``NetworkError``."""

    tag = PluginTag.ERROR_MAPPER

    def __init__(self):
        self.logger = get_logger(self.__class__.__name__)

    def handle(self, request, next_):
        try:
            return next_(request)
        except requests.RequestException as exc:
            self.logger.error("Transport failure for %s: %s", request.url, exc)
            raise NetworkError(str(exc)) from exc
