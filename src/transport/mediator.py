"""Classification of raw HTTP responses into RPC outcomes.

The daemon answers every call in one of three ways: an envelope whose
``result`` is ``"success"``, an envelope carrying an error message in
``result``, or a 409 telling the client to resend with the session id
found in the response headers. Anything else is a protocol violation or
an HTTP level failure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

import requests

from ..exceptions import AuthenticationError, HttpError, ProtocolViolationError

SESSION_ID_HEADER = "X-Transmission-Session-Id"
CONFLICT_STATUS = 409
SUCCESS_RESULT = "success"


@dataclass(frozen=True)
class Envelope:
    """Decoded ``{"result": ..., "arguments": {...}}`` body."""

    result: str
    arguments: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return self.result == SUCCESS_RESULT


@dataclass(frozen=True)
class Success:
    envelope: Envelope


@dataclass(frozen=True)
class DomainFailure:
    message: str
    envelope: Envelope


@dataclass(frozen=True)
class Conflict:
    session_id: str


Classification = Union[Success, DomainFailure, Conflict]


def session_id(response: requests.Response) -> Optional[str]:
    """Return the session id header of ``response`` or None when blank."""
    value = response.headers.get(SESSION_ID_HEADER, "")
    value = value.strip() if value else ""
    return value or None


def is_conflict(response: requests.Response) -> bool:
    return response.status_code == CONFLICT_STATUS


def get_content(response: requests.Response) -> Envelope:
    """Decode the JSON envelope of a 2xx response.

    Raises
    ------
    ProtocolViolationError
        If the body is not JSON, not an object, or lacks a string ``result``.
    """
    try:
        data = response.json()
    except ValueError as exc:
        raise ProtocolViolationError(f"Unable to decode RPC response body: {exc}") from exc

    if not isinstance(data, dict):
        raise ProtocolViolationError(f"RPC response is not a JSON object: {data!r}")

    result = data.get("result")
    if not isinstance(result, str):
        raise ProtocolViolationError("RPC response has no 'result' field")

    arguments = data.get("arguments") or {}
    if not isinstance(arguments, dict):
        raise ProtocolViolationError("RPC response 'arguments' is not a JSON object")

    return Envelope(result=result, arguments=arguments)


def classify(response: requests.Response) -> Classification:
    """Classify ``response`` as success, domain failure or session conflict.

    Raises
    ------
    ProtocolViolationError
        On a 409 without a session id header or an undecodable body.
    AuthenticationError
        On 401/403, which the daemon sends before any envelope is built.
    HttpError
        On any other non-2xx status.
    """
    if is_conflict(response):
        new_session_id = session_id(response)
        if new_session_id is None:
            raise ProtocolViolationError(f"Unable to retrieve {SESSION_ID_HEADER}")
        return Conflict(new_session_id)

    status = response.status_code
    if status in (401, 403):
        raise AuthenticationError(f"Daemon rejected credentials (HTTP {status})", status)
    if status < 200 or status >= 300:
        raise HttpError(f"Unexpected HTTP status {status} from daemon", status)

    envelope = get_content(response)
    if envelope.is_success:
        return Success(envelope)
    return DomainFailure(envelope.result, envelope)
