"""Shared fixtures: canned daemon responses and a mock transport."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
import requests
from requests.structures import CaseInsensitiveDict


def build_response(status_code=200, body=None, headers=None, raw_body=None):
    """Create a real ``requests.Response`` as the daemon would send it."""
    response = requests.Response()
    response.status_code = status_code
    response.headers = CaseInsensitiveDict(headers or {})
    if raw_body is not None:
        response._content = raw_body
    elif body is not None:
        response._content = json.dumps(body).encode()
    else:
        response._content = b""
    return response


def success(arguments=None):
    return build_response(200, {"result": "success", "arguments": arguments or {}})


def conflict(session_id="abc123"):
    headers = {"X-Transmission-Session-Id": session_id} if session_id else {}
    return build_response(409, raw_body=b"<h1>409: Conflict</h1>", headers=headers)


@pytest.fixture
def make_response():
    return build_response


@pytest.fixture
def transport():
    """A ``requests.Session`` stand-in whose ``send`` results are scripted per test."""
    return MagicMock(spec=requests.Session)


def sent_requests(transport):
    """PreparedRequests handed to the transport, in order."""
    return [call.args[0] for call in transport.send.call_args_list]


def sent_bodies(transport):
    return [json.loads(request.body) for request in sent_requests(transport)]
