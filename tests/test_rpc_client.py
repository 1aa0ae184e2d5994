"""Tests for the request pipeline: session renewal, decoding and failures."""

from __future__ import annotations

import base64
import json
import threading

import pytest
import requests

from conftest import build_response, conflict, sent_bodies, sent_requests, success
from transmission_sdk.exceptions import (
    DomainError,
    InvalidArgumentError,
    NetworkError,
    ProtocolViolationError,
)
from transmission_sdk.rpc_client import RpcClient, RpcRequest
from transmission_sdk.transport.builder import Builder


def _client(transport, **kwargs):
    return RpcClient.create_with_http_client(transport, **kwargs)


def test_request_body_shape():
    request = RpcRequest("torrent-get", {"ids": [1]})
    assert json.loads(request.to_json()) == {"method": "torrent-get", "arguments": {"ids": [1]}}


def test_conflict_then_success_retries_once_with_new_session_id(transport):
    transport.send.side_effect = [conflict("abc123"), success({"torrents": []})]
    client = _client(transport)

    result = client.perform_call("torrent-get", {"ids": [1]})

    assert result == {"torrents": []}
    assert client.get_session_id() == "abc123"
    assert transport.send.call_count == 2
    first, second = sent_requests(transport)
    assert "X-Transmission-Session-Id" not in first.headers
    assert second.headers["X-Transmission-Session-Id"] == "abc123"
    assert sent_bodies(transport) == [
        {"method": "torrent-get", "arguments": {"ids": [1]}},
        {"method": "torrent-get", "arguments": {"ids": [1]}},
    ]


def test_second_conflict_is_fatal_and_not_retried_again(transport):
    transport.send.side_effect = [conflict("first"), conflict("second"), success()]
    client = _client(transport)

    with pytest.raises(ProtocolViolationError):
        client.perform_call("session-stats")

    assert transport.send.call_count == 2


def test_conflict_without_session_header_is_not_retried(transport):
    transport.send.side_effect = [conflict(session_id=None), success()]
    client = _client(transport)

    with pytest.raises(ProtocolViolationError):
        client.perform_call("session-stats")

    assert transport.send.call_count == 1


def test_known_session_id_is_sent_on_first_attempt(transport):
    transport.send.return_value = success()
    client = _client(transport)
    client.set_session_id("old")
    client.set_session_id("T1")

    client.perform_call("session-stats")

    assert sent_requests(transport)[0].headers["X-Transmission-Session-Id"] == "T1"


def test_learned_session_id_is_reused_by_later_calls(transport):
    transport.send.side_effect = [conflict("learned"), success(), success()]
    client = _client(transport)

    client.perform_call("session-stats")
    client.perform_call("session-stats")

    assert transport.send.call_count == 3
    assert sent_requests(transport)[2].headers["X-Transmission-Session-Id"] == "learned"


def test_retry_uses_the_session_id_its_own_call_learned(transport, monkeypatch):
    transport.send.side_effect = [conflict("mine"), success()]
    client = _client(transport)
    original_set = client.session.set

    def racing_set(value):
        original_set(value)
        # another caller renews the shared id right after this call did
        if value == "mine":
            original_set("someone-else")

    monkeypatch.setattr(client.session, "set", racing_set)
    client.perform_call("session-stats")

    assert sent_requests(transport)[1].headers["X-Transmission-Session-Id"] == "mine"
    assert client.get_session_id() == "someone-else"


def test_domain_error_carries_daemon_message(transport):
    transport.send.return_value = build_response(200, {"result": "bad id", "arguments": {}})
    client = _client(transport)

    with pytest.raises(DomainError) as excinfo:
        client.perform_call("torrent-start", {"ids": [99]})

    assert excinfo.value.message == "bad id"
    assert str(excinfo.value) == "bad id"
    assert transport.send.call_count == 1


def test_network_failure_is_not_retried(transport):
    transport.send.side_effect = requests.exceptions.ConnectionError("refused")
    client = _client(transport)

    with pytest.raises(NetworkError):
        client.perform_call("session-stats")

    assert transport.send.call_count == 1


def test_torrent_add_duplicate_is_marked(transport):
    existing = {"id": 4, "name": "debian.iso", "hashString": "a" * 40}
    transport.send.return_value = success({"torrent-duplicate": existing})
    client = _client(transport)

    result = client.perform_call("torrent-add", {"filename": "http://example.com/debian.torrent"})

    assert result == dict(existing, duplicate=True)


def test_torrent_add_returns_added_payload(transport):
    added = {"id": 5, "name": "ubuntu.iso", "hashString": "b" * 40}
    transport.send.return_value = success({"torrent-added": added})
    client = _client(transport)

    assert client.perform_call("torrent-add", {"filename": "magnet:?xt=urn:btih:bb"}) == added


def test_torrent_add_without_payload_is_invalid(transport):
    transport.send.return_value = success({})
    client = _client(transport)

    with pytest.raises(InvalidArgumentError):
        client.perform_call("torrent-add", {"filename": "magnet:?xt=urn:btih:cc"})


def test_last_exchange_reflects_the_final_attempt(transport):
    final = success({"x": 1})
    transport.send.side_effect = [conflict("abc"), final]
    client = _client(transport)

    client.perform_call("session-get")

    request, response = client.get_last_exchange()
    assert response is final
    assert request.headers["X-Transmission-Session-Id"] == "abc"


def test_url_honours_host_port_and_tls(transport):
    client = _client(transport, host="nas.local", port=9092)
    assert client.url == "http://nas.local:9092/transmission/rpc"
    assert not client.is_tls_enabled()
    client.enable_tls()
    assert client.url == "https://nas.local:9092/transmission/rpc"


def test_defaults(transport):
    client = _client(transport)
    assert client.url == "http://127.0.0.1:9091/transmission/rpc"
    assert client.get_session_id() is None


def test_credentials_are_replaced(transport):
    transport.send.return_value = success()
    client = _client(transport, username="first", password="one")
    client.authenticate("second", "two")

    client.perform_call("session-stats")

    request = sent_requests(transport)[0]
    assert request.headers["Authorization"] == "Basic " + base64.b64encode(b"second:two").decode()


def test_no_authorization_header_without_credentials(transport):
    transport.send.return_value = success()
    client = _client(transport)

    client.perform_call("session-stats")

    request = sent_requests(transport)[0]
    assert "Authorization" not in request.headers
    assert request.headers["User-Agent"].startswith("transmission-sdk/")
    assert request.headers["Content-Type"] == "application/json"


def test_changing_credentials_never_drops_authorization(transport):
    transport.send.return_value = success()
    client = _client(transport, username="u", password="p")
    stop = threading.Event()

    def rotate_credentials():
        while not stop.is_set():
            client.authenticate("u", "p")

    rotator = threading.Thread(target=rotate_credentials)
    rotator.start()
    try:
        for _ in range(2000):
            client.perform_call("session-stats")
    finally:
        stop.set()
        rotator.join()

    missing = [request for request in sent_requests(transport) if "Authorization" not in request.headers]
    assert missing == []


def test_ipv6_host_is_bracketed(transport):
    transport.send.return_value = success()
    client = _client(transport, host="::1")

    assert client.url == "http://[::1]:9091/transmission/rpc"
    client.perform_call("session-stats")
    assert sent_requests(transport)[0].url == "http://[::1]:9091/transmission/rpc"


def test_unusable_host_raises_network_error(transport):
    client = _client(transport, host="bad host")

    with pytest.raises(NetworkError):
        client.perform_call("session-stats")
    transport.send.assert_not_called()


def test_body_is_serialised_once_per_call(transport, monkeypatch):
    transport.send.side_effect = [conflict("abc"), success()]
    client = _client(transport)
    calls = []
    original = RpcRequest.to_json

    def counting_to_json(self):
        calls.append(self.method)
        return original(self)

    monkeypatch.setattr(RpcRequest, "to_json", counting_to_json)
    client.perform_call("session-stats")

    assert calls == ["session-stats"]
    first, second = sent_requests(transport)
    assert first.body == second.body


def test_clients_sharing_a_builder_keep_separate_sessions(transport):
    transport.send.return_value = success()
    shared = Builder(transport)
    first = RpcClient(http_builder=shared, session_id="first")
    second = RpcClient(http_builder=shared, session_id="second")

    first.perform_call("session-stats")
    second.perform_call("session-stats")

    assert [request.headers["X-Transmission-Session-Id"] for request in sent_requests(transport)] == ["first", "second"]
    assert shared.plugins == []
    assert first.get_last_exchange()[0] is sent_requests(transport)[0]
