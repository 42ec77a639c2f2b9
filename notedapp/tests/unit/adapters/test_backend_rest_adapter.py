from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import pytest
import requests

from notedapp.adapters.api_errors import (
    ApiClientError,
    ApiError,
    ApiServerError,
    ApiTimeoutError,
)
from notedapp.adapters.backend_rest import BackendRestAdapter, make_rest_actor
from notedapp.adapters.http_client import HttpConfig, JsonSession
from notedapp.domain.entities import EndpointConfig, Identity
from notedapp.domain.principal import Principal

CANISTER = "rdmx6-jaaaa-aaaaa-aaadq-cai"


class _ResponseStub:
    def __init__(self, payload: Any, status_code: int = 200, *, raw_text: Optional[str] = None) -> None:
        self._payload = payload
        self.status_code = status_code
        self.text = raw_text if raw_text is not None else str(payload)

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class _SessionStub:
    def __init__(self, responses: Sequence[_ResponseStub]) -> None:
        self._responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def post(
        self,
        url: str,
        *,
        json_body: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> _ResponseStub:
        self.calls.append({"url": url, "json": json_body, "timeout": timeout})
        return self._responses.pop(0)


def _adapter(*responses: _ResponseStub) -> BackendRestAdapter:
    endpoint = EndpointConfig(host="http://localhost:4943/", canister_id=CANISTER)
    adapter = BackendRestAdapter(endpoint, Identity.anonymous())
    adapter.session = _SessionStub(responses)
    return adapter


def test_call_posts_args_to_method_url_and_returns_reply() -> None:
    adapter = _adapter(_ResponseStub({"reply": {"Ok": "tx-1"}}))

    reply = adapter.transfer("2vxsx-fae", 25)

    assert reply == {"Ok": "tx-1"}
    call = adapter.session.calls[0]
    assert call["url"] == f"http://localhost:4943/canisters/{CANISTER}/transfer"
    assert call["json"] == {"args": ["2vxsx-fae", 25]}


def test_void_reply_is_accepted() -> None:
    adapter = _adapter(_ResponseStub({"reply": None}))

    assert adapter.update_note(3, "text") is None
    assert adapter.session.calls[0]["json"] == {"args": [3, "text"]}


def test_client_error_carries_reject_detail() -> None:
    adapter = _adapter(
        _ResponseStub({"reject_code": 5, "reject_message": "Canister trapped"}, status_code=400)
    )

    with pytest.raises(ApiClientError) as excinfo:
        adapter.get_balance()

    assert excinfo.value.status == 400
    assert excinfo.value.reject_code == "5"
    assert excinfo.value.hint == "Canister trapped"
    assert "Canister trapped" in str(excinfo.value)


def test_server_error_is_typed() -> None:
    adapter = _adapter(_ResponseStub({"message": "boom"}, status_code=503))

    with pytest.raises(ApiServerError) as excinfo:
        adapter.get_notes()

    assert excinfo.value.status == 503


def test_missing_reply_member_is_rejected() -> None:
    adapter = _adapter(_ResponseStub({"result": 1}))

    with pytest.raises(ApiError, match="reply member missing"):
        adapter.whoami()


def test_invalid_json_reply_is_rejected() -> None:
    adapter = _adapter(_ResponseStub(ValueError("no json"), raw_text="<html>"))

    with pytest.raises(ApiError, match="invalid JSON reply"):
        adapter.get_icrc_balance()


def test_adapter_requires_canister_id() -> None:
    with pytest.raises(ValueError):
        make_rest_actor(Identity.anonymous(), EndpointConfig(host="http://h", canister_id=""))


class _RaisingRequestsSession:
    def __init__(self, exc: Exception) -> None:
        self.exc = exc

    def post(self, *args: Any, **kwargs: Any) -> None:
        raise self.exc


class _RecordingRequestsSession:
    def __init__(self) -> None:
        self.kwargs: Dict[str, Any] = {}

    def post(self, url: str, **kwargs: Any) -> str:
        self.kwargs = dict(kwargs, url=url)
        return "response"


def test_json_session_sends_identity_headers_and_configured_timeout() -> None:
    identity = Identity(principal=Principal(b"\x01\x02"), delegation="tok")
    session = JsonSession(identity, HttpConfig(request_timeout_s=2.5))
    recorder = _RecordingRequestsSession()
    session.session = recorder

    assert session.post("http://h/x", json_body={"args": []}) == "response"

    headers = recorder.kwargs["headers"]
    assert headers["X-Principal"] == identity.principal.to_text()
    assert headers["Authorization"] == "Bearer tok"
    assert headers["Content-Type"] == "application/json"
    assert recorder.kwargs["timeout"] == 2.5
    assert recorder.kwargs["data"] == '{"args": []}'


def test_json_session_defaults_to_no_timeout() -> None:
    session = JsonSession(None, HttpConfig())
    recorder = _RecordingRequestsSession()
    session.session = recorder

    session.post("http://h/x", json_body=None)

    assert recorder.kwargs["timeout"] is None
    assert "X-Principal" not in recorder.kwargs["headers"]


@pytest.mark.parametrize(
    "exc",
    [requests.exceptions.Timeout("slow"), requests.exceptions.ConnectionError("down")],
)
def test_json_session_maps_transport_failures_to_timeout(exc: Exception) -> None:
    session = JsonSession(None, HttpConfig())
    session.session = _RaisingRequestsSession(exc)

    with pytest.raises(ApiTimeoutError):
        session.post("http://h/x", json_body={"args": []})


def test_json_session_maps_other_request_failures() -> None:
    session = JsonSession(None, HttpConfig())
    session.session = _RaisingRequestsSession(requests.exceptions.InvalidURL("bad"))

    with pytest.raises(ApiError) as excinfo:
        session.post("http://h/x", json_body={"args": []})
    assert not isinstance(excinfo.value, ApiTimeoutError)
