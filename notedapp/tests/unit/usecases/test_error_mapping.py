from __future__ import annotations

from notedapp.adapters.api_errors import ApiClientError, ApiError, ApiServerError, ApiTimeoutError
from notedapp.domain.errors import ErrorCode
from notedapp.domain.ports import UseCaseError
from notedapp.domain.result import RemoteError
from notedapp.usecases.error_mapping import map_api_error, map_remote_error


def test_use_case_error_passes_through() -> None:
    original = UseCaseError(ErrorCode.NOT_READY, "Please sign in first.")

    assert map_api_error(original, default_code=ErrorCode.FETCH_FAILED) is original


def test_timeout_message() -> None:
    err = map_api_error(
        ApiTimeoutError("timeout"),
        default_code=ErrorCode.FETCH_FAILED,
        default_message="Could not load notes",
    )

    assert err.code == ErrorCode.FETCH_FAILED
    assert err.message == "Could not load notes: request timed out, check connection"


def test_client_error_uses_hint_and_meta() -> None:
    exc = ApiClientError("ctx", status=400, reject_code="5", hint="Canister trapped")

    err = map_api_error(exc, default_code=ErrorCode.TRANSFER_FAILED, default_message="Transfer failed")

    assert err.message == "Transfer failed (HTTP 400): Canister trapped"
    assert err.meta == {"status": 400, "reject_code": "5"}


def test_server_and_generic_errors() -> None:
    server = map_api_error(ApiServerError("ctx", status=502), default_code=ErrorCode.FETCH_FAILED)
    generic = map_api_error(ApiError("bad reply"), default_code=ErrorCode.FETCH_FAILED)
    other = map_api_error(RuntimeError(), default_code=ErrorCode.FETCH_FAILED)

    assert server.message == "Request failed (HTTP 502): backend error, try again"
    assert generic.message == "Request failed: bad reply"
    assert other.message == "Request failed."


def test_remote_tags_map_onto_taxonomy() -> None:
    funds = map_remote_error(RemoteError("InsufficientFunds", {"balance": 3}))
    assert funds.code == ErrorCode.INSUFFICIENT_BALANCE
    assert funds.meta == {"tag": "InsufficientFunds", "balance": 3}

    assert map_remote_error(RemoteError("InsufficientBalance")).code == ErrorCode.INSUFFICIENT_BALANCE
    assert map_remote_error(RemoteError("Unauthorized")).code == ErrorCode.UNAUTHORIZED
    assert map_remote_error(RemoteError("InvalidReceiver")).code == ErrorCode.INVALID_RECEIVER

    generic = map_remote_error(RemoteError("GenericError", {"error_code": 2, "message": "unreachable"}))
    assert generic.code == ErrorCode.TRANSFER_FAILED
    assert generic.message == "Transfer failed: unreachable"

    unknown = map_remote_error(RemoteError("TemporarilyUnavailable"))
    assert unknown.code == ErrorCode.TRANSFER_FAILED
    assert unknown.meta == {"tag": "TemporarilyUnavailable"}
