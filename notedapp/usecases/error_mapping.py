"""Translate adapter errors and backend error tags into UseCaseError."""

from __future__ import annotations

from typing import Optional

from notedapp.adapters.api_errors import (
    ApiClientError,
    ApiError,
    ApiServerError,
    ApiTimeoutError,
    extract_reject_hint,
)
from notedapp.domain.errors import ErrorCode
from notedapp.domain.ports import UseCaseError
from notedapp.domain.result import RemoteError

_INSUFFICIENT_TAGS = frozenset({"InsufficientBalance", "InsufficientFunds"})


def map_api_error(
    exc: Exception,
    *,
    default_code: str,
    default_message: Optional[str] = None,
) -> UseCaseError:
    """Map adapter exceptions to a UseCaseError carrying ``default_code``.

    An existing ``UseCaseError`` (``NOT_READY`` from the gateway, typically)
    is returned unchanged. The message keeps the underlying detail.
    """
    if isinstance(exc, UseCaseError):
        return exc
    label = default_message or "Request failed"
    if isinstance(exc, ApiTimeoutError):
        return UseCaseError(
            default_code,
            _compose_error_message(label, "request timed out, check connection"),
        )
    if isinstance(exc, ApiClientError):
        hint = exc.hint or extract_reject_hint(exc.payload)
        return UseCaseError(
            default_code,
            _compose_error_message(f"{label} (HTTP {exc.status})", hint),
            meta={"status": exc.status, "reject_code": exc.reject_code},
        )
    if isinstance(exc, ApiServerError):
        return UseCaseError(
            default_code,
            _compose_error_message(f"{label} (HTTP {exc.status})", "backend error, try again"),
            meta={"status": exc.status},
        )
    if isinstance(exc, ApiError):
        return UseCaseError(default_code, _compose_error_message(label, str(exc)))
    return UseCaseError(default_code, _compose_error_message(label, str(exc) or None))


def map_remote_error(error: RemoteError) -> UseCaseError:
    """Map a transfer ``Err`` tag onto the local taxonomy."""
    tag = error.tag
    if tag in _INSUFFICIENT_TAGS:
        meta = {"tag": tag}
        if isinstance(error.payload, dict) and "balance" in error.payload:
            meta["balance"] = error.payload["balance"]
        return UseCaseError(ErrorCode.INSUFFICIENT_BALANCE, "Insufficient balance", meta=meta)
    if tag == "Unauthorized":
        return UseCaseError(ErrorCode.UNAUTHORIZED, "Unauthorized transfer", meta={"tag": tag})
    if tag == "InvalidReceiver":
        return UseCaseError(ErrorCode.INVALID_RECEIVER, "Invalid receiver principal", meta={"tag": tag})
    if tag == "GenericError":
        return UseCaseError(
            ErrorCode.TRANSFER_FAILED,
            _compose_error_message("Transfer failed", error.message),
            meta={"tag": tag},
        )
    return UseCaseError(ErrorCode.TRANSFER_FAILED, "Transfer failed", meta={"tag": tag})


def _compose_error_message(base: str, hint: Optional[str]) -> str:
    """Compose a user-facing error message with optional hint text."""
    hint_text = (hint or "").strip()
    if hint_text:
        return f"{base}: {hint_text}"
    if base.endswith("."):
        return base
    return f"{base}."


__all__ = ["map_api_error", "map_remote_error"]
