"""Typed failures raised by backend adapters.

The HTTP gateway in front of the backend answers a rejected call with a JSON
body such as ``{"reject_code": 5, "reject_message": "Canister trapped"}``.
The helpers below read a code and a human readable detail out of that body
(or out of any other payload) without raising.
"""

from __future__ import annotations

from typing import Any, Optional

_SNIPPET_LIMIT = 400
_DETAIL_KEYS = ("reject_message", "message", "detail", "error")
_REJECT_CODE_KEYS = ("reject_code", "error_code", "code")


class ApiError(RuntimeError):
    """Base class for backend adapter failures.

    Attributes:
        status: HTTP status of the failed call, if one was received.
        reject_code: Gateway reject code, as text.
        hint: Short operator-facing detail.
        payload: Parsed error body (or a text snippet).
        context: Method or request the failure belongs to.
    """

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        reject_code: Optional[str] = None,
        hint: Optional[str] = None,
        payload: Any = None,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.reject_code = reject_code
        self.hint = hint
        self.payload = payload
        self.context = context


class ApiClientError(ApiError):
    """The gateway rejected the call (HTTP 4xx), e.g. a canister reject."""

    def __init__(self, message: str, *, status: int, **details: Any) -> None:
        super().__init__(message, status=status, **details)


class ApiServerError(ApiError):
    """The gateway or the replica failed (HTTP 5xx)."""

    def __init__(self, message: str, *, status: int, **details: Any) -> None:
        super().__init__(message, status=status, **details)


class ApiTimeoutError(ApiError):
    """No reply: timeout or connection failure."""

    def __init__(self, message: str, *, context: Optional[str] = None) -> None:
        super().__init__(message, context=context)


def read_error_body(resp: Any) -> Any:
    """JSON body of a failed response, else a text snippet, else ``None``."""
    try:
        return resp.json()
    except Exception:
        text = getattr(resp, "text", "") or ""
        return text[:_SNIPPET_LIMIT] or None


def describe_failure(method: str, status: int, payload: Any) -> str:
    detail = first_string(payload)
    suffix = f"HTTP {status}"
    return f"{method}: {detail} ({suffix})" if detail else f"{method}: {suffix}"


def extract_reject_code(payload: Any) -> Optional[str]:
    if not isinstance(payload, dict):
        return None
    for key in _REJECT_CODE_KEYS:
        if payload.get(key) is not None:
            return str(payload[key])
    return None


def extract_reject_hint(payload: Any) -> Optional[str]:
    if isinstance(payload, dict):
        explicit = payload.get("hint")
        if isinstance(explicit, str) and explicit.strip():
            return explicit.strip()
    return first_string(payload)


def first_string(payload: Any) -> Optional[str]:
    """Depth-first search for the first non-blank detail string."""
    if isinstance(payload, str):
        return payload.strip() or None
    if isinstance(payload, dict):
        candidates = [payload.get(key) for key in _DETAIL_KEYS]
    elif isinstance(payload, list):
        candidates = payload
    else:
        return None
    for candidate in candidates:
        if isinstance(candidate, (str, dict, list)):
            found = first_string(candidate)
            if found:
                return found
    return None


__all__ = [
    "ApiClientError",
    "ApiError",
    "ApiServerError",
    "ApiTimeoutError",
    "describe_failure",
    "extract_reject_code",
    "extract_reject_hint",
    "first_string",
    "read_error_body",
]
