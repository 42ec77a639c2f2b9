"""Operator-facing text for errors, transfers, timestamps, and principals.

Call context:
    ``TokenVM`` and ``NotesVM`` call these helpers to turn ``UseCaseError``
    codes and domain values into display strings.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from notedapp.domain.entities import TransferKind
from notedapp.domain.errors import ErrorCode
from notedapp.domain.ports import UseCaseError

_MESSAGES = {
    ErrorCode.NOT_READY: "Please sign in first.",
    ErrorCode.INVALID_FORMAT: "Invalid canister ID format",
    ErrorCode.INVALID_PRINCIPAL_FORMAT: "Invalid principal format",
    ErrorCode.INVALID_AMOUNT: "Please enter a valid amount",
    ErrorCode.INSUFFICIENT_BALANCE: "Insufficient balance",
    ErrorCode.EXTERNAL_LEDGER_UNAVAILABLE: (
        "External balance not available. Please configure the external ledger."
    ),
    ErrorCode.UNAUTHORIZED: "Unauthorized transfer",
    ErrorCode.INVALID_RECEIVER: "Invalid receiver principal",
    ErrorCode.OPERATION_IN_PROGRESS: "Please wait for the current operation to finish.",
}

# codes whose message already carries the underlying detail
_PASSTHROUGH = frozenset(
    {
        ErrorCode.TRANSFER_FAILED,
        ErrorCode.CONFIGURATION_REJECTED,
        ErrorCode.FETCH_FAILED,
        ErrorCode.NOTE_REJECTED,
        ErrorCode.NOTE_OPERATION_FAILED,
        ErrorCode.SESSION_INIT_FAILED,
    }
)


def error_message(err: UseCaseError) -> str:
    if err.code in _PASSTHROUGH:
        return err.message or "Operation failed"
    return _MESSAGES.get(err.code, err.message or "Operation failed")


def transfer_success_message(kind: TransferKind) -> str:
    return f"{kind.label.upper()} transfer successful!"


def format_timestamp(timestamp_ns: int) -> str:
    """Nanoseconds since epoch -> local date/time text."""
    moment = datetime.fromtimestamp(int(timestamp_ns) / 1_000_000_000)
    return moment.strftime("%Y-%m-%d %H:%M:%S")


def format_principal(text: Optional[str]) -> str:
    value = text or ""
    if len(value) > 20:
        return f"{value[:10]}...{value[-6:]}"
    return value


def format_amount(amount: Optional[int]) -> str:
    if amount is None:
        return "-"
    return f"{int(amount):,}"


__all__ = [
    "error_message",
    "format_amount",
    "format_principal",
    "format_timestamp",
    "transfer_success_message",
]
