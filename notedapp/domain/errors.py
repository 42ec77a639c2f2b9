"""Stable error kinds surfaced to callers through ``UseCaseError.code``.

Callers branch on the code, never on the exception type. The set is closed:
remote error tags and adapter failures are always folded into one of these.
"""

from __future__ import annotations


class ErrorCode:
    NOT_READY = "NOT_READY"
    INVALID_FORMAT = "INVALID_FORMAT"
    INVALID_PRINCIPAL_FORMAT = "INVALID_PRINCIPAL_FORMAT"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    EXTERNAL_LEDGER_UNAVAILABLE = "EXTERNAL_LEDGER_UNAVAILABLE"
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_RECEIVER = "INVALID_RECEIVER"
    CONFIGURATION_REJECTED = "CONFIGURATION_REJECTED"
    TRANSFER_FAILED = "TRANSFER_FAILED"

    FETCH_FAILED = "FETCH_FAILED"
    NOTE_REJECTED = "NOTE_REJECTED"
    NOTE_OPERATION_FAILED = "NOTE_OPERATION_FAILED"
    EMPTY_CONTENT = "EMPTY_CONTENT"
    OPERATION_IN_PROGRESS = "OPERATION_IN_PROGRESS"
    SESSION_INIT_FAILED = "SESSION_INIT_FAILED"


ALL_CODES = frozenset(
    value
    for key, value in vars(ErrorCode).items()
    if key.isupper() and isinstance(value, str)
)


__all__ = ["ALL_CODES", "ErrorCode"]
