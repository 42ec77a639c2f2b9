"""Domain package exports for value objects and aggregates."""

from .entities import (
    BalanceSnapshot,
    EndpointConfig,
    Identity,
    LedgerConfig,
    Note,
    Session,
    SessionState,
    TransactionRecord,
    TransferKind,
    TransferOutcome,
    TransferRequest,
)
from .errors import ErrorCode
from .principal import Principal
from .result import Err, Ok, RemoteError, TaggedResult

__all__ = [
    "BalanceSnapshot",
    "EndpointConfig",
    "Err",
    "ErrorCode",
    "Identity",
    "LedgerConfig",
    "Note",
    "Ok",
    "Principal",
    "RemoteError",
    "Session",
    "SessionState",
    "TaggedResult",
    "TransactionRecord",
    "TransferKind",
    "TransferOutcome",
    "TransferRequest",
]
