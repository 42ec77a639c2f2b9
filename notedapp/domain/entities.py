from __future__ import annotations

"""Domain value objects shared across adapters, use-cases, and view models."""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional, Union

from .principal import Principal

if TYPE_CHECKING:  # pragma: no cover - type checking helper
    from .ports import ActorPort


@dataclass(frozen=True)
class Identity:
    """Authenticated (or anonymous) identity handed out by the provider."""

    principal: Principal
    """Principal the backend sees as the caller."""
    delegation: Optional[str] = None
    """Opaque delegation token forwarded with every call, if any."""
    expires_at_ns: Optional[int] = None
    """Expiry in nanoseconds since epoch; ``None`` never expires."""

    @classmethod
    def anonymous(cls) -> "Identity":
        return cls(principal=Principal.anonymous())

    @property
    def is_anonymous(self) -> bool:
        return self.principal.is_anonymous

    def is_expired(self, now_ns: int) -> bool:
        return self.expires_at_ns is not None and now_ns >= self.expires_at_ns


@dataclass(frozen=True)
class EndpointConfig:
    """Where the backend lives and how long a call may take."""

    host: str
    canister_id: str
    request_timeout_s: Optional[float] = None

    def __post_init__(self) -> None:
        if not isinstance(self.host, str) or not self.host.strip():
            raise ValueError("EndpointConfig.host must be a non-empty string.")


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class Session:
    """Authentication state and the actor bound to it.

    Replaced as a whole, never mutated, so the authenticated flag and the
    actor are always observed together.
    """

    identity: Optional[Identity] = None
    actor: Optional["ActorPort"] = None
    authenticated: bool = False

    @classmethod
    def empty(cls) -> "Session":
        return cls()

    @property
    def is_ready(self) -> bool:
        return self.authenticated and self.actor is not None

    @property
    def principal_text(self) -> str:
        if self.identity is None or not self.authenticated:
            return ""
        return self.identity.principal.to_text()


@dataclass(frozen=True)
class Note:
    id: int
    content: str


class TransferKind(str, Enum):
    """Ledger a transfer or transaction record belongs to."""

    INTERNAL = "Internal"
    EXTERNAL = "ICRC"

    @classmethod
    def from_wire(cls, tag: Any) -> "TransferKind":
        text = str(tag or "").strip()
        if text in ("Internal", "internal"):
            return cls.INTERNAL
        if text in ("ICRC", "icrc", "External", "external"):
            return cls.EXTERNAL
        raise ValueError(f"Unknown transfer kind: {tag!r}")

    @property
    def label(self) -> str:
        return "internal" if self is TransferKind.INTERNAL else "external"


@dataclass(frozen=True)
class TransactionRecord:
    """Read-only ledger entry produced by the backend."""

    sender: str
    receiver: str
    amount: int
    timestamp_ns: int
    kind: TransferKind
    block_index: Optional[int] = None
    transaction_id: str = ""

    @property
    def timestamp(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp_ns / 1_000_000_000, tz=timezone.utc)


@dataclass(frozen=True)
class TransferRequest:
    """One transfer submission; ``recipient``/``amount`` are raw user input."""

    kind: TransferKind
    recipient: str
    amount: Union[str, int]


@dataclass(frozen=True)
class LedgerConfig:
    external_ledger_id: Optional[Principal] = None

    @property
    def is_configured(self) -> bool:
        return self.external_ledger_id is not None


@dataclass(frozen=True)
class BalanceSnapshot:
    """Internal and external balances as last fetched from the backend."""

    internal: Optional[int] = None
    external: Optional[int] = None

    @property
    def has_external(self) -> bool:
        return self.external is not None

    def available(self, kind: TransferKind) -> Optional[int]:
        return self.internal if kind is TransferKind.INTERNAL else self.external


@dataclass(frozen=True)
class TransferOutcome:
    """Result of a transfer the backend accepted."""

    request: TransferRequest
    amount: int
    recipient: Principal
    receipt: Any = None
    """Backend reply payload, e.g. the transaction id."""
    refreshed: bool = True
    refresh_error: Optional[Exception] = None
    """Set when the post-transfer refresh failed; the transfer still stands."""

    @property
    def kind(self) -> TransferKind:
        return self.request.kind


__all__ = [
    "BalanceSnapshot",
    "EndpointConfig",
    "Identity",
    "LedgerConfig",
    "Note",
    "Session",
    "SessionState",
    "TransactionRecord",
    "TransferKind",
    "TransferOutcome",
    "TransferRequest",
]
