from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

from .entities import EndpointConfig, Identity


# ---- Error model ----
class UseCaseError(Exception):
    """Base class for use case level errors (user-presentable)."""

    def __init__(self, code: str, message: str, *, meta: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.meta = dict(meta or {})


# ---- Ports (Hexagonal boundaries) ----
class ActorPort(Protocol):
    """Identity-bound call stub for the note/token backend.

    Methods speak the wire shapes: principals as text, optionals as ``[]`` /
    ``[value]``, variants as ``{tag: payload}``, fallible replies as
    ``{"Ok": ...}`` / ``{"Err": ...}``.
    """

    def get_notes(self) -> List[Any]: ...
    def add_note(self, content: str) -> Any: ...  # {"Ok": id} | {"Err": str}
    def update_note(self, note_id: int, content: str) -> None: ...
    def delete_note(self, note_id: int) -> None: ...
    def search_notes(self, query: str) -> List[Any]: ...
    def get_balance(self) -> int: ...
    def get_transaction_history(self) -> List[Dict[str, Any]]: ...
    def get_transaction_history_filtered(self, kind: List[Dict[str, Any]]) -> List[Dict[str, Any]]: ...
    def get_icrc_balance(self) -> Any: ...  # {"Ok": nat} | {"Err": str}
    def get_icrc_ledger_canister_id(self) -> Any: ...  # [] | [principal_text]
    def set_icrc_ledger_canister_id(self, canister_id: str) -> Any: ...
    def transfer(self, to: str, amount: int) -> Any: ...
    def icrc_transfer(self, to: str, amount: int) -> Any: ...
    def whoami(self) -> str: ...


class IdentityProviderPort(Protocol):
    """Authentication client owning identity storage and actor binding."""

    def create_identity_session(self) -> Identity: ...
    def is_authenticated(self, identity: Identity) -> bool: ...
    def interactive_login(self, return_target: str) -> bool: ...  # False when abandoned
    def logout(self) -> None: ...
    def bind_actor(self, identity: Identity, endpoint: EndpointConfig) -> ActorPort: ...
