from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from notedapp.domain.entities import EndpointConfig, Identity
from notedapp.domain.ports import ActorPort

STARTING_BALANCE = 1000
_INTERNAL = "Internal"
_ICRC = "ICRC"


@dataclass
class _StoredNote:
    content: str
    owner: str
    created_at: int
    updated_at: int


@dataclass
class _ExternalLedger:
    balances: Dict[str, int] = field(default_factory=dict)
    reachable: bool = True
    next_block: int = 0


@dataclass
class BackendMock:
    """Offline substitute for the note/token backend with deterministic state.

    Shared by every actor it hands out; each ``MockActor`` is bound to one
    caller principal, the way a real actor is bound to its identity. Replies
    use the same wire shapes as ``BackendRestAdapter``.
    """

    clock_ns: Callable[[], int] = time.time_ns

    def __post_init__(self) -> None:
        self._notes: Dict[int, _StoredNote] = {}
        self._next_note_id = 0
        self._balances: Dict[str, int] = {}
        self._history: Dict[str, Dict[str, Any]] = {}
        self._ledger_id: Optional[str] = None
        self._ledgers: Dict[str, _ExternalLedger] = {}
        self._last_ts = 0
        self._failures: Dict[str, Exception] = {}
        self.calls: List[Tuple[str, str, Tuple[Any, ...]]] = []

    def actor_for(self, identity: Identity) -> "MockActor":
        return MockActor(self, identity.principal.to_text(), identity.is_anonymous)

    def actor_factory(self, identity: Identity, endpoint: EndpointConfig) -> "MockActor":
        _ = endpoint
        return self.actor_for(identity)

    # ---------- Test helpers ----------

    def fail_next(self, method: str, exc: Exception) -> None:
        """Raise ``exc`` from the next call of ``method`` (any caller)."""
        self._failures[method] = exc

    def calls_to(self, method: str) -> int:
        return sum(1 for _, name, _ in self.calls if name == method)

    def set_balance(self, principal_text: str, amount: int) -> None:
        self._balances[principal_text] = int(amount)

    def balance_of(self, principal_text: str) -> int:
        return self._balances.get(principal_text, 0)

    def register_external_ledger(
        self,
        ledger_id: str,
        balances: Optional[Mapping[str, int]] = None,
        *,
        reachable: bool = True,
    ) -> None:
        self._ledgers[ledger_id] = _ExternalLedger(
            balances={k: int(v) for k, v in (balances or {}).items()},
            reachable=reachable,
        )

    def external_balance_of(self, ledger_id: str, principal_text: str) -> int:
        return self._ledgers[ledger_id].balances.get(principal_text, 0)

    # ---------- Backend behavior ----------

    def _enter(self, caller: str, method: str, args: Tuple[Any, ...]) -> None:
        self.calls.append((caller, method, args))
        exc = self._failures.pop(method, None)
        if exc is not None:
            raise exc

    def _now(self) -> int:
        # strictly increasing so transaction ids stay unique
        now = max(int(self.clock_ns()), self._last_ts + 1)
        self._last_ts = now
        return now

    def _ensure_balance(self, principal_text: str) -> None:
        self._balances.setdefault(principal_text, STARTING_BALANCE)

    def _record(
        self,
        sender: str,
        receiver: str,
        amount: int,
        kind: str,
        block_index: Optional[int] = None,
    ) -> str:
        timestamp = self._now()
        transaction_id = f"{sender}-{receiver}-{amount}-{timestamp}"
        record = {
            "sender": sender,
            "receiver": receiver,
            "amount": amount,
            "timestamp": timestamp,
            "transaction_id": transaction_id,
            "transaction_type": {kind: None},
            "block_index": [] if block_index is None else [block_index],
        }
        self._history[f"{sender}:{transaction_id}"] = record
        self._history[f"{receiver}:{transaction_id}"] = dict(record)
        return transaction_id

    def _history_for(self, caller: str, kind: Optional[str] = None) -> List[Dict[str, Any]]:
        prefix = f"{caller}:"
        entries = []
        for key, record in self._history.items():
            if not key.startswith(prefix):
                continue
            if kind is not None and kind not in record["transaction_type"]:
                continue
            entries.append(dict(record))
        entries.sort(key=lambda entry: entry["timestamp"])
        return entries

    def _notes_for(self, caller: str, query: Optional[str] = None) -> List[List[Any]]:
        needle = query.lower() if query is not None else None
        out = []
        for note_id in sorted(self._notes):
            note = self._notes[note_id]
            if note.owner != caller:
                continue
            if needle is not None and needle not in note.content.lower():
                continue
            out.append([note_id, note.content])
        return out


class MockActor(ActorPort):
    """``ActorPort`` bound to one caller of a ``BackendMock``."""

    def __init__(self, backend: BackendMock, caller: str, anonymous: bool) -> None:
        self.backend = backend
        self.caller = caller
        self.anonymous = anonymous

    # ---------- Notes ----------

    def get_notes(self) -> List[Any]:
        self.backend._enter(self.caller, "get_notes", ())
        return self.backend._notes_for(self.caller)

    def add_note(self, content: str) -> Any:
        b = self.backend
        b._enter(self.caller, "add_note", (content,))
        if self.anonymous:
            return {"Err": "Authentication required"}
        now = b._now()
        note_id = b._next_note_id
        b._notes[note_id] = _StoredNote(content, self.caller, now, now)
        b._next_note_id += 1
        return {"Ok": note_id}

    def update_note(self, note_id: int, content: str) -> None:
        b = self.backend
        b._enter(self.caller, "update_note", (note_id, content))
        note = b._notes.get(note_id)
        if note is not None and note.owner == self.caller:
            note.content = content
            note.updated_at = b._now()

    def delete_note(self, note_id: int) -> None:
        b = self.backend
        b._enter(self.caller, "delete_note", (note_id,))
        note = b._notes.get(note_id)
        if note is not None and note.owner == self.caller:
            del b._notes[note_id]

    def search_notes(self, query: str) -> List[Any]:
        self.backend._enter(self.caller, "search_notes", (query,))
        return self.backend._notes_for(self.caller, query)

    # ---------- Internal ledger ----------

    def get_balance(self) -> int:
        b = self.backend
        b._enter(self.caller, "get_balance", ())
        if self.anonymous:
            return 0
        b._ensure_balance(self.caller)
        return b._balances[self.caller]

    def transfer(self, to: str, amount: int) -> Any:
        b = self.backend
        b._enter(self.caller, "transfer", (to, amount))
        if self.anonymous:
            return {"Err": {"Unauthorized": None}}
        b._ensure_balance(self.caller)
        b._ensure_balance(to)
        if b._balances[self.caller] < amount:
            return {"Err": {"InsufficientBalance": None}}
        b._balances[self.caller] -= amount
        b._balances[to] += amount
        return {"Ok": b._record(self.caller, to, amount, _INTERNAL)}

    def get_transaction_history(self) -> List[Dict[str, Any]]:
        self.backend._enter(self.caller, "get_transaction_history", ())
        if self.anonymous:
            return []
        return self.backend._history_for(self.caller)

    def get_transaction_history_filtered(self, kind: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        self.backend._enter(self.caller, "get_transaction_history_filtered", (kind,))
        tag = next(iter(kind[0])) if kind else None
        return self.backend._history_for(self.caller, tag)

    # ---------- External ledger ----------

    def get_icrc_ledger_canister_id(self) -> Any:
        b = self.backend
        b._enter(self.caller, "get_icrc_ledger_canister_id", ())
        return [] if b._ledger_id is None else [b._ledger_id]

    def set_icrc_ledger_canister_id(self, canister_id: str) -> Any:
        b = self.backend
        b._enter(self.caller, "set_icrc_ledger_canister_id", (canister_id,))
        if self.anonymous:
            return {"Err": "Unauthorized"}
        b._ledger_id = canister_id
        return {"Ok": None}

    def get_icrc_balance(self) -> Any:
        b = self.backend
        b._enter(self.caller, "get_icrc_balance", ())
        if self.anonymous:
            return {"Err": "Authentication required"}
        if b._ledger_id is None:
            return {"Err": "ICRC ledger canister ID not set"}
        ledger = b._ledgers.get(b._ledger_id)
        if ledger is None or not ledger.reachable:
            return {"Err": "Failed to get balance: canister unreachable"}
        return {"Ok": ledger.balances.get(self.caller, 0)}

    def icrc_transfer(self, to: str, amount: int) -> Any:
        b = self.backend
        b._enter(self.caller, "icrc_transfer", (to, amount))
        if self.anonymous:
            return {"Err": {"Unauthorized": None}}
        if b._ledger_id is None:
            return {
                "Err": {
                    "GenericError": {
                        "error_code": 1,
                        "message": "ICRC ledger canister ID not set",
                    }
                }
            }
        ledger = b._ledgers.get(b._ledger_id)
        if ledger is None or not ledger.reachable:
            return {
                "Err": {
                    "GenericError": {
                        "error_code": 2,
                        "message": "Call failed: canister unreachable",
                    }
                }
            }
        balance = ledger.balances.get(self.caller, 0)
        if balance < amount:
            return {"Err": {"InsufficientFunds": {"balance": balance}}}
        ledger.balances[self.caller] = balance - amount
        ledger.balances[to] = ledger.balances.get(to, 0) + amount
        block_index = ledger.next_block
        ledger.next_block += 1
        return {"Ok": b._record(self.caller, to, amount, _ICRC, block_index)}

    def whoami(self) -> str:
        self.backend._enter(self.caller, "whoami", ())
        return self.caller


__all__ = ["BackendMock", "MockActor", "STARTING_BALANCE"]
