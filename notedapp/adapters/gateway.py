"""Typed operations against the actor of the current session.

Call context:
    Orchestrators in ``notedapp.usecases`` call the gateway; the gateway asks
    ``session_source`` for the current ``Session`` on every call, so a
    re-login is picked up without rebuilding anything.

Every operation is one round trip with no retries. Calls made while the
session is unauthenticated or unbound raise ``UseCaseError(NOT_READY)``
before touching the actor. Malformed replies raise ``ApiError``; adapter
errors propagate unchanged for the use-case layer to map.
"""

from __future__ import annotations

from typing import Any, Callable, List, Mapping, Optional

from notedapp.adapters.api_errors import ApiError
from notedapp.domain.entities import (
    LedgerConfig,
    Note,
    Session,
    TransactionRecord,
    TransferKind,
)
from notedapp.domain.errors import ErrorCode
from notedapp.domain.ports import ActorPort, UseCaseError
from notedapp.domain.principal import Principal
from notedapp.domain.result import TaggedResult, from_wire


class RemoteDataGateway:
    def __init__(self, session_source: Callable[[], Session]) -> None:
        self.session_source = session_source

    # ---- notes ----
    def fetch_notes(self) -> List[Note]:
        return _decode_notes(self._actor().get_notes(), "get_notes")

    def add_note(self, content: str) -> TaggedResult:
        return from_wire(self._actor().add_note(content))

    def update_note(self, note_id: int, content: str) -> None:
        self._actor().update_note(int(note_id), content)

    def delete_note(self, note_id: int) -> None:
        self._actor().delete_note(int(note_id))

    def search_notes(self, query: str) -> List[Note]:
        return _decode_notes(self._actor().search_notes(query), "search_notes")

    # ---- tokens ----
    def get_balance(self) -> int:
        return _as_nat(self._actor().get_balance(), "get_balance")

    def get_transaction_history(
        self, kind: Optional[TransferKind] = None
    ) -> List[TransactionRecord]:
        actor = self._actor()
        if kind is None:
            raw = actor.get_transaction_history()
        else:
            raw = actor.get_transaction_history_filtered([{kind.value: None}])
        if not isinstance(raw, list):
            raise ApiError("get_transaction_history: expected list reply", payload=raw)
        return [_decode_record(item) for item in raw]

    def get_external_balance(self) -> TaggedResult:
        """Tagged reply of the external ledger probe; an ``Err`` is expected
        whenever no ledger is configured."""
        return from_wire(self._actor().get_icrc_balance())

    def get_ledger_config(self) -> LedgerConfig:
        value = _unwrap_opt(self._actor().get_icrc_ledger_canister_id())
        if value is None:
            return LedgerConfig()
        return LedgerConfig(external_ledger_id=_as_principal(value, "get_icrc_ledger_canister_id"))

    def set_ledger_config(self, ledger_id: Principal) -> TaggedResult:
        return from_wire(self._actor().set_icrc_ledger_canister_id(ledger_id.to_text()))

    def internal_transfer(self, to: Principal, amount: int) -> TaggedResult:
        return from_wire(self._actor().transfer(to.to_text(), int(amount)))

    def external_transfer(self, to: Principal, amount: int) -> TaggedResult:
        return from_wire(self._actor().icrc_transfer(to.to_text(), int(amount)))

    def whoami(self) -> Principal:
        return _as_principal(self._actor().whoami(), "whoami")

    # ------------------------------------------------------------------
    def is_ready(self) -> bool:
        return self.session_source().is_ready

    def _actor(self) -> ActorPort:
        session = self.session_source()
        if not session.is_ready:
            raise UseCaseError(ErrorCode.NOT_READY, "Please sign in first.")
        return session.actor


# ---- wire decoding ----
def _unwrap_opt(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        if not value:
            return None
        if len(value) == 1:
            return value[0]
        raise ApiError(f"Invalid optional value: {value!r}", payload=value)
    return value


def _as_nat(value: Any, ctx: str) -> int:
    if isinstance(value, bool):
        raise ApiError(f"{ctx}: expected natural number", payload=value)
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ApiError(f"{ctx}: expected natural number", payload=value) from exc
    if number < 0:
        raise ApiError(f"{ctx}: negative value", payload=value)
    return number


def _as_principal(value: Any, ctx: str) -> Principal:
    if isinstance(value, Principal):
        return value
    try:
        return Principal.from_text(str(value))
    except ValueError as exc:
        raise ApiError(f"{ctx}: invalid principal {value!r}", payload=value) from exc


def _decode_notes(raw: Any, ctx: str) -> List[Note]:
    if not isinstance(raw, list):
        raise ApiError(f"{ctx}: expected list reply", payload=raw)
    notes = []
    for item in raw:
        if isinstance(item, (list, tuple)) and len(item) == 2:
            note_id, content = item
        elif isinstance(item, Mapping) and "id" in item:
            note_id, content = item["id"], item.get("content", "")
        else:
            raise ApiError(f"{ctx}: invalid note entry", payload=item)
        notes.append(Note(id=_as_nat(note_id, ctx), content=str(content)))
    return notes


def _decode_kind(value: Any) -> TransferKind:
    if isinstance(value, Mapping) and len(value) == 1:
        value = next(iter(value))
    try:
        return TransferKind.from_wire(value)
    except ValueError as exc:
        raise ApiError(str(exc), payload=value) from exc


def _decode_record(item: Any) -> TransactionRecord:
    if not isinstance(item, Mapping):
        raise ApiError("Invalid transaction record", payload=item)
    block_index = _unwrap_opt(item.get("block_index"))
    return TransactionRecord(
        sender=str(item.get("sender") or ""),
        receiver=str(item.get("receiver") or ""),
        amount=_as_nat(item.get("amount"), "transaction.amount"),
        timestamp_ns=_as_nat(item.get("timestamp"), "transaction.timestamp"),
        kind=_decode_kind(item.get("transaction_type")),
        block_index=None if block_index is None else _as_nat(block_index, "transaction.block_index"),
        transaction_id=str(item.get("transaction_id") or ""),
    )


__all__ = ["RemoteDataGateway"]
