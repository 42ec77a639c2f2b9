from __future__ import annotations

import pytest

from notedapp.adapters.api_errors import ApiTimeoutError
from notedapp.adapters.backend_mock import STARTING_BALANCE, BackendMock
from notedapp.domain.entities import Identity
from notedapp.domain.principal import Principal


def test_new_principal_starts_with_default_balance(backend: BackendMock, alice: Identity) -> None:
    actor = backend.actor_for(alice)

    assert actor.get_balance() == STARTING_BALANCE
    assert actor.whoami() == alice.principal.to_text()


def test_anonymous_caller_is_unauthorized(backend: BackendMock, bob_text: str) -> None:
    actor = backend.actor_for(Identity.anonymous())

    assert actor.get_balance() == 0
    assert actor.transfer(bob_text, 1) == {"Err": {"Unauthorized": None}}
    assert actor.set_icrc_ledger_canister_id("ryjl3-tyaaa-aaaaa-aaaba-cai") == {"Err": "Unauthorized"}
    assert actor.add_note("x") == {"Err": "Authentication required"}


def test_internal_transfer_moves_balance_and_records_both_sides(
    backend: BackendMock, alice: Identity, bob_text: str
) -> None:
    actor = backend.actor_for(alice)

    reply = actor.transfer(bob_text, 100)

    assert "Ok" in reply
    assert backend.balance_of(alice.principal.to_text()) == STARTING_BALANCE - 100
    assert backend.balance_of(bob_text) == STARTING_BALANCE + 100
    history = actor.get_transaction_history()
    assert len(history) == 1
    assert history[0]["transaction_type"] == {"Internal": None}
    assert history[0]["block_index"] == []
    bob = backend.actor_for(Identity(principal=Principal.from_text(bob_text)))
    assert bob.get_transaction_history()[0]["transaction_id"] == reply["Ok"]


def test_internal_transfer_rejects_overdraft(backend: BackendMock, alice: Identity, bob_text: str) -> None:
    backend.set_balance(alice.principal.to_text(), 5)

    reply = backend.actor_for(alice).transfer(bob_text, 6)

    assert reply == {"Err": {"InsufficientBalance": None}}
    assert backend.balance_of(alice.principal.to_text()) == 5


def test_external_ledger_states(backend: BackendMock, alice: Identity, bob_text: str, ledger_id: str) -> None:
    actor = backend.actor_for(alice)
    assert actor.get_icrc_ledger_canister_id() == []
    assert actor.get_icrc_balance() == {"Err": "ICRC ledger canister ID not set"}
    assert actor.icrc_transfer(bob_text, 1)["Err"]["GenericError"]["error_code"] == 1

    backend.register_external_ledger(ledger_id, {alice.principal.to_text(): 40}, reachable=False)
    assert actor.set_icrc_ledger_canister_id(ledger_id) == {"Ok": None}
    assert actor.get_icrc_ledger_canister_id() == [ledger_id]
    assert "Err" in actor.get_icrc_balance()
    assert actor.icrc_transfer(bob_text, 1)["Err"]["GenericError"]["error_code"] == 2


def test_external_transfer_reports_insufficient_funds_and_block_index(
    backend: BackendMock, alice: Identity, bob_text: str, ledger_id: str
) -> None:
    backend.register_external_ledger(ledger_id, {alice.principal.to_text(): 40})
    actor = backend.actor_for(alice)
    actor.set_icrc_ledger_canister_id(ledger_id)

    assert actor.icrc_transfer(bob_text, 41) == {"Err": {"InsufficientFunds": {"balance": 40}}}
    assert "Ok" in actor.icrc_transfer(bob_text, 15)
    assert backend.external_balance_of(ledger_id, bob_text) == 15
    records = actor.get_transaction_history_filtered([{"ICRC": None}])
    assert [r["block_index"] for r in records] == [[0]]
    assert actor.get_transaction_history_filtered([{"Internal": None}]) == []


def test_notes_are_scoped_to_owner_and_searchable(backend: BackendMock, alice: Identity, bob_text: str) -> None:
    actor = backend.actor_for(alice)
    first = actor.add_note("Buy Milk")["Ok"]
    actor.add_note("call bob")

    other = backend.actor_for(Identity(principal=Principal.from_text(bob_text)))
    other.delete_note(first)
    other.update_note(first, "hijacked")

    assert actor.get_notes() == [[0, "Buy Milk"], [1, "call bob"]]
    assert actor.search_notes("milk") == [[0, "Buy Milk"]]
    assert other.get_notes() == []


def test_fail_next_raises_once_and_calls_are_recorded(backend: BackendMock, alice: Identity) -> None:
    backend.fail_next("get_balance", ApiTimeoutError("slow"))
    actor = backend.actor_for(alice)

    with pytest.raises(ApiTimeoutError):
        actor.get_balance()
    assert actor.get_balance() == STARTING_BALANCE
    assert backend.calls_to("get_balance") == 2
