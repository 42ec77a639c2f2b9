from __future__ import annotations

from datetime import timezone

import pytest

from notedapp.domain.entities import (
    BalanceSnapshot,
    EndpointConfig,
    Identity,
    LedgerConfig,
    Session,
    TransactionRecord,
    TransferKind,
)
from notedapp.domain.errors import ALL_CODES, ErrorCode
from notedapp.domain.principal import Principal


def test_transfer_kind_from_wire_aliases() -> None:
    assert TransferKind.from_wire("Internal") is TransferKind.INTERNAL
    assert TransferKind.from_wire("ICRC") is TransferKind.EXTERNAL
    assert TransferKind.from_wire("external") is TransferKind.EXTERNAL
    assert TransferKind.EXTERNAL.label == "external"
    with pytest.raises(ValueError):
        TransferKind.from_wire("Bitcoin")


def test_identity_expiry() -> None:
    identity = Identity(principal=Principal(b"\x01"), expires_at_ns=100)

    assert identity.is_expired(99) is False
    assert identity.is_expired(100) is True
    assert Identity.anonymous().is_anonymous is True


def test_session_ready_requires_flag_and_actor() -> None:
    identity = Identity(principal=Principal(b"\x01"))

    assert Session.empty().is_ready is False
    assert Session(identity=identity, actor=None, authenticated=True).is_ready is False
    assert Session(identity=identity, actor=object(), authenticated=False).is_ready is False
    ready = Session(identity=identity, actor=object(), authenticated=True)
    assert ready.is_ready is True
    assert ready.principal_text == identity.principal.to_text()


def test_endpoint_requires_host() -> None:
    with pytest.raises(ValueError):
        EndpointConfig(host=" ", canister_id="x")


def test_balance_snapshot_available_per_kind() -> None:
    snapshot = BalanceSnapshot(internal=10, external=None)

    assert snapshot.available(TransferKind.INTERNAL) == 10
    assert snapshot.available(TransferKind.EXTERNAL) is None
    assert snapshot.has_external is False


def test_ledger_config_and_record_timestamp() -> None:
    assert LedgerConfig().is_configured is False
    record = TransactionRecord(
        sender="a",
        receiver="b",
        amount=1,
        timestamp_ns=1_700_000_000_000_000_000,
        kind=TransferKind.INTERNAL,
    )
    assert record.timestamp.tzinfo is timezone.utc
    assert record.timestamp.year == 2023


def test_error_codes_are_closed_set() -> None:
    assert ErrorCode.TRANSFER_FAILED in ALL_CODES
    assert "SOMETHING_ELSE" not in ALL_CODES
