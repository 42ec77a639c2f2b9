"""Shared fixtures: an in-memory backend and signed-in gateways bound to it."""

from __future__ import annotations

from typing import Callable

import pytest

from notedapp.adapters.backend_mock import BackendMock
from notedapp.adapters.gateway import RemoteDataGateway
from notedapp.domain.entities import Identity, Session
from notedapp.domain.principal import Principal

ALICE = Identity(principal=Principal(b"\x0a\x11\x22\x33\x01"))
BOB = Identity(principal=Principal(b"\x0b\x44\x55\x66\x01"))
LEDGER_ID = "ryjl3-tyaaa-aaaaa-aaaba-cai"


@pytest.fixture
def backend() -> BackendMock:
    return BackendMock()


@pytest.fixture
def alice() -> Identity:
    return ALICE


@pytest.fixture
def bob_text() -> str:
    return BOB.principal.to_text()


@pytest.fixture
def ledger_id() -> str:
    return LEDGER_ID


@pytest.fixture
def gateway_for(backend: BackendMock) -> Callable[..., RemoteDataGateway]:
    """Build a gateway whose session is authenticated and bound to ``backend``."""

    def _make(identity: Identity = ALICE, *, authenticated: bool = True) -> RemoteDataGateway:
        session = Session(
            identity=identity,
            actor=backend.actor_for(identity),
            authenticated=authenticated,
        )
        return RemoteDataGateway(lambda: session)

    return _make
