from __future__ import annotations

import pytest

from notedapp.adapters.api_errors import ApiServerError, ApiTimeoutError
from notedapp.adapters.backend_mock import BackendMock
from notedapp.domain.entities import Identity, Note
from notedapp.domain.errors import ErrorCode
from notedapp.domain.ports import UseCaseError
from notedapp.usecases.note_orchestrator import NoteOrchestrator
from notedapp.usecases.operation_guard import NOTES


@pytest.fixture
def notes(gateway_for) -> NoteOrchestrator:
    return NoteOrchestrator(gateway_for())


def test_add_refetches_collection(backend: BackendMock, notes: NoteOrchestrator) -> None:
    note_id = notes.add("  first note ")

    assert note_id == 0
    assert notes.notes == [Note(0, "first note")]
    assert backend.calls_to("get_notes") == 1


def test_blank_content_never_reaches_backend(backend: BackendMock, notes: NoteOrchestrator) -> None:
    with pytest.raises(UseCaseError) as excinfo:
        notes.add("   ")

    assert excinfo.value.code == ErrorCode.EMPTY_CONTENT
    assert backend.calls_to("add_note") == 0


def test_rejected_add_is_note_rejected(gateway_for) -> None:
    notes = NoteOrchestrator(gateway_for(Identity.anonymous()))

    with pytest.raises(UseCaseError) as excinfo:
        notes.add("hello")

    assert excinfo.value.code == ErrorCode.NOTE_REJECTED
    assert excinfo.value.message == "Could not add note: Authentication required"


def test_update_and_delete_refetch(notes: NoteOrchestrator) -> None:
    first = notes.add("one")
    notes.add("two")

    notes.update(first, "one, edited")
    assert notes.notes[0] == Note(first, "one, edited")

    notes.delete(first)
    assert [note.content for note in notes.notes] == ["two"]


def test_search_and_blank_search(backend: BackendMock, notes: NoteOrchestrator) -> None:
    notes.add("Groceries: milk")
    notes.add("Call the bank")

    found = notes.search(" MILK ")
    assert [note.content for note in found] == ["Groceries: milk"]
    assert notes.query == "MILK"

    everything = notes.search("  ")
    assert len(everything) == 2
    assert notes.query == ""
    assert backend.calls_to("search_notes") == 1


def test_failed_fetch_keeps_current_notes(backend: BackendMock, notes: NoteOrchestrator) -> None:
    notes.add("kept")
    backend.fail_next("get_notes", ApiTimeoutError("slow"))

    with pytest.raises(UseCaseError) as excinfo:
        notes.fetch()

    assert excinfo.value.code == ErrorCode.FETCH_FAILED
    assert notes.notes == [Note(0, "kept")]
    assert notes.guard.is_busy is False


def test_mutation_transport_failure(backend: BackendMock, notes: NoteOrchestrator) -> None:
    backend.fail_next("delete_note", ApiServerError("ctx", status=500))

    with pytest.raises(UseCaseError) as excinfo:
        notes.delete(3)

    assert excinfo.value.code == ErrorCode.NOTE_OPERATION_FAILED
    assert excinfo.value.message.startswith("Could not delete note")
    assert notes.guard.is_held(NOTES) is False


def test_unauthenticated_reads_are_not_ready(gateway_for) -> None:
    notes = NoteOrchestrator(gateway_for(authenticated=False))

    with pytest.raises(UseCaseError) as excinfo:
        notes.fetch()

    assert excinfo.value.code == ErrorCode.NOT_READY


def test_concurrent_mutation_is_rejected(backend: BackendMock, notes: NoteOrchestrator) -> None:
    with notes.guard.hold(NOTES):
        with pytest.raises(UseCaseError) as excinfo:
            notes.add("second")

    assert excinfo.value.code == ErrorCode.OPERATION_IN_PROGRESS
    assert backend.calls_to("add_note") == 0


def test_committed_add_survives_failed_refetch(
    backend: BackendMock, notes: NoteOrchestrator, alice: Identity
) -> None:
    notes.add("kept")
    backend.fail_next("get_notes", ApiTimeoutError("slow"))

    note_id = notes.add("buy milk")

    assert note_id == 1
    assert notes.refresh_error.code == ErrorCode.FETCH_FAILED
    assert notes.notes == [Note(0, "kept")]
    assert backend.actor_for(alice).get_notes() == [[0, "kept"], [1, "buy milk"]]
    assert notes.guard.is_held(NOTES) is False

    notes.delete(0)
    assert notes.refresh_error is None
    assert notes.notes == [Note(1, "buy milk")]
