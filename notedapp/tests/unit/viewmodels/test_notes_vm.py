from __future__ import annotations

import pytest

from notedapp.adapters.api_errors import ApiTimeoutError
from notedapp.adapters.backend_mock import BackendMock
from notedapp.domain.entities import Identity
from notedapp.usecases.note_orchestrator import NoteOrchestrator
from notedapp.viewmodels.notes_vm import NotesVM


@pytest.fixture
def vm(gateway_for) -> NotesVM:
    return NotesVM(NoteOrchestrator(gateway_for()))


def test_add_clears_draft(vm: NotesVM) -> None:
    vm.new_note = "remember the milk"

    assert vm.cmd_add() is True
    assert vm.new_note == ""
    assert [row.content for row in vm.rows()] == ["remember the milk"]


def test_blank_draft_is_ignored(vm: NotesVM) -> None:
    vm.new_note = "  "

    assert vm.cmd_add() is False
    assert vm.status == ""
    assert vm.rows() == []


def test_edit_flow(vm: NotesVM) -> None:
    vm.new_note = "draft"
    vm.cmd_add()
    note_id = vm.rows()[0].id

    vm.cmd_start_edit(note_id, "draft")
    assert vm.rows()[0].editing is True
    vm.editing_content = "final"

    assert vm.cmd_save_edit() is True
    assert vm.editing_note_id is None
    assert vm.rows()[0].content == "final"
    assert vm.rows()[0].editing is False


def test_cancel_edit_and_save_without_edit(vm: NotesVM) -> None:
    vm.cmd_start_edit(1, "x")
    vm.cmd_cancel_edit()

    assert vm.editing_note_id is None
    assert vm.cmd_save_edit() is False


def test_search_and_failure_status(vm: NotesVM, gateway_for) -> None:
    vm.new_note = "alpha"
    vm.cmd_add()
    vm.new_note = "beta"
    vm.cmd_add()

    vm.search_query = "alp"
    assert vm.cmd_search() is True
    assert [row.content for row in vm.rows()] == ["alpha"]

    unbound = NotesVM(NoteOrchestrator(gateway_for(authenticated=False)))
    assert unbound.cmd_delete(0) is False
    assert unbound.status == "Please sign in first."


def test_add_with_failed_reload_clears_draft(
    vm: NotesVM, backend: BackendMock, alice: Identity
) -> None:
    backend.fail_next("get_notes", ApiTimeoutError("slow"))
    vm.new_note = "buy milk"

    assert vm.cmd_add() is True
    assert vm.new_note == ""
    assert vm.status.startswith("Done, but the note list could not be reloaded")

    assert vm.cmd_add() is False
    assert backend.actor_for(alice).get_notes() == [[0, "buy milk"]]


def test_save_edit_with_failed_reload_leaves_edit_mode(vm: NotesVM, backend: BackendMock) -> None:
    vm.new_note = "draft"
    vm.cmd_add()
    vm.cmd_start_edit(0, "draft")
    vm.editing_content = "final"
    backend.fail_next("get_notes", ApiTimeoutError("slow"))

    assert vm.cmd_save_edit() is True
    assert vm.editing_note_id is None
    assert vm.status != ""
