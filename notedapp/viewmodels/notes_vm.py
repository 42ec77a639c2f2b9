from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional

from notedapp.domain.ports import UseCaseError
from notedapp.usecases.note_orchestrator import NoteOrchestrator
from .status_format import error_message


@dataclass
class NoteRow:
    id: int
    content: str
    editing: bool


class NotesVM:
    """Notes panel state: new-note draft, search box, and inline editing."""

    def __init__(
        self,
        orchestrator: NoteOrchestrator,
        *,
        on_changed: Optional[Callable[[], None]] = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.on_changed = on_changed

        self.new_note: str = ""
        self.search_query: str = ""
        self.editing_note_id: Optional[int] = None
        self.editing_content: str = ""
        self.status: str = ""

    def rows(self) -> List[NoteRow]:
        return [
            NoteRow(id=note.id, content=note.content, editing=note.id == self.editing_note_id)
            for note in self.orchestrator.notes
        ]

    def cmd_add(self) -> bool:
        if not self.new_note.strip():
            return False
        if not self._run_mutation(lambda: self.orchestrator.add(self.new_note)):
            return False
        self.new_note = ""
        return True

    def cmd_delete(self, note_id: int) -> bool:
        return self._run_mutation(lambda: self.orchestrator.delete(note_id))

    def cmd_start_edit(self, note_id: int, content: str) -> None:
        self.editing_note_id = note_id
        self.editing_content = content
        self._notify()

    def cmd_cancel_edit(self) -> None:
        self.editing_note_id = None
        self.editing_content = ""
        self._notify()

    def cmd_save_edit(self) -> bool:
        if self.editing_note_id is None:
            return False
        note_id = self.editing_note_id
        if not self._run_mutation(lambda: self.orchestrator.update(note_id, self.editing_content)):
            return False
        self.editing_note_id = None
        self.editing_content = ""
        return True

    def cmd_search(self) -> bool:
        return self._run(lambda: self.orchestrator.search(self.search_query))

    def _run(self, action: Callable[[], object]) -> bool:
        self.status = ""
        try:
            action()
        except UseCaseError as exc:
            self.status = error_message(exc)
            self._notify()
            return False
        self._notify()
        return True

    def _run_mutation(self, action: Callable[[], object]) -> bool:
        """Like ``_run``; a committed change whose re-fetch failed still counts."""
        self.status = ""
        try:
            action()
        except UseCaseError as exc:
            self.status = error_message(exc)
            self._notify()
            return False
        refresh_error = self.orchestrator.refresh_error
        if refresh_error is not None:
            self.status = f"Done, but the note list could not be reloaded ({error_message(refresh_error)})"
        self._notify()
        return True

    def _notify(self) -> None:
        if self.on_changed:
            self.on_changed()


__all__ = ["NoteRow", "NotesVM"]
