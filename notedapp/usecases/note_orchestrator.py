from __future__ import annotations

"""Note CRUD and search with re-fetch after every mutation."""

import logging
from typing import Callable, List, Optional

from notedapp.adapters.gateway import RemoteDataGateway
from notedapp.domain.entities import Note
from notedapp.domain.errors import ErrorCode
from notedapp.domain.ports import UseCaseError
from notedapp.domain.result import Err, TaggedResult
from notedapp.usecases.error_mapping import map_api_error
from notedapp.usecases.operation_guard import NOTES, OperationGuard

LOGGER = logging.getLogger(__name__)


class NoteOrchestrator:
    """Mirror of the caller's notes as the backend last reported them.

    Mutations never patch ``notes`` locally; a successful add, update or
    delete is followed by ``fetch()`` so ordering and content always match
    what the backend stored. When that re-fetch fails the mutation still
    returns normally and the failure is kept in ``refresh_error``.
    """

    def __init__(
        self,
        gateway: RemoteDataGateway,
        guard: Optional[OperationGuard] = None,
    ) -> None:
        self.gateway = gateway
        self.guard = guard or OperationGuard()
        self.notes: List[Note] = []
        self.query: str = ""
        self.refresh_error: Optional[UseCaseError] = None
        """Set when the re-fetch after a committed mutation failed."""

    def clear(self) -> None:
        self.notes = []
        self.query = ""
        self.refresh_error = None

    def fetch(self) -> List[Note]:
        """Load the full collection; on failure the current list is kept."""
        notes = self._read(self.gateway.fetch_notes, "Could not load notes")
        self.notes = notes
        self.query = ""
        return notes

    def search(self, query: str) -> List[Note]:
        """Replace the displayed list with matches; blank query loads all."""
        text = (query or "").strip()
        if not text:
            return self.fetch()
        notes = self._read(lambda: self.gateway.search_notes(text), "Search failed")
        self.notes = notes
        self.query = text
        return notes

    def add(self, content: str) -> int:
        text = (content or "").strip()
        if not text:
            raise UseCaseError(ErrorCode.EMPTY_CONTENT, "Note content is empty.")
        result = self._mutate(lambda: self.gateway.add_note(text), "Could not add note")
        return result.value

    def update(self, note_id: int, content: str) -> None:
        self._mutate(
            lambda: self.gateway.update_note(note_id, content),
            "Could not update note",
        )

    def delete(self, note_id: int) -> None:
        self._mutate(lambda: self.gateway.delete_note(note_id), "Could not delete note")

    # ------------------------------------------------------------------
    def _read(self, call: Callable[[], List[Note]], label: str) -> List[Note]:
        with self.guard.busy():
            try:
                return call()
            except UseCaseError:
                raise
            except Exception as exc:
                LOGGER.warning("%s: %s", label, exc)
                raise map_api_error(
                    exc,
                    default_code=ErrorCode.FETCH_FAILED,
                    default_message=label,
                ) from exc

    def _mutate(
        self, call: Callable[[], Optional[TaggedResult]], label: str
    ) -> Optional[TaggedResult]:
        with self.guard.hold(NOTES):
            self.refresh_error = None
            try:
                result = call()
            except UseCaseError:
                raise
            except Exception as exc:
                LOGGER.warning("%s: %s", label, exc)
                raise map_api_error(
                    exc,
                    default_code=ErrorCode.NOTE_OPERATION_FAILED,
                    default_message=label,
                ) from exc
            if isinstance(result, Err):
                raise UseCaseError(
                    ErrorCode.NOTE_REJECTED,
                    f"{label}: {result.error.message}",
                    meta={"tag": result.error.tag},
                )
            # committed: a re-fetch failure is recorded, not raised
            try:
                self.fetch()
            except UseCaseError as exc:
                LOGGER.warning("%s: committed, but re-fetch failed: %s", label, exc.message)
                self.refresh_error = exc
        return result


__all__ = ["NoteOrchestrator"]
