"""Busy flag plus one lock per operation class.

The busy flag mirrors what the UI shows (controls disabled while anything is
outstanding). The per-class locks make a second transfer, ledger
configuration, or note mutation fail fast instead of interleaving with the
first one. Locks are never waited on and nothing here times out.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Iterator

from notedapp.domain.errors import ErrorCode
from notedapp.domain.ports import UseCaseError

TRANSFER = "transfer"
LEDGER_CONFIG = "ledger_config"
NOTES = "notes"


class OperationGuard:
    def __init__(self) -> None:
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        self._active = 0
        self._count_lock = threading.Lock()

    @property
    def is_busy(self) -> bool:
        return self._active > 0

    def is_held(self, op_class: str) -> bool:
        return self._lock_for(op_class).locked()

    @contextmanager
    def busy(self) -> Iterator[None]:
        """Mark the shared busy flag for the duration of the block."""
        with self._count_lock:
            self._active += 1
        try:
            yield
        finally:
            with self._count_lock:
                self._active -= 1

    @contextmanager
    def hold(self, op_class: str) -> Iterator[None]:
        """Run the block as the single outstanding ``op_class`` operation.

        Raises:
            UseCaseError: ``OPERATION_IN_PROGRESS`` if one is already running.
        """
        lock = self._lock_for(op_class)
        if not lock.acquire(blocking=False):
            raise UseCaseError(
                ErrorCode.OPERATION_IN_PROGRESS,
                f"A {op_class.replace('_', ' ')} operation is already in progress.",
                meta={"operation": op_class},
            )
        try:
            with self.busy():
                yield
        finally:
            lock.release()

    def _lock_for(self, op_class: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(op_class)
            if lock is None:
                lock = self._locks[op_class] = threading.Lock()
            return lock


__all__ = ["LEDGER_CONFIG", "NOTES", "OperationGuard", "TRANSFER"]
