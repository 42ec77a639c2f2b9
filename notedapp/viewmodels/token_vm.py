"""Token panel state: balances, transfer form, ledger configuration, history.

Call context:
    ``AppController`` builds one instance around the shared
    ``TokenOrchestrator``; views read the properties and bind buttons to the
    ``cmd_*`` methods.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional

from notedapp.domain.entities import TransactionRecord, TransferKind, TransferOutcome, TransferRequest
from notedapp.domain.ports import UseCaseError
from notedapp.usecases.token_orchestrator import TokenOrchestrator
from .status_format import (
    error_message,
    format_amount,
    format_principal,
    format_timestamp,
    transfer_success_message,
)


@dataclass
class TransactionRow:
    """Display row for the transaction history table."""
    direction: str
    counterparty: str
    amount: str
    kind: str
    when: str
    block: str


class TokenVM:
    def __init__(
        self,
        orchestrator: TokenOrchestrator,
        *,
        principal_source: Callable[[], str] = lambda: "",
        on_changed: Optional[Callable[[], None]] = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.principal_source = principal_source
        self.on_changed = on_changed

        self.transfer_to: str = ""
        self.transfer_amount: str = ""
        self.transfer_kind: TransferKind = TransferKind.INTERNAL
        self.ledger_id_text: str = ""
        self.status: str = ""
        self.show_transfer_form: bool = False
        self.show_ledger_config: bool = False

    # ------------------------------------------------------------------
    # Display state
    # ------------------------------------------------------------------
    @property
    def balance_text(self) -> str:
        return format_amount(self.orchestrator.internal_balance)

    @property
    def external_balance_text(self) -> str:
        return format_amount(self.orchestrator.external_balance)

    @property
    def can_transfer_external(self) -> bool:
        return self.orchestrator.offers_external_transfer

    @property
    def offer_ledger_config(self) -> bool:
        return self.orchestrator.offers_ledger_configuration

    @property
    def is_busy(self) -> bool:
        return self.orchestrator.guard.is_busy

    def history_rows(self) -> List[TransactionRow]:
        me = self.principal_source()
        return [self._to_row(record, me) for record in self.orchestrator.history]

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def set_transfer_kind(self, kind: TransferKind | str) -> None:
        self.transfer_kind = kind if isinstance(kind, TransferKind) else TransferKind.from_wire(kind)

    def cmd_refresh(self) -> None:
        try:
            self.orchestrator.refresh()
        except UseCaseError as exc:
            self.status = error_message(exc)
        self._notify()

    def cmd_transfer(self) -> Optional[TransferOutcome]:
        request = TransferRequest(
            kind=self.transfer_kind,
            recipient=self.transfer_to,
            amount=self.transfer_amount,
        )
        self.status = ""
        try:
            outcome = self.orchestrator.transfer(request)
        except UseCaseError as exc:
            self.status = error_message(exc)
            self._notify()
            return None

        self.status = transfer_success_message(outcome.kind)
        if outcome.refresh_error is not None:
            self.status += f" ({error_message(outcome.refresh_error)})"
        self.transfer_to = ""
        self.transfer_amount = ""
        self.show_transfer_form = False
        self._notify()
        return outcome

    def cmd_configure_ledger(self) -> bool:
        self.status = ""
        try:
            self.orchestrator.configure_external_ledger(self.ledger_id_text)
        except UseCaseError as exc:
            self.status = error_message(exc)
            self._notify()
            return False
        self.status = "External ledger configured successfully!"
        if self.orchestrator.refresh_error is not None:
            self.status += f" ({error_message(self.orchestrator.refresh_error)})"
        self.show_ledger_config = False
        self._notify()
        return True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _notify(self) -> None:
        if self.on_changed:
            self.on_changed()

    @staticmethod
    def _to_row(record: TransactionRecord, me: str) -> TransactionRow:
        outgoing = record.sender == me
        counterparty = record.receiver if outgoing else record.sender
        return TransactionRow(
            direction="Sent" if outgoing else "Received",
            counterparty=format_principal(counterparty),
            amount=format_amount(record.amount),
            kind=record.kind.label,
            when=format_timestamp(record.timestamp_ns),
            block="" if record.block_index is None else str(record.block_index),
        )


__all__ = ["TokenVM", "TransactionRow"]
