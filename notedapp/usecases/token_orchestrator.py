from __future__ import annotations

"""Balance reconciliation over two ledgers and transfer execution."""

import logging
from typing import List, Optional

from notedapp.adapters.gateway import RemoteDataGateway
from notedapp.domain.entities import (
    BalanceSnapshot,
    TransactionRecord,
    TransferKind,
    TransferOutcome,
    TransferRequest,
)
from notedapp.domain.errors import ErrorCode
from notedapp.domain.ports import UseCaseError
from notedapp.domain.principal import Principal
from notedapp.domain.result import Err, TaggedResult, ok_or_none
from notedapp.usecases.error_mapping import map_api_error, map_remote_error
from notedapp.usecases.operation_guard import LEDGER_CONFIG, TRANSFER, OperationGuard

LOGGER = logging.getLogger(__name__)


class TokenOrchestrator:
    """Unified balance view over the internal and external ledgers.

    The backend is the only source of truth: balances held here are used for
    the pre-flight check of the next transfer and nothing else, and every
    accepted mutation is followed by ``refresh()`` before the call returns.
    """

    def __init__(
        self,
        gateway: RemoteDataGateway,
        guard: Optional[OperationGuard] = None,
    ) -> None:
        self.gateway = gateway
        self.guard = guard or OperationGuard()
        self.internal_balance: Optional[int] = None
        self.external_balance: Optional[int] = None
        self.history: List[TransactionRecord] = []
        self.external_ledger_id: Optional[Principal] = None
        self.pending: Optional[TransferRequest] = None
        self.refresh_error: Optional[UseCaseError] = None
        """Set when the refresh after an accepted ledger configuration failed."""

    # ------------------------------------------------------------------
    # View state
    # ------------------------------------------------------------------
    @property
    def balances(self) -> BalanceSnapshot:
        return BalanceSnapshot(internal=self.internal_balance, external=self.external_balance)

    @property
    def offers_external_transfer(self) -> bool:
        return self.external_balance is not None

    @property
    def offers_ledger_configuration(self) -> bool:
        return self.external_ledger_id is None

    def clear(self) -> None:
        """Forget all token state (used on logout)."""
        self.internal_balance = None
        self.external_balance = None
        self.history = []
        self.external_ledger_id = None
        self.pending = None
        self.refresh_error = None

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------
    def refresh(self) -> BalanceSnapshot:
        """Re-fetch both balances, history, and the ledger configuration.

        Internal balance and history failures raise ``FETCH_FAILED`` and
        leave the previously fetched values untouched. The external balance
        and ledger configuration are speculative reads: any failure resolves
        to ``None`` and never fails the refresh.
        """
        with self.guard.busy():
            try:
                internal = self.gateway.get_balance()
                history = self.gateway.get_transaction_history()
            except UseCaseError:
                raise
            except Exception as exc:
                LOGGER.warning("Token refresh failed: %s", exc)
                raise map_api_error(
                    exc,
                    default_code=ErrorCode.FETCH_FAILED,
                    default_message="Could not load token data",
                ) from exc

            external = self._probe_external_balance()
            ledger_id = self._probe_ledger_id()

            self.internal_balance = internal
            self.history = history
            self.external_balance = external
            self.external_ledger_id = ledger_id
        return self.balances

    def _probe_external_balance(self) -> Optional[int]:
        try:
            value = ok_or_none(self.gateway.get_external_balance())
        except Exception as exc:
            LOGGER.debug("External balance not available: %s", exc)
            return None
        if value is None:
            LOGGER.debug("External balance not available: ledger reported an error")
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            LOGGER.debug("External balance not available: unexpected value %r", value)
            return None

    def _probe_ledger_id(self) -> Optional[Principal]:
        try:
            return self.gateway.get_ledger_config().external_ledger_id
        except Exception as exc:
            LOGGER.debug("No external ledger configured: %s", exc)
            return None

    def filter_history(self, kind: Optional[TransferKind] = None) -> List[TransactionRecord]:
        """Replace ``history`` with the backend's view filtered by ``kind``."""
        with self.guard.busy():
            try:
                history = self.gateway.get_transaction_history(kind)
            except UseCaseError:
                raise
            except Exception as exc:
                raise map_api_error(
                    exc,
                    default_code=ErrorCode.FETCH_FAILED,
                    default_message="Could not load transaction history",
                ) from exc
        self.history = history
        return history

    # ------------------------------------------------------------------
    # Ledger configuration
    # ------------------------------------------------------------------
    def configure_external_ledger(self, id_text: str) -> Principal:
        """Point the backend at an external ledger and refresh on success.

        Once the backend accepts the id the call succeeds; a failing refresh
        afterwards is logged and kept in ``refresh_error``.
        """
        try:
            ledger_id = Principal.from_text(id_text or "")
        except ValueError as exc:
            raise UseCaseError(
                ErrorCode.INVALID_FORMAT,
                "Please enter a valid canister ID.",
            ) from exc

        with self.guard.hold(LEDGER_CONFIG):
            self.refresh_error = None
            try:
                result = self.gateway.set_ledger_config(ledger_id)
            except UseCaseError:
                raise
            except Exception as exc:
                LOGGER.warning("Ledger configuration call failed: %s", exc)
                raise map_api_error(
                    exc,
                    default_code=ErrorCode.CONFIGURATION_REJECTED,
                    default_message="Failed to configure external ledger",
                ) from exc
            if isinstance(result, Err):
                raise UseCaseError(
                    ErrorCode.CONFIGURATION_REJECTED,
                    f"Failed to configure external ledger: {result.error.message}",
                    meta={"tag": result.error.tag},
                )
            LOGGER.info("External ledger configured: %s", ledger_id)
            try:
                self.refresh()
            except UseCaseError as exc:
                LOGGER.warning("Refresh after ledger configuration failed: %s", exc.message)
                self.refresh_error = exc
        return ledger_id

    # ------------------------------------------------------------------
    # Transfers
    # ------------------------------------------------------------------
    def transfer(self, request: TransferRequest) -> TransferOutcome:
        """Validate, dispatch, and reconcile one transfer.

        Pre-flight checks run in a fixed order and stop at the first failure
        without any remote call. The backend's answer is the only success
        signal.

        Raises:
            UseCaseError: Pre-flight failure, mapped backend ``Err``, or
                ``TRANSFER_FAILED`` on transport failure.
        """
        if not self.gateway.is_ready():
            raise UseCaseError(ErrorCode.NOT_READY, "Please sign in first.")

        with self.guard.hold(TRANSFER):
            self.pending = request
            try:
                amount, recipient = self._preflight(request)
                result = self._dispatch(request.kind, recipient, amount)
            finally:
                self.pending = None

            if isinstance(result, Err):
                LOGGER.info("%s transfer rejected: %s", request.kind.label, result.error.tag)
                raise map_remote_error(result.error)

            LOGGER.info("%s transfer of %s to %s accepted", request.kind.label, amount, recipient)
            refresh_error: Optional[UseCaseError] = None
            try:
                self.refresh()
            except UseCaseError as exc:
                refresh_error = exc
            return TransferOutcome(
                request=request,
                amount=amount,
                recipient=recipient,
                receipt=result.value,
                refreshed=refresh_error is None,
                refresh_error=refresh_error,
            )

    def _dispatch(self, kind: TransferKind, recipient: Principal, amount: int) -> TaggedResult:
        # separate backend calls: each ledger has its own auth and accounting
        try:
            if kind is TransferKind.EXTERNAL:
                return self.gateway.external_transfer(recipient, amount)
            return self.gateway.internal_transfer(recipient, amount)
        except UseCaseError:
            raise
        except Exception as exc:
            LOGGER.exception("%s transfer failed in transport", kind.label)
            raise map_api_error(
                exc,
                default_code=ErrorCode.TRANSFER_FAILED,
                default_message="Transfer failed",
            ) from exc

    def _preflight(self, request: TransferRequest) -> tuple[int, Principal]:
        recipient_text = str(request.recipient or "").strip()
        amount_text = str(request.amount if request.amount is not None else "").strip()

        if not recipient_text:
            raise UseCaseError(ErrorCode.INVALID_PRINCIPAL_FORMAT, "Please fill in all fields")
        if not amount_text:
            raise UseCaseError(ErrorCode.INVALID_AMOUNT, "Please fill in all fields")

        amount = _parse_amount(amount_text)
        if amount is None:
            raise UseCaseError(ErrorCode.INVALID_AMOUNT, "Please enter a valid amount")

        if request.kind is TransferKind.EXTERNAL and self.external_balance is None:
            raise UseCaseError(
                ErrorCode.EXTERNAL_LEDGER_UNAVAILABLE,
                "External balance not available. Please configure the external ledger.",
            )

        available = self.balances.available(request.kind) or 0
        if amount > available:
            raise UseCaseError(
                ErrorCode.INSUFFICIENT_BALANCE,
                "Insufficient balance",
                meta={"available": available, "requested": amount},
            )

        try:
            recipient = Principal.from_text(recipient_text)
        except ValueError as exc:
            raise UseCaseError(ErrorCode.INVALID_PRINCIPAL_FORMAT, "Invalid principal format") from exc
        return amount, recipient


def _parse_amount(text: str) -> Optional[int]:
    """Positive integer from plain ASCII digits, ``None`` for anything else."""
    if not (text.isascii() and text.isdigit()):
        return None
    value = int(text)
    if value <= 0:
        return None
    return value


__all__ = ["TokenOrchestrator"]
