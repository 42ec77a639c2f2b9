"""Adapter, use-case, and view-model wiring for the client runtime.

This module owns lazy construction of the identity provider, session
manager, gateway, orchestrators, and view models from
:class:`notedapp.app.settings.ClientSettings`. A view layer creates one
controller, calls ``start()`` once, and binds its widgets to ``token_vm`` and
``notes_vm``.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..adapters.backend_mock import BackendMock
from ..adapters.backend_rest import make_rest_actor
from ..adapters.gateway import RemoteDataGateway
from ..adapters.identity_local import LocalIdentityProvider, Navigator
from ..domain.entities import Session
from ..domain.errors import ErrorCode
from ..domain.ports import IdentityProviderPort, UseCaseError
from ..domain.principal import Principal
from ..usecases.note_orchestrator import NoteOrchestrator
from ..usecases.operation_guard import OperationGuard
from ..usecases.session_manager import SessionHooks, SessionManager
from ..usecases.token_orchestrator import TokenOrchestrator
from ..viewmodels.notes_vm import NotesVM
from ..viewmodels.token_vm import TokenVM
from ..utils.logging import apply_debug_preference, configure_root
from .settings import ClientSettings

LOGGER = logging.getLogger(__name__)


class AppController:
    """Create and cache runtime collaborators from settings state.

    Call chain:
        view -> ``start``/``login``/``logout`` -> ``SessionManager`` ->
        ``resync`` (on authentication) -> ``NoteOrchestrator.fetch`` and
        ``TokenOrchestrator.refresh``.
    """

    def __init__(
        self,
        settings: ClientSettings,
        *,
        identity_provider: Optional[IdentityProviderPort] = None,
        backend: Optional[BackendMock] = None,
        navigator: Optional[Navigator] = None,
    ) -> None:
        """Initialize controller with settings-backed lazy dependencies.

        Args:
            settings: Endpoint, network, and mock-backend selection.
            identity_provider: Provider to use instead of the local one.
            backend: In-memory backend to bind actors to when
                ``settings.use_mock_backend`` is set; created on demand.
            navigator: Interactive login hand-off for the local provider.
        """
        self.settings = settings
        self.backend = backend
        self.navigator = navigator
        self._identity_provider = identity_provider
        self.session_manager: Optional[SessionManager] = None
        self.gateway: Optional[RemoteDataGateway] = None
        self.guard: Optional[OperationGuard] = None
        self.uc_tokens: Optional[TokenOrchestrator] = None
        self.uc_notes: Optional[NoteOrchestrator] = None
        self.token_vm: Optional[TokenVM] = None
        self.notes_vm: Optional[NotesVM] = None

    @property
    def identity_provider(self) -> Optional[IdentityProviderPort]:
        return self._identity_provider

    def reset(self) -> None:
        """Drop all cached collaborators; the next ``ensure_ready`` rebuilds."""
        self.session_manager = None
        self.gateway = None
        self.guard = None
        self.uc_tokens = None
        self.uc_notes = None
        self.token_vm = None
        self.notes_vm = None

    def ensure_ready(self) -> bool:
        """Build collaborators if needed.

        Returns:
            ``True`` when everything is wired, ``False`` when settings lack a
            backend canister id (and no mock backend is selected).
        """
        if self.session_manager is not None:
            return True
        if not self.settings.is_valid():
            return False
        configure_root()
        apply_debug_preference(self.settings.debug_logging)

        if self._identity_provider is None:
            if self.settings.use_mock_backend:
                if self.backend is None:
                    self.backend = BackendMock()
                actor_factory = self.backend.actor_factory
            else:
                actor_factory = make_rest_actor
            self._identity_provider = LocalIdentityProvider(
                actor_factory,
                provider_url=self.settings.identity_provider_url,
                navigator=self.navigator,
            )

        self.session_manager = SessionManager(
            self._identity_provider,
            self.settings.endpoint(),
            hooks=SessionHooks(
                on_changed=self._on_session_changed,
                on_authenticated=self._on_authenticated,
            ),
        )
        self.gateway = RemoteDataGateway(lambda: self.session_manager.session)
        self.guard = OperationGuard()
        self.uc_tokens = TokenOrchestrator(self.gateway, self.guard)
        self.uc_notes = NoteOrchestrator(self.gateway, self.guard)
        self.token_vm = TokenVM(
            self.uc_tokens,
            principal_source=lambda: self.session_manager.principal_text,
        )
        self.notes_vm = NotesVM(self.uc_notes)
        return True

    # ------------------------------------------------------------------
    # Session commands
    # ------------------------------------------------------------------
    def start(self) -> Session:
        return self._require().initialize()

    def login(self) -> Session:
        return self._require().login()

    def logout(self) -> Session:
        return self._require().logout()

    def whoami(self) -> Principal:
        self._require()
        return self.gateway.whoami()

    def resync(self) -> None:
        """Reload notes, balances, and ledger configuration.

        Both reads are attempted; the first failure is re-raised afterwards.
        """
        self._require()
        first_error: Optional[UseCaseError] = None
        for label, action in (("notes", self.uc_notes.fetch), ("tokens", self.uc_tokens.refresh)):
            try:
                action()
            except UseCaseError as exc:
                LOGGER.warning("Resync of %s failed: %s", label, exc.message)
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error

    # ------------------------------------------------------------------
    def _require(self) -> SessionManager:
        if not self.ensure_ready():
            raise UseCaseError(ErrorCode.NOT_READY, "Backend canister id is not configured.")
        return self.session_manager

    def _on_session_changed(self, session: Session) -> None:
        if not session.authenticated and self.uc_tokens is not None:
            self.uc_tokens.clear()
            self.uc_notes.clear()

    def _on_authenticated(self, session: Session) -> None:
        _ = session
        self.resync()


__all__ = ["AppController"]
