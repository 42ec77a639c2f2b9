from __future__ import annotations

"""Session lifecycle: identity acquisition, actor binding, login and logout."""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from notedapp.domain.entities import EndpointConfig, Session, SessionState
from notedapp.domain.errors import ErrorCode
from notedapp.domain.ports import ActorPort, IdentityProviderPort, UseCaseError

LOGGER = logging.getLogger(__name__)


def _noop(*_: object, **__: object) -> None:
    """Default no-op callback used for hooks."""


@dataclass
class SessionHooks:
    """Optional callbacks triggered on session transitions."""

    on_changed: Callable[[Session], None] = _noop
    """Called after every session swap, authenticated or not."""
    on_authenticated: Callable[[Session], None] = _noop
    """Called after an authenticated session is bound; runs the full resync."""

    def __post_init__(self) -> None:
        self.on_changed = self.on_changed or _noop
        self.on_authenticated = self.on_authenticated or _noop


class SessionManager:
    """Owns the current ``Session`` and mediates login/logout.

    State machine::

        UNAUTHENTICATED -> AUTHENTICATING -> AUTHENTICATED
        AUTHENTICATED   -> AUTHENTICATING -> UNAUTHENTICATED   (logout)

    The ``Session`` object is replaced in a single assignment, so readers
    never see an actor without its authenticated flag or the reverse.
    """

    def __init__(
        self,
        identity_provider: IdentityProviderPort,
        endpoint: EndpointConfig,
        *,
        return_target: str = "/",
        hooks: Optional[SessionHooks] = None,
    ) -> None:
        self.identity_provider = identity_provider
        self.endpoint = endpoint
        self.return_target = return_target
        self.hooks = hooks or SessionHooks()
        self._session = Session.empty()
        self._state = SessionState.UNAUTHENTICATED

    @property
    def session(self) -> Session:
        return self._session

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._session.authenticated

    @property
    def actor(self) -> Optional[ActorPort]:
        return self._session.actor

    @property
    def principal_text(self) -> str:
        return self._session.principal_text

    def initialize(self) -> Session:
        """Acquire identity and actor, bind the session, resync if authenticated.

        Safe to call repeatedly and before any login: without an
        authenticated identity it yields an unauthenticated session bound to
        an anonymous actor.

        Raises:
            UseCaseError: ``SESSION_INIT_FAILED`` when the identity provider
                fails; errors raised by the resync hook propagate after the
                session is bound.
        """
        LOGGER.info("Initializing session")
        self._state = SessionState.AUTHENTICATING
        try:
            identity = self.identity_provider.create_identity_session()
            authenticated = bool(self.identity_provider.is_authenticated(identity))
            actor = self.identity_provider.bind_actor(identity, self.endpoint)
        except Exception as exc:
            LOGGER.exception("Session initialization failed")
            self._bind(Session.empty())
            raise UseCaseError(
                ErrorCode.SESSION_INIT_FAILED,
                f"Could not initialize session: {exc}",
            ) from exc

        session = Session(
            identity=identity if authenticated else None,
            actor=actor,
            authenticated=authenticated,
        )
        self._bind(session)
        if authenticated:
            LOGGER.info("Authenticated as %s", session.principal_text)
            self.hooks.on_authenticated(session)
        else:
            LOGGER.info("Session is unauthenticated")
        return session

    def login(self) -> Session:
        """Run the provider's interactive flow; re-initialize on success.

        An abandoned flow leaves the previous session in place and is not an
        error.
        """
        previous = self._state
        self._state = SessionState.AUTHENTICATING
        try:
            completed = self.identity_provider.interactive_login(self.return_target)
        except Exception:
            self._state = previous
            raise
        if not completed:
            LOGGER.info("Login flow did not complete")
            self._state = (
                SessionState.AUTHENTICATED
                if self._session.authenticated
                else SessionState.UNAUTHENTICATED
            )
            return self._session
        return self.initialize()

    def logout(self) -> Session:
        LOGGER.info("Logging out %s", self._session.principal_text or "<anonymous>")
        previous = self._state
        self._state = SessionState.AUTHENTICATING
        try:
            self.identity_provider.logout()
        except Exception:
            self._state = previous
            raise
        return self.initialize()

    def _bind(self, session: Session) -> None:
        self._session = session
        self._state = (
            SessionState.AUTHENTICATED if session.authenticated else SessionState.UNAUTHENTICATED
        )
        self.hooks.on_changed(session)


__all__ = ["SessionHooks", "SessionManager"]
