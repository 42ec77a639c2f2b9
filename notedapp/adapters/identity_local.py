"""In-process identity provider.

Keeps the current identity in memory and delegates the interactive part of
login to a ``navigator`` callable (browser hand-off, device flow, test
double). The navigator receives the authorize URL and the return target and
returns the resulting ``Identity``, or ``None`` when the user abandons the
flow.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from notedapp.domain.entities import EndpointConfig, Identity
from notedapp.domain.ports import ActorPort, IdentityProviderPort

LOGGER = logging.getLogger(__name__)

ActorFactory = Callable[[Identity, EndpointConfig], ActorPort]
Navigator = Callable[[str, str], Optional[Identity]]


def _abandon(url: str, return_target: str) -> Optional[Identity]:
    """Default navigator used when no interactive flow is wired."""
    LOGGER.info("No login navigator configured; ignoring %s -> %s", url, return_target)
    return None


class LocalIdentityProvider(IdentityProviderPort):
    def __init__(
        self,
        actor_factory: ActorFactory,
        *,
        provider_url: str,
        navigator: Optional[Navigator] = None,
        clock_ns: Callable[[], int] = time.time_ns,
    ) -> None:
        self.actor_factory = actor_factory
        self.provider_url = provider_url.rstrip("/")
        self.navigator = navigator or _abandon
        self.clock_ns = clock_ns
        self._identity: Optional[Identity] = None

    @property
    def authorize_url(self) -> str:
        return f"{self.provider_url}#authorize"

    def create_identity_session(self) -> Identity:
        if self._identity is not None and self._identity.is_expired(self.clock_ns()):
            LOGGER.info("Stored identity expired; falling back to anonymous")
            self._identity = None
        return self._identity or Identity.anonymous()

    def is_authenticated(self, identity: Identity) -> bool:
        return not identity.is_anonymous and not identity.is_expired(self.clock_ns())

    def interactive_login(self, return_target: str) -> bool:
        identity = self.navigator(self.authorize_url, return_target)
        if identity is None or identity.is_anonymous:
            LOGGER.info("Interactive login abandoned")
            return False
        self._identity = identity
        LOGGER.info("Interactive login completed for %s", identity.principal)
        return True

    def logout(self) -> None:
        self._identity = None

    def bind_actor(self, identity: Identity, endpoint: EndpointConfig) -> ActorPort:
        return self.actor_factory(identity, endpoint)


__all__ = ["ActorFactory", "LocalIdentityProvider", "Navigator"]
