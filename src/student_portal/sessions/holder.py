from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..core.enums import SessionState
from ..core.exceptions import BackendError
from ..users.model import Identity
from ..users.service import CredentialAuthority
from .store import SessionStore

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid registration number or password"


@dataclass(frozen=True)
class LoginResult:
    success: bool
    identity: Optional[Identity] = None
    message: Optional[str] = None


class SessionHolder:
    """The current client's identity, with an explicit restore / login / logout lifecycle.

    One holder is created per request by the application root; nothing here is
    module-level state.
    """

    def __init__(self, store: SessionStore, authority: CredentialAuthority):
        self._store = store
        self._authority = authority
        self._current: Optional[Identity] = None
        self._state = SessionState.UNAUTHENTICATED
        self.error: Optional[str] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def current(self) -> Optional[Identity]:
        return self._current

    @property
    def is_authenticated(self) -> bool:
        return self._state == SessionState.AUTHENTICATED and self._current is not None

    def restore(self) -> SessionState:
        """Rebuild the session from storage, re-fetching profile and role."""
        self._state = SessionState.LOADING
        self.error = None

        saved = self._load_saved()
        if saved is None:
            return self._set(None)

        try:
            identity = self._authority.get_identity(saved.id)
        except BackendError as e:
            # Keep the stored identity so a later request can recover.
            logger.warning("session restore failed for %s: %s", saved.identifier, e)
            self.error = str(e)
            return self._set(None)

        if identity is None:
            logger.info("stored session for %s no longer matches an account", saved.identifier)
            self._store.clear()
            return self._set(None)

        if identity != saved:
            self._store.save(identity.to_dict())
        return self._set(identity)

    def login(self, identifier: str, secret: str, *, remember: bool = False) -> LoginResult:
        identity = self._authority.find_by_credentials(identifier, secret)
        if identity is None:
            logger.info("login failed for %s", (identifier or "").strip().upper())
            return LoginResult(success=False, message=INVALID_CREDENTIALS)

        self._store.save(identity.to_dict(), remember=remember)
        self._set(identity)
        logger.info("login %s (%s)", identity.identifier, identity.role.value)
        return LoginResult(success=True, identity=identity)

    def logout(self) -> None:
        if self._current is not None:
            logger.info("logout %s", self._current.identifier)
        self._store.clear()
        self._set(None)

    def _load_saved(self) -> Optional[Identity]:
        data = self._store.load()
        if not data:
            return None
        try:
            return Identity.from_dict(data)
        except (KeyError, TypeError, ValueError):
            logger.warning("discarding malformed stored session")
            self._store.clear()
            return None

    def _set(self, identity: Optional[Identity]) -> SessionState:
        self._current = identity
        self._state = SessionState.AUTHENTICATED if identity else SessionState.UNAUTHENTICATED
        return self._state
