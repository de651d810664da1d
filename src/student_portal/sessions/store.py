from __future__ import annotations

from typing import Optional, Protocol

from flask import session

from ..core.constants import SESSION_USER_KEY


class SessionStore(Protocol):
    """Where the current identity survives between requests / restarts."""

    def load(self) -> Optional[dict]:
        raise NotImplementedError

    def save(self, data: dict, *, remember: bool = False) -> None:
        """Persist ``data``; ``remember`` asks the store to outlive the browser session."""
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class FlaskSessionStore(SessionStore):
    """Backed by Flask's signed cookie session; only valid inside a request context."""

    def __init__(self, *, key: str = SESSION_USER_KEY):
        self._key = key

    def load(self) -> Optional[dict]:
        data = session.get(self._key)
        return dict(data) if isinstance(data, dict) else None

    def save(self, data: dict, *, remember: bool = False) -> None:
        session[self._key] = dict(data)
        if remember:
            session.permanent = True

    def clear(self) -> None:
        session.pop(self._key, None)
        session.permanent = False
