from __future__ import annotations

from typing import Optional, Protocol

from .model import Credential


class CredentialRepository(Protocol):
    """Repository interface for stored credentials.

    Note (DIP): the service layer depends on this interface, not on a concrete DB.
    Identifiers passed in are already normalized.
    """

    def get_by_id(self, user_id: str) -> Optional[Credential]:
        raise NotImplementedError

    def get_by_identifier(self, identifier: str) -> Optional[Credential]:
        raise NotImplementedError

    def create(self, credential: Credential) -> None:
        raise NotImplementedError
