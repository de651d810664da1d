from __future__ import annotations

from typing import Mapping, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules.

    ``errors`` maps form field names to messages so templates can show them
    next to the offending input.
    """

    def __init__(self, message: str, errors: Optional[Mapping[str, str]] = None):
        super().__init__(message)
        self.errors = dict(errors or {})


class NotFoundError(DomainError):
    """Raised when a record does not exist."""


class StaleRecordError(DomainError):
    """Raised when a write carries a revision older than the stored one."""


class BackendError(DomainError):
    """Raised when the storage backend fails; message comes from the driver."""
