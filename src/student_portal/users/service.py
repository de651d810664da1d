from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Mapping, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import (
    collect_errors,
    normalize_identifier,
    require_max_length,
    require_min_length,
    validate_department,
    validate_email,
    validate_identifier,
    validate_name,
    validate_semester,
)
from ..core.constants import MAX_PASSWORD_LENGTH, MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import BackendError, ValidationError
from ..database.mysql_base import is_duplicate_key
from .model import Credential, Identity
from .repository import CredentialRepository

logger = logging.getLogger(__name__)

DUPLICATE = "duplicate"


@dataclass(frozen=True)
class RegistrationPayload:
    name: str
    identifier: str
    secret: str
    role: Role = Role.STUDENT
    email: Optional[str] = None
    department: Optional[str] = None
    semester: Optional[int] = None

    @classmethod
    def from_form(cls, form: Mapping[str, str], *, allow_admin: bool = False) -> "RegistrationPayload":
        """Validate the registration form; raises ``ValidationError`` with every field message."""

        def _role() -> Role:
            try:
                role = Role(form.get("role") or Role.STUDENT.value)
            except ValueError:
                raise ValidationError("Unknown account type")
            if role == Role.ADMIN and not allow_admin:
                raise ValidationError("Admin accounts cannot be self-registered")
            return role

        def _password() -> str:
            password = (form.get("password") or "").strip()
            require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
            require_max_length(password, "Password", MAX_PASSWORD_LENGTH)
            return password

        def _confirm() -> str:
            if (form.get("confirmPassword") or "") != (form.get("password") or ""):
                raise ValidationError("Passwords do not match")
            return ""

        cleaned = collect_errors(
            name=lambda: validate_name(form.get("name")),
            regNumber=lambda: validate_identifier(form.get("regNumber")),
            email=lambda: validate_email(form.get("email")),
            role=_role,
            department=lambda: validate_department(form.get("department")),
            semester=lambda: validate_semester(form.get("semester")),
            password=_password,
            confirmPassword=_confirm,
        )
        is_student = cleaned["role"] == Role.STUDENT
        return cls(
            name=cleaned["name"],
            identifier=cleaned["regNumber"],
            secret=cleaned["password"],
            role=cleaned["role"],
            email=cleaned["email"],
            department=cleaned["department"] if is_student else None,
            semester=cleaned["semester"] if is_student else None,
        )


@dataclass(frozen=True)
class RegistrationResult:
    success: bool
    identity: Optional[Identity] = None
    reason: Optional[str] = None


class CredentialAuthority:
    """Use case: look up credentials (login) and register new identities.

    Failures come back as values (``None`` / ``RegistrationResult``); callers decide
    how to surface them.
    """

    def __init__(self, users: CredentialRepository):
        self._users = users

    def find_by_credentials(self, identifier: str, secret: str) -> Optional[Identity]:
        credential = self._users.get_by_identifier(normalize_identifier(identifier))
        if not credential:
            return None

        try:
            ok = check_password_hash(credential.password_hash, (secret or "").strip())
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        return credential.identity if ok else None

    def get_identity(self, user_id: str) -> Optional[Identity]:
        credential = self._users.get_by_id(user_id)
        return credential.identity if credential else None

    def register(self, payload: RegistrationPayload) -> RegistrationResult:
        identifier = normalize_identifier(payload.identifier)
        if self._users.get_by_identifier(identifier):
            logger.info("registration rejected, duplicate identifier %s", identifier)
            return RegistrationResult(success=False, reason=DUPLICATE)

        identity = Identity(
            id=uuid.uuid4().hex,
            name=payload.name.strip(),
            identifier=identifier,
            role=payload.role,
            email=payload.email,
            department=payload.department,
            semester=payload.semester,
        )
        credential = Credential(identity=identity, password_hash=generate_password_hash(payload.secret.strip()))
        try:
            self._users.create(credential)
        except BackendError as e:
            # Lost a race with a concurrent registration of the same identifier.
            if is_duplicate_key(e):
                return RegistrationResult(success=False, reason=DUPLICATE)
            raise

        logger.info("registered %s account %s", identity.role.value, identifier)
        return RegistrationResult(success=True, identity=identity)
