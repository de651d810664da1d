from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Mapping, Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Identity:
    """Domain entity: an authenticated user as callers see it (never carries the secret)."""

    id: str
    name: str
    identifier: str
    role: Role
    email: Optional[str] = None
    department: Optional[str] = None
    semester: Optional[int] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["role"] = self.role.value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Identity":
        semester = data.get("semester")
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            identifier=str(data["identifier"]),
            role=Role(data["role"]),
            email=data.get("email"),
            department=data.get("department"),
            semester=int(semester) if semester is not None else None,
        )


@dataclass(frozen=True)
class Credential:
    """Identity plus its password hash. Owned by the user repository."""

    identity: Identity
    password_hash: str
