"""
shared/session/identity.py
Who is driving the portal: nobody, a teacher, or the admin.
"""

from dataclasses import dataclass
from typing import Optional, Union

from shared.models.models import UserRole


@dataclass(frozen=True)
class Anonymous:
    role: Optional[UserRole] = None


@dataclass(frozen=True)
class TeacherIdentity:
    id: str
    email: str
    name: str
    role: UserRole = UserRole.TEACHER


@dataclass(frozen=True)
class AdminIdentity:
    email: str
    name: str
    id: str = "admin"
    role: UserRole = UserRole.ADMIN


Identity = Union[Anonymous, TeacherIdentity, AdminIdentity]
ANONYMOUS = Anonymous()


def identity_to_dict(identity: Identity) -> Optional[dict]:
    if isinstance(identity, Anonymous):
        return None
    return {
        "role": identity.role.value,
        "id": identity.id,
        "email": identity.email,
        "name": identity.name,
    }


def identity_from_dict(data: Optional[dict]) -> Identity:
    """Rebuild an identity from its stored form; anything malformed is anonymous."""
    if not isinstance(data, dict):
        return ANONYMOUS
    try:
        role = UserRole(data["role"])
        if role == UserRole.ADMIN:
            return AdminIdentity(email=data["email"], name=data["name"])
        return TeacherIdentity(id=data["id"], email=data["email"], name=data["name"])
    except (KeyError, ValueError):
        return ANONYMOUS
