import uuid
from dataclasses import dataclass

from taskboard.models.enums import Role
from taskboard.models.user import User

@dataclass(frozen=True)
class Principal:
    id: uuid.UUID
    organization_id: uuid.UUID
    role: Role | str
    email: str
    name: str | None = None

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(
            id=user.id,
            organization_id=user.organization_id,
            role=user.role,
            email=user.email,
            name=user.name,
        )
