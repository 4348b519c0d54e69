"""User model definitions."""
from enum import Enum

from pydantic import BaseModel


class UserRole(str, Enum):
    """Roles issued by the identity provider."""

    ADMIN = "admin"
    USER = "user"


class Caller(BaseModel):
    """Identity of the user making a request."""

    user_id: str
    role: UserRole = UserRole.USER

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
