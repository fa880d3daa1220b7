"""User domain entity."""

from pydantic import Field

from src.savemate.core.models.identity import Role
from src.savemate.entities._base import Entity


class User(Entity):
    """A registered account.

    Identity and role are fixed at registration; only the password hash changes
    afterwards (password reset).
    """

    email: str = Field(description="Unique, lower-cased email address")
    password_hash: str = Field(description="bcrypt hash of the password", repr=False)
    role: Role = Field(default=Role.USER, description="Account role")
