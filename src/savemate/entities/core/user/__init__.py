"""Entity package: User (credential store)."""

from .entity import User
from .repository import UserRepository
from .table import UserTable

__all__ = ["User", "UserRepository", "UserTable"]
