"""Entity package: BusinessProfile."""

from .entity import BusinessProfile
from .repository import BusinessProfileRepository
from .table import BusinessProfileTable

__all__ = ["BusinessProfile", "BusinessProfileRepository", "BusinessProfileTable"]
