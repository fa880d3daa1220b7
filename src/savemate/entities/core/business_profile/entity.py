"""BusinessProfile domain entity."""

from pydantic import Field

from src.savemate.entities._base import Entity
from src.savemate.core.models.catalog import Voivodeship


class BusinessProfile(Entity):
    """Business-facing identity linked one-to-one to a BUSINESS user."""

    user_id: str = Field(description="Owning user id")
    name: str = Field(min_length=1, max_length=200)
    tax_id: str | None = Field(default=None, max_length=32)
    city: str | None = Field(default=None, max_length=80)
    voivodeship: Voivodeship | None = None
