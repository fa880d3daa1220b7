"""BusinessProfile database table model."""

from sqlmodel import Field

from src.savemate.entities._base import EntityTable


class BusinessProfileTable(EntityTable, table=True):
    __tablename__ = "business_profile"

    user_id: str = Field(foreign_key="user_account.id", unique=True, index=True)
    name: str = Field(max_length=200)
    tax_id: str | None = Field(default=None, max_length=32)
    city: str | None = Field(default=None, max_length=80)
    voivodeship: str | None = Field(default=None, max_length=32)
