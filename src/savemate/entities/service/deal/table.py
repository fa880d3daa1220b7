"""Deal database table models.

Tags live in their own table so that "has any of these tags" is a plain
EXISTS subquery on every SQL backend.
"""

from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from src.savemate.entities._base import EntityTable


class DealTable(EntityTable, table=True):
    __tablename__ = "deal"

    business_id: str = Field(foreign_key="business_profile.id", index=True)
    category_id: str = Field(foreign_key="category.id", index=True)
    title: str = Field(max_length=120)
    description: str = Field(sa_type=sa.Text)
    usage_terms: str | None = Field(default=None, sa_type=sa.Text)
    image_url: str | None = Field(default=None, max_length=2000)
    price: float = Field(index=True)
    original_price: float
    discount_percent: int = Field(default=0, index=True)
    city: str = Field(max_length=80, index=True)
    voivodeship: str = Field(max_length=32, index=True)
    valid_from: datetime = Field(sa_type=sa.DateTime(timezone=True), nullable=False)
    valid_to: datetime = Field(
        sa_type=sa.DateTime(timezone=True), nullable=False, index=True
    )
    status: str = Field(max_length=16, index=True)


class DealTagTable(SQLModel, table=True):
    __tablename__ = "deal_tag"

    deal_id: str = Field(foreign_key="deal.id", primary_key=True, ondelete="CASCADE")
    position: int = Field(primary_key=True)
    tag: str = Field(max_length=30, index=True)
