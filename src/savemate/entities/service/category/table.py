"""Category database table model."""

from sqlmodel import Field

from src.savemate.entities._base import EntityTable


class CategoryTable(EntityTable, table=True):
    __tablename__ = "category"

    name: str = Field(max_length=80, unique=True, index=True)
    slug: str = Field(max_length=80, unique=True, index=True)
