"""Data-access layer for categories."""

from sqlalchemy import func
from sqlmodel import Session, select

from src.savemate.entities._base import utc_now
from src.savemate.entities.service.category.entity import Category
from src.savemate.entities.service.category.table import CategoryTable
from src.savemate.entities.service.deal.table import DealTable


class CategoryRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, category_id: str) -> Category | None:
        row = self._session.get(CategoryTable, category_id)
        if row is None:
            return None
        return Category.model_validate(row, from_attributes=True)

    def exists(self, category_id: str) -> bool:
        return self._session.get(CategoryTable, category_id) is not None

    def list_all(self) -> list[Category]:
        statement = select(CategoryTable).order_by(CategoryTable.name, CategoryTable.id)
        return [
            Category.model_validate(row, from_attributes=True)
            for row in self._session.exec(statement).all()
        ]

    def create(self, category: Category) -> Category:
        row = CategoryTable(
            id=category.id,
            name=category.name,
            slug=category.slug,
            created_at=category.created_at,
            updated_at=category.updated_at,
        )
        self._session.add(row)
        self._session.flush()
        return Category.model_validate(row, from_attributes=True)

    def update(self, category_id: str, changes: dict[str, str]) -> Category | None:
        row = self._session.get(CategoryTable, category_id)
        if row is None:
            return None
        for key, value in changes.items():
            setattr(row, key, value)
        row.updated_at = utc_now()
        self._session.add(row)
        self._session.flush()
        return Category.model_validate(row, from_attributes=True)

    def delete(self, category_id: str) -> bool:
        row = self._session.get(CategoryTable, category_id)
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True

    def count_deals(self, category_id: str) -> int:
        statement = select(func.count()).select_from(DealTable).where(
            DealTable.category_id == category_id
        )
        return self._session.exec(statement).one()
