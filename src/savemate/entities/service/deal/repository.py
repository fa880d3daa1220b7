"""Data-access layer for deals.

The repository stores whatever it is given. Which status changes are legal
is decided by the services; ``transition`` only offers the conditional write
they need to detect a lost race.
"""

from collections import defaultdict
from collections.abc import Sequence
from typing import Any

from sqlalchemy import ColumnElement, delete, func, update
from sqlmodel import Session, select

from src.savemate.core.models.catalog import DealStatus
from src.savemate.entities._base import utc_now
from src.savemate.entities.service.deal.entity import Deal, normalize_tags
from src.savemate.entities.service.deal.table import DealTable, DealTagTable

_ENUM_COLUMNS = ("status", "voivodeship")


def _column_value(key: str, value: Any) -> Any:
    if key in _ENUM_COLUMNS and value is not None:
        return str(value)
    return value


class DealRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, deal_id: str) -> Deal | None:
        row = self._session.get(DealTable, deal_id, populate_existing=True)
        if row is None:
            return None
        return self._to_entity(row, self._load_tags([row.id]).get(row.id, []))

    def create(self, deal: Deal) -> Deal:
        row = DealTable(
            id=deal.id,
            business_id=deal.business_id,
            category_id=deal.category_id,
            title=deal.title,
            description=deal.description,
            usage_terms=deal.usage_terms,
            image_url=deal.image_url,
            price=deal.price,
            original_price=deal.original_price,
            discount_percent=deal.discount_percent,
            city=deal.city,
            voivodeship=deal.voivodeship.value,
            valid_from=deal.valid_from,
            valid_to=deal.valid_to,
            status=deal.status.value,
            created_at=deal.created_at,
            updated_at=deal.updated_at,
        )
        self._session.add(row)
        self._session.flush()
        self._replace_tags(row.id, deal.tags)
        return self._to_entity(row, normalize_tags(deal.tags))

    def update_fields(self, deal_id: str, changes: dict[str, Any]) -> Deal | None:
        """Apply column changes (and a full tag replacement when ``tags`` is given)."""
        row = self._session.get(DealTable, deal_id)
        if row is None:
            return None

        changes = dict(changes)
        tags = changes.pop("tags", None)
        for key, value in changes.items():
            setattr(row, key, _column_value(key, value))
        row.updated_at = utc_now()
        self._session.add(row)
        self._session.flush()

        if tags is not None:
            self._replace_tags(row.id, tags)
        return self.get(deal_id)

    def transition(
        self,
        deal_id: str,
        to: DealStatus,
        expected_from: DealStatus | None = None,
    ) -> bool:
        """Set the status in one UPDATE, optionally only if it still equals ``expected_from``.

        Returns whether a row was changed.
        """
        statement = update(DealTable).where(DealTable.id == deal_id)
        if expected_from is not None:
            statement = statement.where(DealTable.status == expected_from.value)
        statement = statement.values(status=to.value, updated_at=utc_now())
        result = self._session.execute(statement)
        self._session.flush()
        return result.rowcount > 0

    def delete(self, deal_id: str) -> bool:
        row = self._session.get(DealTable, deal_id)
        if row is None:
            return False
        self._session.execute(delete(DealTagTable).where(DealTagTable.deal_id == deal_id))
        self._session.delete(row)
        self._session.flush()
        return True

    def count(self, predicates: Sequence[ColumnElement[bool]]) -> int:
        statement = select(func.count()).select_from(DealTable).where(*predicates)
        return self._session.exec(statement).one()

    def find(
        self,
        predicates: Sequence[ColumnElement[bool]],
        order_by: Sequence[Any],
        skip: int,
        take: int,
    ) -> list[Deal]:
        statement = (
            select(DealTable)
            .where(*predicates)
            .order_by(*order_by)
            .offset(skip)
            .limit(take)
        )
        rows = self._session.exec(statement).all()
        tags = self._load_tags([row.id for row in rows])
        return [self._to_entity(row, tags.get(row.id, [])) for row in rows]

    def _replace_tags(self, deal_id: str, tags: Sequence[str]) -> None:
        self._session.execute(delete(DealTagTable).where(DealTagTable.deal_id == deal_id))
        for position, tag in enumerate(normalize_tags(tags)):
            self._session.add(DealTagTable(deal_id=deal_id, position=position, tag=tag))
        self._session.flush()

    def _load_tags(self, deal_ids: Sequence[str]) -> dict[str, list[str]]:
        if not deal_ids:
            return {}
        statement = (
            select(DealTagTable)
            .where(DealTagTable.deal_id.in_(deal_ids))
            .order_by(DealTagTable.deal_id, DealTagTable.position)
        )
        tags: dict[str, list[str]] = defaultdict(list)
        for tag_row in self._session.exec(statement).all():
            tags[tag_row.deal_id].append(tag_row.tag)
        return tags

    @staticmethod
    def _to_entity(row: DealTable, tags: list[str]) -> Deal:
        data = row.model_dump()
        data["tags"] = tags
        return Deal.model_validate(data)
