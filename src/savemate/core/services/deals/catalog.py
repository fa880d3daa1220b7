"""Public catalog of approved deals."""

from datetime import datetime

from sqlmodel import Session

from src.savemate.core.errors import NotFound
from src.savemate.core.models.catalog import DealStatus
from src.savemate.core.models.deals import DealQuery
from src.savemate.core.query import DealPageResult, DealQueryEngine
from src.savemate.entities.service.deal import Deal, DealRepository


class CatalogService:
    def __init__(self, session: Session, hide_expired: bool = True) -> None:
        self._deals = DealRepository(session)
        self._engine = DealQueryEngine(self._deals, hide_expired=hide_expired)

    def list_deals(self, query: DealQuery, now: datetime | None = None) -> DealPageResult:
        """Approved deals matching ``query``; ``status`` in the query is ignored."""
        return self._engine.public(query, now=now)

    def get_deal(self, deal_id: str) -> Deal:
        """A single approved deal. Any other status reads as missing."""
        deal = self._deals.get(deal_id)
        if deal is None or deal.status is not DealStatus.APPROVED:
            raise NotFound("Deal not found")
        return deal
