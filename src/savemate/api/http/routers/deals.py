"""Public deal catalog."""

from fastapi import APIRouter, Depends

from src.savemate.api.http.deps import get_catalog_service, get_deal_query
from src.savemate.core.models.deals import DealOut, DealPage, DealQuery
from src.savemate.core.query import DealPageResult
from src.savemate.core.services import CatalogService

router = APIRouter(prefix="/deals", tags=["deals"])


def to_deal_page(result: DealPageResult) -> DealPage:
    return DealPage(
        items=[DealOut.model_validate(deal) for deal in result.items],
        page=result.page,
    )


@router.get("", response_model=DealPage)
def list_deals(
    query: DealQuery = Depends(get_deal_query),
    catalog: CatalogService = Depends(get_catalog_service),
) -> DealPage:
    """Approved deals, filtered, sorted and paginated."""
    return to_deal_page(catalog.list_deals(query))


@router.get("/{deal_id}", response_model=DealOut)
def get_deal(
    deal_id: str,
    catalog: CatalogService = Depends(get_catalog_service),
) -> DealOut:
    return DealOut.model_validate(catalog.get_deal(deal_id))
