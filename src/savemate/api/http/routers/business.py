"""Deals managed by their owning business."""

from fastapi import APIRouter, Depends, status

from src.savemate.api.http.deps import (
    get_business_deal_service,
    get_deal_query,
    require_business,
)
from src.savemate.api.http.routers.deals import to_deal_page
from src.savemate.core.models.deals import (
    DealCreate,
    DealOut,
    DealPage,
    DealQuery,
    DealUpdate,
)
from src.savemate.core.models.identity import Identity
from src.savemate.core.services import BusinessDealService

router = APIRouter(prefix="/business/deals", tags=["business"])


@router.get("", response_model=DealPage)
def list_my_deals(
    query: DealQuery = Depends(get_deal_query),
    identity: Identity = Depends(require_business),
    deals: BusinessDealService = Depends(get_business_deal_service),
) -> DealPage:
    return to_deal_page(deals.list_mine(identity, query))


@router.post("", response_model=DealOut, status_code=status.HTTP_201_CREATED)
def create_deal(
    payload: DealCreate,
    identity: Identity = Depends(require_business),
    deals: BusinessDealService = Depends(get_business_deal_service),
) -> DealOut:
    return DealOut.model_validate(deals.create(identity, payload))


@router.get("/{deal_id}", response_model=DealOut)
def get_my_deal(
    deal_id: str,
    identity: Identity = Depends(require_business),
    deals: BusinessDealService = Depends(get_business_deal_service),
) -> DealOut:
    return DealOut.model_validate(deals.get_mine(identity, deal_id))


@router.patch("/{deal_id}", response_model=DealOut)
def update_deal(
    deal_id: str,
    payload: DealUpdate,
    identity: Identity = Depends(require_business),
    deals: BusinessDealService = Depends(get_business_deal_service),
) -> DealOut:
    return DealOut.model_validate(deals.update(identity, deal_id, payload))


@router.delete("/{deal_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_deal(
    deal_id: str,
    identity: Identity = Depends(require_business),
    deals: BusinessDealService = Depends(get_business_deal_service),
) -> None:
    deals.delete(identity, deal_id)
