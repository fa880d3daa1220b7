"""Administrator endpoints: deal moderation and category management."""

from fastapi import APIRouter, Depends, status

from src.savemate.api.http.deps import (
    get_category_service,
    get_deal_query,
    get_moderation_service,
    require_admin,
)
from src.savemate.api.http.routers.deals import to_deal_page
from src.savemate.core.models.base import ApiModel
from src.savemate.core.models.categories import CategoryCreate, CategoryOut, CategoryUpdate
from src.savemate.core.models.deals import (
    DealOut,
    DealPage,
    DealQuery,
    RejectRequest,
    StatusChangeRequest,
)
from src.savemate.core.models.identity import Identity
from src.savemate.core.services import CategoryService, ModerationResult, ModerationService

router = APIRouter(prefix="/admin", tags=["admin"])


class ModerationOut(ApiModel):
    deal: DealOut
    audit_recorded: bool

    @classmethod
    def from_result(cls, result: ModerationResult) -> "ModerationOut":
        return cls(
            deal=DealOut.model_validate(result.deal),
            audit_recorded=result.audit_recorded,
        )


@router.get("/deals", response_model=DealPage)
def list_deals(
    query: DealQuery = Depends(get_deal_query),
    identity: Identity = Depends(require_admin),
    moderation: ModerationService = Depends(get_moderation_service),
) -> DealPage:
    """Every deal, optionally narrowed to one ``status``."""
    return to_deal_page(moderation.list_deals(query))


@router.get("/deals/pending", response_model=DealPage)
def list_pending_deals(
    query: DealQuery = Depends(get_deal_query),
    identity: Identity = Depends(require_admin),
    moderation: ModerationService = Depends(get_moderation_service),
) -> DealPage:
    return to_deal_page(moderation.list_pending(query))


@router.post("/deals/{deal_id}/approve", response_model=ModerationOut)
def approve_deal(
    deal_id: str,
    identity: Identity = Depends(require_admin),
    moderation: ModerationService = Depends(get_moderation_service),
) -> ModerationOut:
    return ModerationOut.from_result(moderation.approve(identity, deal_id))


@router.post("/deals/{deal_id}/reject", response_model=ModerationOut)
def reject_deal(
    deal_id: str,
    payload: RejectRequest,
    identity: Identity = Depends(require_admin),
    moderation: ModerationService = Depends(get_moderation_service),
) -> ModerationOut:
    return ModerationOut.from_result(moderation.reject(identity, deal_id, payload.reason))


@router.patch("/deals/{deal_id}/status", response_model=ModerationOut)
def set_deal_status(
    deal_id: str,
    payload: StatusChangeRequest,
    identity: Identity = Depends(require_admin),
    moderation: ModerationService = Depends(get_moderation_service),
) -> ModerationOut:
    result = moderation.set_status(identity, deal_id, payload.status, payload.reason)
    return ModerationOut.from_result(result)


@router.delete("/deals/{deal_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_deal(
    deal_id: str,
    identity: Identity = Depends(require_admin),
    moderation: ModerationService = Depends(get_moderation_service),
) -> None:
    moderation.delete_deal(identity, deal_id)


@router.post(
    "/categories", response_model=CategoryOut, status_code=status.HTTP_201_CREATED
)
def create_category(
    payload: CategoryCreate,
    identity: Identity = Depends(require_admin),
    categories: CategoryService = Depends(get_category_service),
) -> CategoryOut:
    return CategoryOut.model_validate(categories.create(identity, payload))


@router.patch("/categories/{category_id}", response_model=CategoryOut)
def update_category(
    category_id: str,
    payload: CategoryUpdate,
    identity: Identity = Depends(require_admin),
    categories: CategoryService = Depends(get_category_service),
) -> CategoryOut:
    return CategoryOut.model_validate(categories.update(identity, category_id, payload))


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: str,
    identity: Identity = Depends(require_admin),
    categories: CategoryService = Depends(get_category_service),
) -> None:
    categories.delete(identity, category_id)
