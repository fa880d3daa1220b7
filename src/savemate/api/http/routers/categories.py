"""Public category listing."""

from fastapi import APIRouter, Depends

from src.savemate.api.http.deps import get_category_service
from src.savemate.core.models.categories import CategoryOut
from src.savemate.core.services import CategoryService

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=list[CategoryOut])
def list_categories(
    categories: CategoryService = Depends(get_category_service),
) -> list[CategoryOut]:
    return [CategoryOut.model_validate(c) for c in categories.list_categories()]
