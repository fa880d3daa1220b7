"""Category request and response models."""

from pydantic import Field

from src.savemate.core.models.base import ApiModel
from src.savemate.entities.service.category.entity import SLUG_PATTERN


class CategoryCreate(ApiModel):
    name: str = Field(min_length=1, max_length=80)
    slug: str = Field(min_length=1, max_length=80, pattern=SLUG_PATTERN)


class CategoryUpdate(ApiModel):
    name: str | None = Field(default=None, min_length=1, max_length=80)
    slug: str | None = Field(default=None, min_length=1, max_length=80, pattern=SLUG_PATTERN)


class CategoryOut(ApiModel):
    id: str
    name: str
    slug: str
