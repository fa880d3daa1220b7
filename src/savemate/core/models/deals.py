"""Deal request and response models."""

from __future__ import annotations

import math
from typing import Annotated, Literal

from pydantic import AwareDatetime, Field, StringConstraints, field_validator

from src.savemate.core.models.base import ApiModel
from src.savemate.core.models.catalog import DealSort, DealStatus, Voivodeship
from src.savemate.entities._base import UtcDatetime

ImageMime = Literal["image/jpeg", "image/png", "image/webp"]
Tag = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=30)]

# Fields of DealUpdate that may be sent as an explicit null
NULLABLE_UPDATE_FIELDS = frozenset(
    {"usage_terms", "image_url", "image_base64", "image_mime", "status"}
)


class DealCreate(ApiModel):
    """Payload a business submits for a new deal.

    ``status`` and ``discountPercent`` are not part of the model; if a client
    sends them they are dropped during parsing.
    """

    title: str = Field(min_length=3, max_length=120)
    description: str = Field(min_length=10, max_length=5000)
    usage_terms: str | None = Field(default=None, min_length=1, max_length=5000)
    image_base64: str | None = Field(default=None, min_length=1, max_length=15_000_000)
    image_mime: ImageMime | None = None
    image_url: str | None = Field(default=None, max_length=2000)
    price: float = Field(gt=0)
    original_price: float = Field(gt=0)
    category_id: str = Field(min_length=1)
    city: str = Field(min_length=2, max_length=80)
    voivodeship: Voivodeship
    tags: list[Tag] = Field(default_factory=list, max_length=20)
    valid_from: AwareDatetime
    valid_to: AwareDatetime


class DealUpdate(ApiModel):
    """Partial update sent by the owning business.

    ``status`` is accepted by the parser only so that the service can refuse
    it; businesses never change a deal's status.
    """

    title: str | None = Field(default=None, min_length=3, max_length=120)
    description: str | None = Field(default=None, min_length=10, max_length=5000)
    usage_terms: str | None = Field(default=None, min_length=1, max_length=5000)
    image_base64: str | None = Field(default=None, min_length=1, max_length=15_000_000)
    image_mime: ImageMime | None = None
    image_url: str | None = Field(default=None, max_length=2000)
    price: float | None = Field(default=None, gt=0)
    original_price: float | None = Field(default=None, gt=0)
    category_id: str | None = Field(default=None, min_length=1)
    city: str | None = Field(default=None, min_length=2, max_length=80)
    voivodeship: Voivodeship | None = None
    tags: list[Tag] | None = Field(default=None, max_length=20)
    valid_from: AwareDatetime | None = None
    valid_to: AwareDatetime | None = None
    status: DealStatus | None = None

    @field_validator(
        "title",
        "description",
        "price",
        "original_price",
        "category_id",
        "city",
        "voivodeship",
        "tags",
        "valid_from",
        "valid_to",
        mode="before",
    )
    @classmethod
    def _not_null(cls, value: object) -> object:
        if value is None:
            raise ValueError("Field may not be null")
        return value


class DealOut(ApiModel):
    id: str
    business_id: str
    category_id: str
    title: str
    description: str
    usage_terms: str | None = None
    image_url: str | None = None
    price: float
    original_price: float
    discount_percent: int
    status: DealStatus
    city: str
    voivodeship: Voivodeship
    tags: list[str]
    valid_from: UtcDatetime
    valid_to: UtcDatetime
    created_at: UtcDatetime
    updated_at: UtcDatetime


class RejectRequest(ApiModel):
    reason: str = Field(min_length=3, max_length=500)


class StatusChangeRequest(ApiModel):
    status: DealStatus
    reason: str | None = Field(default=None, min_length=3, max_length=500)


class DealQuery(ApiModel):
    """Filter, sort and paging contract shared by every deal listing.

    ``status`` is only honoured by the administrator listing; the public and
    business listings fix their own scope.
    """

    category_id: str | None = Field(default=None, min_length=1)
    city: str | None = Field(default=None, min_length=1, max_length=80)
    voivodeship: Voivodeship | None = None
    min_price: float | None = Field(default=None, ge=0)
    max_price: float | None = Field(default=None, ge=0)
    discount_min: int | None = Field(default=None, ge=0, le=100)
    tags: list[Tag] | None = Field(default=None, max_length=20)
    q: str | None = Field(default=None, min_length=1, max_length=200)
    date_from: UtcDatetime | None = None
    date_to: UtcDatetime | None = None
    sort: DealSort = DealSort.NEWEST
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=50)
    status: DealStatus | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def _single_tag(cls, value: object) -> object:
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("city", "q", mode="before")
    @classmethod
    def _blank_is_absent(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


class PageInfo(ApiModel):
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> PageInfo:
        total_pages = math.ceil(total / limit) if total else 0
        return cls(page=page, limit=limit, total=total, total_pages=total_pages)


class DealPage(ApiModel):
    items: list[DealOut]
    page: PageInfo
