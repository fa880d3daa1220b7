"""Entity: Deal."""

import math
from collections.abc import Iterable

from pydantic import Field, field_validator

from src.savemate.core.models.catalog import DealStatus, Voivodeship
from src.savemate.entities._base import Entity, UtcDatetime

MAX_TAGS = 20
MAX_TAG_LENGTH = 30


def compute_discount_percent(price: float, original_price: float) -> int:
    """Percentage saved relative to ``original_price``, rounded half up.

    The result is clamped into [0, 100], so a price above the original price
    yields 0 rather than a negative discount.
    """
    if original_price <= 0:
        return 0
    raw = math.floor((original_price - price) / original_price * 100 + 0.5)
    return max(0, min(100, raw))


def normalize_tags(tags: Iterable[str]) -> list[str]:
    """Strip tags and drop blanks and exact duplicates, keeping first-seen order."""
    seen: set[str] = set()
    result: list[str] = []
    for tag in tags:
        cleaned = tag.strip()
        if cleaned and cleaned not in seen:
            seen.add(cleaned)
            result.append(cleaned)
    return result


class Deal(Entity):
    """A time-bounded discount listing owned by one business profile.

    ``discount_percent`` is always derived from the two prices; it is never
    taken from a caller.
    """

    business_id: str
    category_id: str
    title: str
    description: str
    usage_terms: str | None = None
    image_url: str | None = None
    price: float = Field(gt=0)
    original_price: float = Field(gt=0)
    discount_percent: int = Field(default=0, ge=0, le=100)
    city: str
    voivodeship: Voivodeship
    tags: list[str] = Field(default_factory=list, max_length=MAX_TAGS)
    valid_from: UtcDatetime
    valid_to: UtcDatetime
    status: DealStatus = DealStatus.PENDING

    @field_validator("tags", mode="before")
    @classmethod
    def _dedupe_tags(cls, value: object) -> object:
        if isinstance(value, list | tuple):
            return normalize_tags(value)
        return value

    def is_owned_by(self, business_id: str | None) -> bool:
        return business_id is not None and self.business_id == business_id
