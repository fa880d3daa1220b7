"""Deal query engine.

One filter contract (``DealQuery``) serves three listings. Each filter is a
small builder returning a predicate or ``None`` when its field is absent; the
engine ANDs the non-empty predicates with the predicates of the caller's scope
and runs an independent count and fetch over the result.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from loguru import logger
from sqlalchemy import ColumnElement, String, and_, exists, func, or_, select

from src.savemate.core.models.catalog import DealSort, DealStatus
from src.savemate.core.models.deals import DealQuery, PageInfo
from src.savemate.entities._base import ensure_utc, utc_now
from src.savemate.entities.service.category.table import CategoryTable
from src.savemate.entities.service.deal import Deal, DealRepository
from src.savemate.entities.service.deal.table import DealTable, DealTagTable

Predicate = ColumnElement[bool]
PredicateBuilder = Callable[[DealQuery], Predicate | None]


def _contains_ci(column: Any, needle: str) -> Predicate:
    """Case-insensitive substring match with LIKE wildcards in ``needle`` escaped."""
    return func.lower(column, type_=String).contains(needle.lower(), autoescape=True)


def tag_variants(tags: Sequence[str]) -> list[str]:
    """Literal, lower-case and upper-case form of every tag, first-seen order."""
    variants: list[str] = []
    for tag in tags:
        for candidate in (tag, tag.lower(), tag.upper()):
            if candidate not in variants:
                variants.append(candidate)
    return variants


def by_category(query: DealQuery) -> Predicate | None:
    if query.category_id is None:
        return None
    return DealTable.category_id == query.category_id


def by_city(query: DealQuery) -> Predicate | None:
    if query.city is None:
        return None
    return _contains_ci(DealTable.city, query.city.strip())


def by_voivodeship(query: DealQuery) -> Predicate | None:
    if query.voivodeship is None:
        return None
    return DealTable.voivodeship == query.voivodeship.value


def by_price_range(query: DealQuery) -> Predicate | None:
    bounds: list[Predicate] = []
    if query.min_price is not None:
        bounds.append(DealTable.price >= query.min_price)
    if query.max_price is not None:
        bounds.append(DealTable.price <= query.max_price)
    if not bounds:
        return None
    return and_(*bounds)


def by_discount(query: DealQuery) -> Predicate | None:
    if query.discount_min is None:
        return None
    return DealTable.discount_percent >= query.discount_min


def by_tags(query: DealQuery) -> Predicate | None:
    """Match-any over the deal's tags, tolerant of case variation."""
    if not query.tags:
        return None
    return exists(
        select(DealTagTable.deal_id).where(
            DealTagTable.deal_id == DealTable.id,
            DealTagTable.tag.in_(tag_variants(query.tags)),
        )
    )


def by_text(query: DealQuery) -> Predicate | None:
    """Free-text search over content, place, category name and tags."""
    if query.q is None:
        return None
    needle = query.q.strip()
    if not needle:
        return None
    category_match = exists(
        select(CategoryTable.id).where(
            CategoryTable.id == DealTable.category_id,
            _contains_ci(CategoryTable.name, needle),
        )
    )
    tag_match = exists(
        select(DealTagTable.deal_id).where(
            DealTagTable.deal_id == DealTable.id,
            func.lower(DealTagTable.tag) == needle.lower(),
        )
    )
    return or_(
        _contains_ci(DealTable.title, needle),
        _contains_ci(DealTable.description, needle),
        _contains_ci(DealTable.city, needle),
        _contains_ci(DealTable.voivodeship, needle),
        category_match,
        tag_match,
    )


def by_validity_overlap(query: DealQuery) -> Predicate | None:
    """Deals whose validity window intersects [date_from, date_to].

    Either bound may be open. A deal with an inverted window simply never
    overlaps a closed range.
    """
    bounds: list[Predicate] = []
    if query.date_from is not None:
        bounds.append(DealTable.valid_to >= ensure_utc(query.date_from))
    if query.date_to is not None:
        bounds.append(DealTable.valid_from <= ensure_utc(query.date_to))
    if not bounds:
        return None
    return and_(*bounds)


FILTERS: tuple[PredicateBuilder, ...] = (
    by_category,
    by_city,
    by_voivodeship,
    by_price_range,
    by_discount,
    by_tags,
    by_text,
    by_validity_overlap,
)


def build_filters(query: DealQuery) -> list[Predicate]:
    """Apply every builder and keep the predicates that are present."""
    predicates: list[Predicate] = []
    for builder in FILTERS:
        predicate = builder(query)
        if predicate is not None:
            predicates.append(predicate)
    return predicates


def order_by_for(sort: DealSort) -> list[Any]:
    """Sort keys for ``sort``; every order ends with ``id desc`` so pages are stable."""
    if sort is DealSort.BIGGEST_DISCOUNT:
        return [
            DealTable.discount_percent.desc(),
            DealTable.created_at.desc(),
            DealTable.id.desc(),
        ]
    if sort is DealSort.LOWEST_PRICE:
        return [DealTable.price.asc(), DealTable.created_at.desc(), DealTable.id.desc()]
    return [DealTable.created_at.desc(), DealTable.id.desc()]


def public_scope(hide_expired: bool, now: datetime | None = None) -> list[Predicate]:
    scope: list[Predicate] = [DealTable.status == DealStatus.APPROVED.value]
    if hide_expired:
        scope.append(DealTable.valid_to >= ensure_utc(now or utc_now()))
    return scope


def business_scope(business_id: str) -> list[Predicate]:
    return [DealTable.business_id == business_id]


def admin_scope(status: DealStatus | None) -> list[Predicate]:
    if status is None:
        return []
    return [DealTable.status == status.value]


@dataclass(frozen=True)
class DealPageResult:
    items: list[Deal]
    page: PageInfo


class DealQueryEngine:
    """Runs a ``DealQuery`` against one of the three listing scopes."""

    def __init__(self, deals: DealRepository, hide_expired: bool = True) -> None:
        self._deals = deals
        self._hide_expired = hide_expired

    def run(self, query: DealQuery, scope: Sequence[Predicate]) -> DealPageResult:
        predicates = [*scope, *build_filters(query)]
        total = self._deals.count(predicates)
        items = self._deals.find(
            predicates,
            order_by=order_by_for(query.sort),
            skip=query.skip,
            take=query.limit,
        )
        logger.debug(
            "Deal query matched {} rows (page {}, limit {})", total, query.page, query.limit
        )
        return DealPageResult(
            items=items, page=PageInfo.build(query.page, query.limit, total)
        )

    def public(self, query: DealQuery, now: datetime | None = None) -> DealPageResult:
        return self.run(query, public_scope(self._hide_expired, now))

    def for_business(self, query: DealQuery, business_id: str) -> DealPageResult:
        return self.run(query, business_scope(business_id))

    def for_admin(self, query: DealQuery) -> DealPageResult:
        return self.run(query, admin_scope(query.status))
