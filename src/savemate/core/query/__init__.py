"""Deal listing query engine."""

from .deal_query import (
    DealPageResult,
    DealQueryEngine,
    admin_scope,
    build_filters,
    business_scope,
    order_by_for,
    public_scope,
    tag_variants,
)

__all__ = [
    "DealPageResult",
    "DealQueryEngine",
    "admin_scope",
    "build_filters",
    "business_scope",
    "order_by_for",
    "public_scope",
    "tag_variants",
]
