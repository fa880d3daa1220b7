"""Deal services for businesses and the public catalog."""

from .business_deals import BusinessDealService, check_prices
from .catalog import CatalogService

__all__ = ["BusinessDealService", "CatalogService", "check_prices"]
