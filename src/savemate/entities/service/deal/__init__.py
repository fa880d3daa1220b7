"""Entity package: Deal."""

from .entity import Deal, compute_discount_percent, normalize_tags
from .repository import DealRepository
from .table import DealTable, DealTagTable

__all__ = [
    "Deal",
    "DealRepository",
    "DealTable",
    "DealTagTable",
    "compute_discount_percent",
    "normalize_tags",
]
