"""Domain enumerations and request/response models."""

from .base import ApiModel
from .catalog import DealSort, DealStatus, Voivodeship
from .identity import Identity, KeyClass, Role, TokenPair, TokenPayload

__all__ = [
    "ApiModel",
    "DealSort",
    "DealStatus",
    "Identity",
    "KeyClass",
    "Role",
    "TokenPair",
    "TokenPayload",
    "Voivodeship",
]
