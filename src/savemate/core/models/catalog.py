"""Closed enumerations used by deals and business profiles."""

from enum import StrEnum


class Voivodeship(StrEnum):
    DOLNOSLASKIE = "DOLNOSLASKIE"
    KUJAWSKO_POMORSKIE = "KUJAWSKO_POMORSKIE"
    LUBELSKIE = "LUBELSKIE"
    LUBUSKIE = "LUBUSKIE"
    LODZKIE = "LODZKIE"
    MALOPOLSKIE = "MALOPOLSKIE"
    MAZOWIECKIE = "MAZOWIECKIE"
    OPOLSKIE = "OPOLSKIE"
    PODKARPACKIE = "PODKARPACKIE"
    PODLASKIE = "PODLASKIE"
    POMORSKIE = "POMORSKIE"
    SLASKIE = "SLASKIE"
    SWIETOKRZYSKIE = "SWIETOKRZYSKIE"
    WARMINSKO_MAZURSKIE = "WARMINSKO_MAZURSKIE"
    WIELKOPOLSKIE = "WIELKOPOLSKIE"
    ZACHODNIOPOMORSKIE = "ZACHODNIOPOMORSKIE"


class DealStatus(StrEnum):
    """Moderation states.

    DRAFT -> PENDING -> APPROVED | REJECTED; any state may become EXPIRED.
    """

    DRAFT = "DRAFT"
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"


class DealSort(StrEnum):
    NEWEST = "newest"
    BIGGEST_DISCOUNT = "biggestDiscount"
    LOWEST_PRICE = "lowestPrice"
