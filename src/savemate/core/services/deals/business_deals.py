"""Deals as seen by their owning business.

Businesses create deals (always PENDING), edit their content, delete them and
list their own deals. They never change a deal's status.
"""

from __future__ import annotations

from typing import Any

from loguru import logger
from sqlmodel import Session

from src.savemate.core.errors import Forbidden, NotFound, ValidationError
from src.savemate.core.models.catalog import DealStatus
from src.savemate.core.models.deals import DealCreate, DealQuery, DealUpdate
from src.savemate.core.models.identity import Identity
from src.savemate.core.query import DealPageResult, DealQueryEngine
from src.savemate.core.storage.blob_storage import (
    BlobRejected,
    BlobStore,
    decode_base64_payload,
)
from src.savemate.entities._base import ensure_utc
from src.savemate.entities.service.category import CategoryRepository
from src.savemate.entities.service.deal import (
    Deal,
    DealRepository,
    compute_discount_percent,
)

# DealUpdate fields that never reach the deal row as-is
_IMAGE_UPLOAD_FIELDS = ("image_base64", "image_mime")


def check_prices(price: float, original_price: float) -> int:
    """Return the discount for a price pair, refusing ``original_price < price``."""
    if original_price < price:
        raise ValidationError.for_field(
            "originalPrice", "Original price must be greater than or equal to price"
        )
    return compute_discount_percent(price, original_price)


class BusinessDealService:
    def __init__(
        self,
        session: Session,
        blob_store: BlobStore | None = None,
        hide_expired: bool = True,
    ) -> None:
        self._session = session
        self._deals = DealRepository(session)
        self._categories = CategoryRepository(session)
        self._blob_store = blob_store
        self._engine = DealQueryEngine(self._deals, hide_expired=hide_expired)

    def _business_id(self, identity: Identity) -> str:
        if not identity.business_id:
            raise Forbidden("Business profile missing")
        return identity.business_id

    def _check_category(self, category_id: str) -> None:
        if not self._categories.exists(category_id):
            raise ValidationError.for_field("categoryId", "Unknown category")

    def _store_image(self, image_base64: str, image_mime: str | None) -> str:
        """Hand an uploaded image to the blob store and return its reference."""
        if self._blob_store is None:
            raise ValidationError.for_field("imageBase64", "Image uploads are not available")
        try:
            data, declared_mime = decode_base64_payload(image_base64)
            mime = image_mime or declared_mime
            if mime is None:
                raise ValidationError.for_field("imageMime", "Image type is required")
            return self._blob_store.save(data, mime)
        except BlobRejected as e:
            raise ValidationError.for_field("imageBase64", str(e)) from e

    def _owned_deal(self, identity: Identity, deal_id: str) -> Deal:
        business_id = self._business_id(identity)
        deal = self._deals.get(deal_id)
        if deal is None:
            raise NotFound("Deal not found")
        if not deal.is_owned_by(business_id):
            raise Forbidden("Deal belongs to another business")
        return deal

    def create(self, identity: Identity, payload: DealCreate) -> Deal:
        """Submit a new deal for moderation.

        Any status or discount the client sent was already dropped by the
        payload model; the deal always starts PENDING with a computed discount.
        """
        business_id = self._business_id(identity)
        discount = check_prices(payload.price, payload.original_price)
        self._check_category(payload.category_id)

        image_url = payload.image_url
        if payload.image_base64:
            image_url = self._store_image(payload.image_base64, payload.image_mime)

        deal = Deal(
            business_id=business_id,
            category_id=payload.category_id,
            title=payload.title,
            description=payload.description,
            usage_terms=payload.usage_terms,
            image_url=image_url,
            price=payload.price,
            original_price=payload.original_price,
            discount_percent=discount,
            city=payload.city,
            voivodeship=payload.voivodeship,
            tags=payload.tags,
            valid_from=payload.valid_from,
            valid_to=payload.valid_to,
            status=DealStatus.PENDING,
        )
        created = self._deals.create(deal)
        self._session.commit()
        logger.info("Deal {} created by business {}", created.id, business_id)
        return created

    def update(self, identity: Identity, deal_id: str, payload: DealUpdate) -> Deal:
        """Edit content fields of an owned deal.

        Raises:
            Forbidden: ``status`` was sent at all, or the deal is not the caller's.
            NotFound: No such deal.
            ValidationError: Prices out of order or unknown category.
        """
        if "status" in payload.model_fields_set:
            raise Forbidden("Businesses cannot change deal status")

        deal = self._owned_deal(identity, deal_id)
        changes: dict[str, Any] = payload.model_dump(
            exclude_unset=True, exclude={"status", *_IMAGE_UPLOAD_FIELDS}
        )

        if "price" in changes or "original_price" in changes:
            changes["discount_percent"] = check_prices(
                changes.get("price", deal.price),
                changes.get("original_price", deal.original_price),
            )

        if "category_id" in changes and changes["category_id"] != deal.category_id:
            self._check_category(changes["category_id"])

        for key in ("valid_from", "valid_to"):
            if key in changes:
                changes[key] = ensure_utc(changes[key])

        if payload.image_base64:
            changes["image_url"] = self._store_image(
                payload.image_base64, payload.image_mime
            )

        if not changes:
            return deal

        updated = self._deals.update_fields(deal.id, changes)
        if updated is None:
            raise NotFound("Deal not found")
        self._session.commit()
        logger.info("Deal {} updated by business {}: {}", deal.id, deal.business_id, sorted(changes))
        return updated

    def delete(self, identity: Identity, deal_id: str) -> None:
        deal = self._owned_deal(identity, deal_id)
        self._deals.delete(deal.id)
        self._session.commit()
        logger.info("Deal {} deleted by business {}", deal.id, deal.business_id)

    def get_mine(self, identity: Identity, deal_id: str) -> Deal:
        return self._owned_deal(identity, deal_id)

    def list_mine(self, identity: Identity, query: DealQuery) -> DealPageResult:
        return self._engine.for_business(query, self._business_id(identity))
