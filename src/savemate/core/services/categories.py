"""Category listing and administration.

Name and slug uniqueness, and the rule that a category still used by deals
cannot be deleted, are enforced by the database; this service turns those
failures into ``Conflict``.
"""

from __future__ import annotations

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from src.savemate.core.errors import Conflict, NotFound
from src.savemate.core.models.categories import CategoryCreate, CategoryUpdate
from src.savemate.core.models.identity import Identity
from src.savemate.core.services.moderation.audit import (
    AuditSink,
    DatabaseAuditSink,
    write_audit,
)
from src.savemate.entities.service.audit_log import AuditAction
from src.savemate.entities.service.category import Category, CategoryRepository

CATEGORY_ENTITY = "Category"


class CategoryService:
    def __init__(self, session: Session, audit_sink: AuditSink | None = None) -> None:
        self._session = session
        self._categories = CategoryRepository(session)
        self._audit = audit_sink or DatabaseAuditSink(session)

    def list_categories(self) -> list[Category]:
        return self._categories.list_all()

    def _commit_unique(self) -> None:
        try:
            self._session.commit()
        except IntegrityError as e:
            self._session.rollback()
            raise Conflict("Category name or slug already exists") from e

    def create(self, identity: Identity, payload: CategoryCreate) -> Category:
        try:
            category = self._categories.create(
                Category(name=payload.name.strip(), slug=payload.slug)
            )
        except IntegrityError as e:
            self._session.rollback()
            raise Conflict("Category name or slug already exists") from e
        self._commit_unique()
        logger.info("Category {} ({}) created", category.id, category.slug)

        write_audit(
            self._audit,
            identity.user_id,
            AuditAction.CATEGORY_CREATE,
            CATEGORY_ENTITY,
            category.id,
            {"name": category.name, "slug": category.slug},
        )
        return category

    def update(
        self, identity: Identity, category_id: str, payload: CategoryUpdate
    ) -> Category:
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        if "name" in changes:
            changes["name"] = changes["name"].strip()

        try:
            category = self._categories.update(category_id, changes)
        except IntegrityError as e:
            self._session.rollback()
            raise Conflict("Category name or slug already exists") from e
        if category is None:
            raise NotFound("Category not found")
        self._commit_unique()

        write_audit(
            self._audit,
            identity.user_id,
            AuditAction.CATEGORY_UPDATE,
            CATEGORY_ENTITY,
            category_id,
            changes,
        )
        return category

    def delete(self, identity: Identity, category_id: str) -> None:
        category = self._categories.get(category_id)
        if category is None:
            raise NotFound("Category not found")

        deal_count = self._categories.count_deals(category_id)
        if deal_count:
            raise Conflict(
                "Category is used by existing deals", details={"dealCount": deal_count}
            )

        try:
            self._categories.delete(category_id)
            self._session.commit()
        except IntegrityError as e:
            # a deal was attached between the count and the delete
            self._session.rollback()
            raise Conflict(
                "Category is used by existing deals",
                details={"dealCount": self._categories.count_deals(category_id)},
            ) from e
        logger.info("Category {} ({}) deleted", category_id, category.slug)

        write_audit(
            self._audit,
            identity.user_id,
            AuditAction.CATEGORY_DELETE,
            CATEGORY_ENTITY,
            category_id,
            {"name": category.name, "slug": category.slug},
        )
