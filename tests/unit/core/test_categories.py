"""Unit tests for category administration."""

import pytest

from src.savemate.core.errors import Conflict, NotFound
from src.savemate.core.models.categories import CategoryCreate, CategoryUpdate
from src.savemate.core.services import CategoryService
from src.savemate.entities.service.audit_log import AuditAction, AuditLogRepository
from src.savemate.entities.service.category import CategoryRepository


@pytest.fixture
def categories(session) -> CategoryService:
    return CategoryService(session)


class TestCategoryService:
    def test_list_is_sorted_by_name(self, categories, category, other_category):
        names = [c.name for c in categories.list_categories()]

        assert names == ["Fitness", "Food & Drinks"]

    def test_create_is_audited(self, categories, session, admin_identity):
        created = categories.create(
            admin_identity, CategoryCreate(name="  Beauty ", slug="beauty")
        )

        assert created.name == "Beauty"
        [entry] = AuditLogRepository(session).list_for_entity("Category", created.id)
        assert entry.action is AuditAction.CATEGORY_CREATE
        assert entry.meta == {"name": "Beauty", "slug": "beauty"}

    def test_duplicate_slug_conflicts(self, categories, admin_identity, category):
        with pytest.raises(Conflict):
            categories.create(admin_identity, CategoryCreate(name="Other", slug=category.slug))

    def test_duplicate_name_conflicts(self, categories, admin_identity, category):
        with pytest.raises(Conflict):
            categories.create(admin_identity, CategoryCreate(name=category.name, slug="other"))

    def test_slug_must_be_kebab_case(self):
        with pytest.raises(ValueError):
            CategoryCreate(name="Bad", slug="Not A Slug")

    def test_update(self, categories, session, admin_identity, category):
        updated = categories.update(admin_identity, category.id, CategoryUpdate(name="Food"))

        assert updated.name == "Food"
        assert updated.slug == category.slug
        [entry] = AuditLogRepository(session).list_for_entity("Category", category.id)
        assert entry.action is AuditAction.CATEGORY_UPDATE
        assert entry.meta == {"name": "Food"}

    def test_update_to_taken_slug(self, categories, admin_identity, category, other_category):
        with pytest.raises(Conflict):
            categories.update(
                admin_identity, category.id, CategoryUpdate(slug=other_category.slug)
            )

    def test_update_missing(self, categories, admin_identity):
        with pytest.raises(NotFound):
            categories.update(admin_identity, "missing", CategoryUpdate(name="Nothing"))

    def test_delete_unused(self, categories, session, admin_identity, other_category):
        categories.delete(admin_identity, other_category.id)

        assert CategoryRepository(session).get(other_category.id) is None
        [entry] = AuditLogRepository(session).list_for_entity("Category", other_category.id)
        assert entry.action is AuditAction.CATEGORY_DELETE

    def test_delete_in_use_reports_deal_count(
        self, categories, session, admin_identity, category, make_deal
    ):
        make_deal()
        make_deal()

        with pytest.raises(Conflict) as exc_info:
            categories.delete(admin_identity, category.id)

        assert exc_info.value.details == {"dealCount": 2}
        assert CategoryRepository(session).get(category.id) is not None

    def test_delete_missing(self, categories, admin_identity):
        with pytest.raises(NotFound):
            categories.delete(admin_identity, "missing")
