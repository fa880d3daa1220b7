"""Unit tests for the deal entity package."""

from datetime import timedelta

import pytest

from src.savemate.core.models.catalog import DealStatus
from src.savemate.entities.service.audit_log import (
    AuditAction,
    AuditLogEntry,
    AuditLogRepository,
)
from src.savemate.entities.service.deal import (
    DealRepository,
    compute_discount_percent,
    normalize_tags,
)


class TestComputeDiscountPercent:
    """Discount derivation from the two prices."""

    @pytest.mark.parametrize(
        ("price", "original_price", "expected"),
        [
            (50.0, 100.0, 50),
            (100.0, 100.0, 0),
            (25.0, 40.0, 38),  # 37.5 rounds half up
            (66.6, 100.0, 33),
            (0.01, 100.0, 100),
            (2.0, 3.0, 33),
        ],
    )
    def test_rounds_half_up(self, price, original_price, expected):
        assert compute_discount_percent(price, original_price) == expected

    def test_price_above_original_clamps_to_zero(self):
        assert compute_discount_percent(120.0, 100.0) == 0

    def test_non_positive_original_price_is_zero(self):
        assert compute_discount_percent(10.0, 0.0) == 0


class TestNormalizeTags:
    def test_strips_and_drops_blanks_and_duplicates(self):
        assert normalize_tags([" pizza", "pizza", "", "  ", "Pizza"]) == ["pizza", "Pizza"]

    def test_keeps_first_seen_order(self):
        assert normalize_tags(["b", "a", "b", "c"]) == ["b", "a", "c"]


class TestDeal:
    def test_is_owned_by(self, make_deal, business_profile, other_business_profile):
        deal = make_deal()

        assert deal.is_owned_by(business_profile.id)
        assert not deal.is_owned_by(other_business_profile.id)
        assert not deal.is_owned_by(None)

    def test_tags_are_normalized_on_construction(self, make_deal):
        deal = make_deal(tags=["vegan ", "vegan", "Lunch"])

        assert deal.tags == ["vegan", "Lunch"]


class TestDealRepository:
    """Persistence of deals and their tag rows."""

    def test_round_trips_tags_in_order(self, session, make_deal):
        deal = make_deal(tags=["pizza", "lunch", "vegan"])

        loaded = DealRepository(session).get(deal.id)

        assert loaded is not None
        assert loaded.tags == ["pizza", "lunch", "vegan"]

    def test_datetimes_come_back_as_utc(self, session, make_deal, now):
        deal = make_deal(valid_to=now + timedelta(days=3))

        loaded = DealRepository(session).get(deal.id)

        assert loaded.valid_to == now + timedelta(days=3)
        assert loaded.valid_to.utcoffset() == timedelta(0)

    def test_update_fields_replaces_tags(self, session, make_deal):
        deal = make_deal(tags=["old"])
        repo = DealRepository(session)

        updated = repo.update_fields(deal.id, {"tags": ["new", "newer"], "title": "Renamed"})
        session.commit()

        assert updated.tags == ["new", "newer"]
        assert updated.title == "Renamed"
        assert updated.updated_at >= deal.updated_at

    def test_update_fields_unknown_deal(self, session):
        assert DealRepository(session).update_fields("missing", {"title": "x"}) is None

    def test_conditional_transition(self, session, make_deal):
        deal = make_deal(status=DealStatus.PENDING)
        repo = DealRepository(session)

        assert repo.transition(deal.id, DealStatus.APPROVED, expected_from=DealStatus.PENDING)
        assert not repo.transition(
            deal.id, DealStatus.REJECTED, expected_from=DealStatus.PENDING
        )
        session.commit()

        assert repo.get(deal.id).status is DealStatus.APPROVED

    def test_unconditional_transition(self, session, make_deal):
        deal = make_deal(status=DealStatus.REJECTED)
        repo = DealRepository(session)

        assert repo.transition(deal.id, DealStatus.EXPIRED)
        session.commit()

        assert repo.get(deal.id).status is DealStatus.EXPIRED

    def test_delete_removes_deal(self, session, make_deal):
        deal = make_deal(tags=["gone"])
        repo = DealRepository(session)

        assert repo.delete(deal.id)
        session.commit()

        assert repo.get(deal.id) is None
        assert repo.delete(deal.id) is False


class TestAuditLogRepository:
    def test_append_and_list(self, session, admin_user):
        repo = AuditLogRepository(session)
        repo.append(
            AuditLogEntry(
                actor_id=admin_user.id,
                action=AuditAction.DEAL_APPROVE,
                entity="Deal",
                entity_id="deal-1",
                meta={"from": "PENDING", "to": "APPROVED"},
            )
        )
        session.commit()

        entries = repo.list_for_entity("Deal", "deal-1")

        assert len(entries) == 1
        assert entries[0].action is AuditAction.DEAL_APPROVE
        assert entries[0].meta == {"from": "PENDING", "to": "APPROVED"}
        assert repo.list_for_entity("Deal", "other") == []
