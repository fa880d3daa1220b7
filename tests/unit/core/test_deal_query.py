"""Unit tests for the deal query engine."""

from datetime import timedelta

import pytest

from src.savemate.core.models.catalog import DealSort, DealStatus, Voivodeship
from src.savemate.core.models.deals import DealQuery, PageInfo
from src.savemate.core.query import DealQueryEngine, tag_variants
from src.savemate.entities.service.deal import DealRepository


@pytest.fixture
def engine(session) -> DealQueryEngine:
    return DealQueryEngine(DealRepository(session))


def ids(result) -> list[str]:
    return [deal.id for deal in result.items]


class TestPageInfo:
    @pytest.mark.parametrize(
        ("total", "limit", "expected"),
        [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (50, 20, 3)],
    )
    def test_total_pages(self, total, limit, expected):
        assert PageInfo.build(1, limit, total).total_pages == expected


class TestDealQueryModel:
    def test_defaults(self):
        query = DealQuery()

        assert query.page == 1
        assert query.limit == 20
        assert query.sort is DealSort.NEWEST
        assert query.skip == 0

    def test_skip(self):
        assert DealQuery(page=3, limit=10).skip == 20

    @pytest.mark.parametrize(
        "bad", [{"page": 0}, {"limit": 0}, {"limit": 51}, {"discountMin": 101}, {"q": "x" * 201}]
    )
    def test_bounds(self, bad):
        with pytest.raises(ValueError):
            DealQuery.model_validate(bad)

    def test_single_tag_string(self):
        assert DealQuery.model_validate({"tags": "pizza"}).tags == ["pizza"]

    def test_blank_text_is_absent(self):
        query = DealQuery.model_validate({"q": "   ", "city": ""})

        assert query.q is None
        assert query.city is None


class TestTagVariants:
    def test_variants(self):
        assert tag_variants(["Pizza"]) == ["Pizza", "pizza", "PIZZA"]

    def test_no_duplicates(self):
        assert tag_variants(["pizza", "PIZZA"]) == ["pizza", "PIZZA"]


class TestPublicScope:
    def test_only_approved_deals(self, engine, make_deal):
        approved = make_deal(status=DealStatus.APPROVED)
        for status in (
            DealStatus.DRAFT,
            DealStatus.PENDING,
            DealStatus.REJECTED,
            DealStatus.EXPIRED,
        ):
            make_deal(status=status)

        result = engine.public(DealQuery())

        assert ids(result) == [approved.id]
        assert result.page.total == 1

    def test_status_in_query_is_ignored(self, engine, make_deal):
        make_deal(status=DealStatus.PENDING)

        assert engine.public(DealQuery(status=DealStatus.PENDING)).page.total == 0

    def test_expired_validity_is_hidden(self, engine, make_deal, now):
        current = make_deal()
        make_deal(valid_from=now - timedelta(days=10), valid_to=now - timedelta(days=1))

        assert ids(engine.public(DealQuery(), now=now)) == [current.id]

    def test_expired_validity_shown_when_configured(self, session, make_deal, now):
        make_deal(valid_from=now - timedelta(days=10), valid_to=now - timedelta(days=1))
        engine = DealQueryEngine(DealRepository(session), hide_expired=False)

        assert engine.public(DealQuery(), now=now).page.total == 1


class TestFilters:
    def test_category(self, engine, make_deal, other_category):
        wanted = make_deal(category_id=other_category.id)
        make_deal()

        assert ids(engine.public(DealQuery(category_id=other_category.id))) == [wanted.id]

    def test_city_is_case_insensitive_substring(self, engine, make_deal):
        a = make_deal(city="Warsaw")
        b = make_deal(city="WARSAW Praga")
        make_deal(city="Krakow")

        result = engine.public(DealQuery(city="warsaw"))

        assert set(ids(result)) == {a.id, b.id}

    def test_city_wildcards_are_literal(self, engine, make_deal):
        make_deal(city="Gdansk")

        assert engine.public(DealQuery(city="%")).page.total == 0
        assert engine.public(DealQuery(city="G_ansk")).page.total == 0

    def test_voivodeship(self, engine, make_deal):
        wanted = make_deal(voivodeship=Voivodeship.POMORSKIE, city="Gdansk")
        make_deal()

        result = engine.public(DealQuery(voivodeship=Voivodeship.POMORSKIE))

        assert ids(result) == [wanted.id]

    def test_price_range_is_inclusive(self, engine, make_deal):
        low = make_deal(price=10, original_price=20)
        high = make_deal(price=50, original_price=80)
        make_deal(price=9.99, original_price=20)
        make_deal(price=50.01, original_price=80)

        result = engine.public(DealQuery(min_price=10, max_price=50))

        assert set(ids(result)) == {low.id, high.id}

    def test_discount_min_is_inclusive(self, engine, make_deal):
        half = make_deal(price=50, original_price=100)
        make_deal(price=51, original_price=100)

        assert ids(engine.public(DealQuery(discount_min=50))) == [half.id]

    def test_tags_match_any(self, engine, make_deal):
        pizza = make_deal(tags=["pizza", "dinner"])
        sushi = make_deal(tags=["sushi"])
        make_deal(tags=["gym"])

        result = engine.public(DealQuery(tags=["pizza", "sushi"]))

        assert set(ids(result)) == {pizza.id, sushi.id}

    def test_tags_tolerate_case(self, engine, make_deal):
        lower = make_deal(tags=["pizza"])
        upper = make_deal(tags=["SUSHI"])

        assert ids(engine.public(DealQuery(tags=["PIZZA"]))) == [lower.id]
        assert ids(engine.public(DealQuery(tags=["sushi"]))) == [upper.id]

    def test_deal_with_many_matching_tags_is_counted_once(self, engine, make_deal):
        make_deal(tags=["pizza", "PIZZA", "Pizza"])

        result = engine.public(DealQuery(tags=["pizza"]))

        assert result.page.total == 1
        assert len(result.items) == 1


class TestFreeText:
    def test_title_and_description(self, engine, make_deal):
        by_title = make_deal(title="Half price Burger")
        by_description = make_deal(description="The best burger in town, honestly.")
        make_deal(title="Yoga class", description="Stretch and relax for an hour.")

        result = engine.public(DealQuery(q="BURGER"))

        assert set(ids(result)) == {by_title.id, by_description.id}

    def test_city_and_voivodeship(self, engine, make_deal):
        by_city = make_deal(city="Poznan", voivodeship=Voivodeship.WIELKOPOLSKIE)
        make_deal(city="Lodz", voivodeship=Voivodeship.LODZKIE)

        assert ids(engine.public(DealQuery(q="pozn"))) == [by_city.id]
        assert ids(engine.public(DealQuery(q="wielkopol"))) == [by_city.id]

    def test_category_name(self, engine, make_deal, other_category):
        fitness = make_deal(category_id=other_category.id)
        make_deal()

        assert ids(engine.public(DealQuery(q="fitn"))) == [fitness.id]

    def test_tag_must_match_whole_tag(self, engine, make_deal):
        tagged = make_deal(tags=["Vegan"])

        assert ids(engine.public(DealQuery(q="vegan"))) == [tagged.id]
        assert engine.public(DealQuery(q="vega")).page.total == 0

    def test_category_name_with_ampersand(self, engine, make_deal):
        deal = make_deal()

        assert ids(engine.public(DealQuery(q="food & drinks"))) == [deal.id]


class TestValidityOverlap:
    """dateFrom/dateTo select deals whose validity window intersects the range."""

    @pytest.fixture
    def window(self, make_deal, now):
        # valid for days 10..20 from now
        return make_deal(
            valid_from=now + timedelta(days=10), valid_to=now + timedelta(days=20)
        )

    def test_partial_overlap_at_start(self, engine, window, now):
        query = DealQuery(date_from=now + timedelta(days=5), date_to=now + timedelta(days=12))

        assert ids(engine.public(query, now=now)) == [window.id]

    def test_partial_overlap_at_end(self, engine, window, now):
        query = DealQuery(date_from=now + timedelta(days=18), date_to=now + timedelta(days=30))

        assert ids(engine.public(query, now=now)) == [window.id]

    def test_range_inside_window(self, engine, window, now):
        query = DealQuery(date_from=now + timedelta(days=12), date_to=now + timedelta(days=13))

        assert ids(engine.public(query, now=now)) == [window.id]

    def test_touching_bounds_overlap(self, engine, window, now):
        query = DealQuery(date_from=now + timedelta(days=20), date_to=now + timedelta(days=25))

        assert ids(engine.public(query, now=now)) == [window.id]

    def test_disjoint_ranges(self, engine, window, now):
        before = DealQuery(date_from=now, date_to=now + timedelta(days=9))
        after = DealQuery(date_from=now + timedelta(days=21))

        assert engine.public(before, now=now).page.total == 0
        assert engine.public(after, now=now).page.total == 0

    def test_open_ended_bounds(self, engine, window, now):
        assert engine.public(DealQuery(date_to=now + timedelta(days=10)), now=now).page.total == 1
        assert engine.public(DealQuery(date_to=now + timedelta(days=9)), now=now).page.total == 0


class TestSortingAndPaging:
    def test_newest_first(self, engine, make_deal):
        first = make_deal()
        second = make_deal()
        third = make_deal()

        assert ids(engine.public(DealQuery())) == [third.id, second.id, first.id]

    def test_biggest_discount_then_newest(self, engine, make_deal):
        small = make_deal(price=90, original_price=100)
        big_old = make_deal(price=20, original_price=100)
        big_new = make_deal(price=20, original_price=100)

        result = engine.public(DealQuery(sort=DealSort.BIGGEST_DISCOUNT))

        assert ids(result) == [big_new.id, big_old.id, small.id]

    def test_lowest_price_then_newest(self, engine, make_deal):
        cheap_old = make_deal(price=5, original_price=10)
        cheap_new = make_deal(price=5, original_price=10)
        pricey = make_deal(price=50, original_price=100)

        result = engine.public(DealQuery(sort=DealSort.LOWEST_PRICE))

        assert ids(result) == [cheap_new.id, cheap_old.id, pricey.id]

    def test_identical_keys_break_ties_by_id_desc(self, engine, make_deal, now):
        created = now - timedelta(minutes=5)
        deals = [make_deal(created_at=created) for _ in range(4)]

        result = engine.public(DealQuery())

        assert ids(result) == sorted((d.id for d in deals), reverse=True)

    def test_pages_are_disjoint_and_complete(self, engine, make_deal, now):
        created = now - timedelta(minutes=5)
        deals = [make_deal(created_at=created) for _ in range(7)]

        seen: list[str] = []
        for page in (1, 2, 3):
            result = engine.public(DealQuery(page=page, limit=3))
            assert result.page.total == 7
            assert result.page.total_pages == 3
            seen.extend(ids(result))

        assert sorted(seen) == sorted(d.id for d in deals)
        assert len(set(seen)) == 7

    def test_lowest_price_pages_with_tied_prices(self, engine, make_deal, now):
        created = now - timedelta(minutes=5)
        deals = [
            make_deal(price=price, original_price=100, created_at=created)
            for price in (30, 20, 30, 20, 20, 30, 20)
        ]

        seen = []
        for page in (1, 2, 3):
            result = engine.public(DealQuery(sort=DealSort.LOWEST_PRICE, page=page, limit=3))
            assert result.page.total == 7
            seen.extend(result.items)

        prices = [deal.price for deal in seen]
        assert prices == sorted(prices)
        for price in (20, 30):
            tied = [deal.id for deal in seen if deal.price == price]
            assert tied == sorted(tied, reverse=True)
        assert len({deal.id for deal in seen}) == 7
        assert {deal.id for deal in seen} == {d.id for d in deals}

    def test_page_past_the_end(self, engine, make_deal):
        make_deal()

        result = engine.public(DealQuery(page=5, limit=10))

        assert result.items == []
        assert result.page.total == 1
        assert result.page.total_pages == 1


class TestPublicScenario:
    def test_city_price_and_discount_sort(self, engine, make_deal):
        """Approved Warsaw deals priced 10-50, biggest discount first."""
        top = make_deal(city="Warsaw", price=20, original_price=100)
        mid = make_deal(city="warsaw centrum", price=40, original_price=80)
        low = make_deal(city="WARSAW", price=45, original_price=50)
        make_deal(city="Warsaw", price=20, original_price=100, status=DealStatus.PENDING)
        make_deal(city="Warsaw", price=60, original_price=100)
        make_deal(city="Krakow", price=20, original_price=100)

        result = engine.public(
            DealQuery(
                city="warsaw",
                min_price=10,
                max_price=50,
                sort=DealSort.BIGGEST_DISCOUNT,
                page=1,
                limit=10,
            )
        )

        assert ids(result) == [top.id, mid.id, low.id]
        assert result.page.total == 3
        assert result.page.total_pages == 1


class TestOtherScopes:
    def test_business_scope(self, engine, make_deal, business_profile, other_business_profile):
        mine = make_deal(status=DealStatus.PENDING)
        make_deal(business_id=other_business_profile.id)

        result = engine.for_business(DealQuery(), business_profile.id)

        assert ids(result) == [mine.id]

    def test_admin_scope_with_and_without_status(self, engine, make_deal):
        pending = make_deal(status=DealStatus.PENDING)
        make_deal(status=DealStatus.APPROVED)

        assert engine.for_admin(DealQuery()).page.total == 2
        assert ids(engine.for_admin(DealQuery(status=DealStatus.PENDING))) == [pending.id]
