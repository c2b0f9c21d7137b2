"""
Tests for ProvidersRepository: storefront listings, approval workflow, counters.
"""

import pytest

from marketplace.core.exceptions import (
    InvalidFilterError,
    InvalidPaginationError,
    InvalidValueError,
    NotFoundError,
)
from marketplace.models.providers import ProviderSort, ProviderStatus
from marketplace.models.query import SortOrder
from tests.factories import MISSING_ID, make_provider


@pytest.fixture
def storefront(client):
    return client.seed("providers", [
        make_provider(name_en="Koshary Abou Tarek", name_ar="كشري أبو طارق", rating=4.2, is_featured=False,
                      estimated_delivery_time_min=25, delivery_fee=10.0),
        make_provider(name_en="Pizza Corner", rating=4.9, is_featured=False,
                      estimated_delivery_time_min=40, delivery_fee=5.0),
        make_provider(name_en="Fresh Market", category="grocery", rating=3.8, is_featured=True,
                      estimated_delivery_time_min=60, delivery_fee=20.0, city_id="city-2"),
        make_provider(name_en="Closed Grill", status="closed", rating=4.5, is_featured=True,
                      estimated_delivery_time_min=35, delivery_fee=12.0),
        make_provider(name_en="Suspended Diner", status="suspended", rating=5.0, is_featured=True),
        make_provider(name_en="New Bakery", status="pending_approval", rating=0.0, email="bakery@example.com"),
    ])


def names(result):
    return [provider.name_en for provider in result.data]


class TestListProviders:
    async def test_rating_sort_puts_featured_first(self, providers_repo, storefront):
        result = await providers_repo.list_providers(status=["open", "closed"])

        assert names(result) == ["Closed Grill", "Fresh Market", "Pizza Corner", "Koshary Abou Tarek"]

    async def test_delivery_time_sort_ascending(self, providers_repo, storefront):
        result = await providers_repo.list_providers(status="open", sort=ProviderSort.DELIVERY_TIME)

        assert names(result) == ["Koshary Abou Tarek", "Pizza Corner", "Fresh Market"]

    async def test_delivery_fee_sort_ignores_sort_order(self, providers_repo, storefront):
        result = await providers_repo.list_providers(
            status="open",
            sort=ProviderSort.DELIVERY_FEE,
            sort_order=SortOrder.DESC,
        )

        assert names(result) == ["Pizza Corner", "Koshary Abou Tarek", "Fresh Market"]

    async def test_name_sort_honours_sort_order(self, providers_repo, storefront):
        result = await providers_repo.list_providers(sort="name_ar", sort_order="asc", category="grocery")

        assert names(result) == ["Fresh Market"]

    async def test_category_all_means_no_filter(self, providers_repo, storefront):
        everything = await providers_repo.list_providers(category="all")
        restaurants = await providers_repo.list_providers(category="restaurant")

        assert everything.count == 6
        assert restaurants.count == 5

    async def test_city_and_featured_filters(self, providers_repo, storefront):
        result = await providers_repo.list_providers(city_id="city-2", is_featured=True)

        assert names(result) == ["Fresh Market"]

    async def test_name_search_in_either_language(self, providers_repo, storefront):
        english = await providers_repo.list_providers(search="koshary")
        arabic = await providers_repo.list_providers(search="كشري")

        assert names(english) == ["Koshary Abou Tarek"]
        assert names(arabic) == ["Koshary Abou Tarek"]

    async def test_search_drops_reserved_characters(self, providers_repo, storefront):
        result = await providers_repo.list_providers(search="kosh,ary")

        assert names(result) == ["Koshary Abou Tarek"]

    async def test_search_of_only_reserved_characters_matches_all(self, providers_repo, storefront):
        result = await providers_repo.list_providers(search="(),")

        assert result.count == 6

    async def test_limit(self, providers_repo, storefront):
        result = await providers_repo.list_providers(limit=2)

        assert len(result.data) == 2
        assert result.count == 6

    async def test_unknown_sort_rejected(self, client, providers_repo, storefront):
        result = await providers_repo.list_providers(sort="popularity")

        assert result.data is None
        assert isinstance(result.error, InvalidFilterError)
        assert client.requests == []

    async def test_unknown_sort_order_rejected(self, client, providers_repo, storefront):
        result = await providers_repo.get_by_category("restaurant", sort_order="sideways")

        assert isinstance(result.error, InvalidFilterError)
        assert client.requests == []


class TestPresets:
    async def test_featured_only_storefront_statuses(self, providers_repo, storefront):
        result = await providers_repo.get_featured()

        assert names(result) == ["Closed Grill", "Fresh Market"]

    async def test_top_rated(self, providers_repo, storefront):
        result = await providers_repo.get_top_rated(limit=1)

        assert names(result) == ["Closed Grill"]

    async def test_by_category(self, providers_repo, storefront):
        result = await providers_repo.get_by_category("grocery")

        assert names(result) == ["Fresh Market"]

    async def test_by_city(self, providers_repo, storefront):
        result = await providers_repo.get_by_city("city-2")

        assert names(result) == ["Fresh Market"]

    async def test_search_defaults_to_storefront_statuses(self, providers_repo, storefront):
        hidden = await providers_repo.search("diner")
        explicit = await providers_repo.search("diner", status=ProviderStatus.SUSPENDED)

        assert names(hidden) == []
        assert names(explicit) == ["Suspended Diner"]


class TestAdminListing:
    async def test_search_covers_email(self, providers_repo, storefront):
        result = await providers_repo.list_providers_with_relations(search="bakery@")

        assert result.data.count == 1
        assert result.data.data[0].name_en == "New Bakery"

    async def test_twenty_five_providers_third_page(self, client, providers_repo):
        client.seed("providers", [make_provider(status="pending_approval") for _ in range(25)])

        result = await providers_repo.list_providers_with_relations(
            page=3,
            page_size=10,
            status=ProviderStatus.PENDING_APPROVAL,
        )

        assert len(result.data.data) == 5
        assert result.data.total_pages == 3
        assert result.data.count == 25

    async def test_unknown_sort_order_rejected(self, client, providers_repo):
        result = await providers_repo.list_providers_with_relations(sort_order="sideways")

        assert isinstance(result.error, InvalidFilterError)
        assert result.error.details == {"column": "sort_order"}
        assert client.requests == []

    async def test_unknown_sort_column_rejected(self, client, providers_repo):
        result = await providers_repo.list_providers_with_relations(sort="popularity")

        assert isinstance(result.error, InvalidFilterError)
        assert client.requests == []

    async def test_zero_page_size_rejected(self, client, providers_repo, storefront):
        result = await providers_repo.list_providers_with_relations(page_size=0)

        assert isinstance(result.error, InvalidPaginationError)
        assert client.requests == []


class TestApprovalWorkflow:
    async def test_reject_stores_reason(self, providers_repo):
        created = await providers_repo.create(make_provider(status="pending_approval"))

        result = await providers_repo.reject(created.data.id, "incomplete documents")

        assert result.data.status is ProviderStatus.REJECTED
        assert result.data.rejection_reason == "incomplete documents"

    async def test_approve_clears_reason_and_sets_commission(self, providers_repo):
        created = await providers_repo.create(make_provider(status="rejected", rejection_reason="blurry id"))

        result = await providers_repo.approve(created.data.id, commission_rate=5.0)

        assert result.data.status is ProviderStatus.APPROVED
        assert result.data.rejection_reason is None
        assert result.data.commission_rate == 5.0

    async def test_approve_keeps_commission_when_not_given(self, providers_repo):
        created = await providers_repo.create(make_provider(status="pending_approval", commission_rate=7.0))

        result = await providers_repo.approve(created.data.id)

        assert result.data.commission_rate == 7.0

    async def test_update_status_stores_reason_only_on_rejection(self, providers_repo):
        created = await providers_repo.create(make_provider(status="open"))

        paused = await providers_repo.update_status(created.data.id, "temporarily_paused", reason="holiday")
        rejected = await providers_repo.update_status(created.data.id, ProviderStatus.REJECTED, reason="fraud")

        assert paused.data.rejection_reason is None
        assert rejected.data.rejection_reason == "fraud"

    async def test_update_status_unknown_value(self, client, providers_repo):
        result = await providers_repo.update_status(MISSING_ID, "archived")

        assert isinstance(result.error, InvalidValueError)
        assert result.error.code == "INVALID_VALUE"
        assert result.error.details == {"field": "status"}
        assert client.requests == []

    async def test_suspend(self, providers_repo):
        created = await providers_repo.create(make_provider(status="open"))

        result = await providers_repo.suspend(created.data.id, "complaints")

        assert result.data.status is ProviderStatus.SUSPENDED
        assert result.data.rejection_reason == "complaints"

    async def test_reject_missing_provider(self, providers_repo):
        result = await providers_repo.reject(MISSING_ID, "incomplete documents")

        assert isinstance(result.error, NotFoundError)


class TestCounters:
    async def test_toggle_featured(self, providers_repo):
        created = await providers_repo.create(make_provider(is_featured=False))

        first = await providers_repo.toggle_featured(created.data.id)
        second = await providers_repo.toggle_featured(created.data.id)

        assert first.data.is_featured is True
        assert second.data.is_featured is False

    async def test_toggle_missing_provider(self, providers_repo):
        result = await providers_repo.toggle_featured(MISSING_ID)

        assert isinstance(result.error, NotFoundError)

    async def test_increment_order_count(self, providers_repo):
        created = await providers_repo.create(make_provider(total_orders=41))

        result = await providers_repo.increment_order_count(created.data.id)

        assert result.data.total_orders == 42

    async def test_update_rating(self, providers_repo):
        created = await providers_repo.create(make_provider())

        result = await providers_repo.update_rating(created.data.id, 4.6, 120)

        assert result.data.rating == 4.6
        assert result.data.total_reviews == 120

    async def test_count_by_status(self, providers_repo, storefront):
        result = await providers_repo.count_by_status([ProviderStatus.OPEN, ProviderStatus.CLOSED])

        assert result.data == 4

    async def test_statistics(self, client, providers_repo, storefront):
        client.seed("providers", [make_provider(status="approved")])

        result = await providers_repo.get_statistics()

        stats = result.data
        assert stats.total == 7
        assert stats.pending == 1
        assert stats.approved == 5
        assert stats.suspended == 1
        assert stats.featured == 3
