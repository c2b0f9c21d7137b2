"""
Tests for ProfilesRepository.
"""

import pytest

from marketplace.core.exceptions import (
    InvalidFilterError,
    InvalidPaginationError,
    InvalidValueError,
    NotFoundError,
)
from marketplace.models.profiles import NotificationPreferences, ProfileSort, UserRole
from tests.factories import MISSING_ID, make_profile


@pytest.fixture
def people(client):
    return client.seed("profiles", [
        make_profile(full_name="Mona Hassan", email="mona@example.com", phone="01011111111", total_spent=300.0),
        make_profile(full_name="Ahmed Ali", email="ahmed@example.com", phone="01022222222", total_spent=900.0,
                     city_id="city-2"),
        make_profile(full_name="Karim Said", email="karim@shop.com", phone="01033333333", role="provider"),
        make_profile(full_name="Sara Adel", email="sara@admin.com", phone="01044444444", role="admin",
                     is_active=False),
    ])


class TestLookups:
    async def test_find_by_email(self, profiles_repo, people):
        result = await profiles_repo.find_by_email("karim@shop.com")

        assert result.data.full_name == "Karim Said"
        assert result.data.role is UserRole.PROVIDER

    async def test_find_by_phone(self, profiles_repo, people):
        result = await profiles_repo.find_by_phone("01022222222")

        assert result.data.email == "ahmed@example.com"

    async def test_find_by_email_missing(self, profiles_repo, people):
        result = await profiles_repo.find_by_email("nobody@example.com")

        assert isinstance(result.error, NotFoundError)

    async def test_find_with_relations(self, profiles_repo, people):
        result = await profiles_repo.find_by_id_with_relations(people[0]["id"])

        assert result.data.full_name == "Mona Hassan"


class TestListProfiles:
    async def test_role_presets(self, profiles_repo, people):
        customers = await profiles_repo.get_customers()
        providers = await profiles_repo.get_provider_profiles()
        admins = await profiles_repo.get_admins()

        assert customers.count == 2
        assert [profile.full_name for profile in providers.data] == ["Karim Said"]
        assert [profile.full_name for profile in admins.data] == ["Sara Adel"]

    async def test_active_filter_accepts_false(self, profiles_repo, people):
        result = await profiles_repo.list_profiles(is_active=False)

        assert [profile.full_name for profile in result.data] == ["Sara Adel"]

    async def test_search_over_name_email_phone(self, profiles_repo, people):
        by_name = await profiles_repo.search("hassan")
        by_email = await profiles_repo.search("@shop")
        by_phone = await profiles_repo.search("0104444")

        assert [profile.full_name for profile in by_name.data] == ["Mona Hassan"]
        assert [profile.full_name for profile in by_email.data] == ["Karim Said"]
        assert [profile.full_name for profile in by_phone.data] == ["Sara Adel"]

    async def test_sort_by_total_spent(self, profiles_repo, people):
        result = await profiles_repo.get_customers(sort=ProfileSort.TOTAL_SPENT)

        assert [profile.full_name for profile in result.data] == ["Ahmed Ali", "Mona Hassan"]

    async def test_location_filter(self, profiles_repo, people):
        result = await profiles_repo.list_profiles(city_id="city-2")

        assert [profile.full_name for profile in result.data] == ["Ahmed Ali"]

    async def test_paginated(self, profiles_repo, people):
        result = await profiles_repo.list_profiles_paginated(page=2, page_size=3)

        assert result.data.count == 4
        assert result.data.total_pages == 2
        assert len(result.data.data) == 1

    async def test_unknown_sort_rejected(self, client, profiles_repo, people):
        result = await profiles_repo.list_profiles(sort="age")

        assert isinstance(result.error, InvalidFilterError)
        assert client.requests == []

    async def test_unknown_sort_order_rejected(self, client, profiles_repo, people):
        result = await profiles_repo.get_customers(sort_order="up")

        assert isinstance(result.error, InvalidFilterError)
        assert client.requests == []

    async def test_paginated_zero_page_size_rejected(self, profiles_repo, people):
        result = await profiles_repo.list_profiles_paginated(page_size=0)

        assert isinstance(result.error, InvalidPaginationError)


class TestMutators:
    async def test_activate_and_deactivate(self, profiles_repo, people):
        deactivated = await profiles_repo.deactivate(people[0]["id"])
        activated = await profiles_repo.activate(people[3]["id"])

        assert deactivated.data.is_active is False
        assert activated.data.is_active is True

    async def test_update_role(self, profiles_repo, people):
        result = await profiles_repo.update_role(people[0]["id"], UserRole.PROVIDER)

        assert result.data.role is UserRole.PROVIDER

    async def test_update_role_rejects_unknown_role(self, profiles_repo, people):
        result = await profiles_repo.update_role(people[0]["id"], "superuser")

        assert isinstance(result.error, InvalidValueError)
        assert result.error.code == "INVALID_VALUE"

    async def test_update_location_only_touches_given_columns(self, client, profiles_repo):
        created = await profiles_repo.create(make_profile(governorate_id="gov-1", city_id="city-1", district_id="d-1"))

        result = await profiles_repo.update_location(created.data.id, city_id="city-9", district_id=None)

        assert result.data.governorate_id == "gov-1"
        assert result.data.city_id == "city-9"
        assert result.data.district_id is None

    async def test_update_last_login(self, profiles_repo, people):
        result = await profiles_repo.update_last_login(people[1]["id"])

        assert result.data.last_login_at is not None

    async def test_notification_preferences_default_to_enabled(self, profiles_repo, people):
        result = await profiles_repo.update_notification_preferences(people[0]["id"], sms=False)

        assert result.data.notification_preferences == NotificationPreferences(push=True, email=True, sms=False)

    async def test_notification_preferences_merge(self, client, profiles_repo):
        created = await profiles_repo.create(make_profile(
            notification_preferences={"push": False, "email": True, "sms": False},
        ))

        result = await profiles_repo.update_notification_preferences(created.data.id, email=False)

        assert client.rows("profiles")[0]["notification_preferences"] == {"push": False, "email": False, "sms": False}
        assert result.data.notification_preferences.push is False

    async def test_notification_preferences_missing_profile(self, profiles_repo):
        result = await profiles_repo.update_notification_preferences(MISSING_ID, push=False)

        assert isinstance(result.error, NotFoundError)

    async def test_increment_order_stats(self, profiles_repo, people):
        await profiles_repo.increment_order_stats(people[0]["id"], 150.0)
        result = await profiles_repo.increment_order_stats(people[0]["id"], 50.0)

        assert result.data.total_orders == 2
        assert result.data.total_spent == pytest.approx(500.0)


class TestStatistics:
    async def test_counts(self, profiles_repo, people):
        assert (await profiles_repo.count_by_role(UserRole.CUSTOMER)).data == 2
        assert (await profiles_repo.count_active()).data == 3

    async def test_statistics(self, profiles_repo, people):
        result = await profiles_repo.get_statistics()

        stats = result.data
        assert (stats.total, stats.active, stats.inactive) == (4, 3, 1)
        assert (stats.customers, stats.providers, stats.admins) == (2, 1, 1)
