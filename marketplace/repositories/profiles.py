"""
Profiles Repository
===================
User profiles: lookups, admin listings and account mutators.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from supabase import AsyncClient

from marketplace.core.exceptions import InvalidFilterError, InvalidValueError
from marketplace.models.profiles import (
    NotificationPreferences,
    Profile,
    ProfileColumn,
    ProfileSort,
    UserRole,
)
from marketplace.models.query import Filter, OrderBy, SortOrder
from marketplace.repositories.base import BaseRepository, EntityId
from marketplace.repositories.results import (
    Err,
    Ok,
    PaginatedResult,
    RepositoryListResult,
    RepositoryResult,
)

PROFILE_WITH_RELATIONS = """
  *,
  governorate:governorates(id, name_ar, name_en),
  city:cities(id, name_ar, name_en),
  district:districts(id, name_ar, name_en)
"""

PROFILE_STATS_SELECT = "role, is_active"

SEARCH_COLUMNS = (ProfileColumn.FULL_NAME, ProfileColumn.EMAIL, ProfileColumn.PHONE)

# Distinguishes "leave unchanged" from an explicit None (clear)
_UNSET = object()


@dataclass(frozen=True)
class ProfileStatistics:
    total: int
    active: int
    inactive: int
    customers: int
    providers: int
    admins: int


class ProfilesRepository(BaseRepository[Profile]):
    """Repository for the ``profiles`` table."""

    def __init__(self, client: AsyncClient, **kwargs):
        super().__init__(
            client,
            "profiles",
            default_select="*",
            model=Profile,
            columns=ProfileColumn,
            **kwargs,
        )

    async def find_by_id_with_relations(self, id: EntityId) -> RepositoryResult[Profile]:
        return await self.find_by_id(id, select=PROFILE_WITH_RELATIONS)

    async def find_by_email(self, email: str) -> RepositoryResult[Profile]:
        return await self.find_one_by(ProfileColumn.EMAIL, email)

    async def find_by_phone(self, phone: str) -> RepositoryResult[Profile]:
        return await self.find_one_by(ProfileColumn.PHONE, phone)

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    async def list_profiles(
        self,
        role: Optional[Union[UserRole, str]] = None,
        is_active: Optional[bool] = None,
        governorate_id: Optional[str] = None,
        city_id: Optional[str] = None,
        search: Optional[str] = None,
        sort: Union[ProfileSort, str] = ProfileSort.CREATED_AT,
        sort_order: Union[SortOrder, str] = SortOrder.DESC,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> RepositoryListResult[Profile]:
        """List profiles; search matches full name, email or phone."""
        filters: List[Filter] = []
        if role:
            filters.append(Filter.eq(ProfileColumn.ROLE, role))
        if isinstance(is_active, bool):
            filters.append(Filter.eq(ProfileColumn.IS_ACTIVE, is_active))
        if governorate_id:
            filters.append(Filter.eq(ProfileColumn.GOVERNORATE_ID, governorate_id))
        if city_id:
            filters.append(Filter.eq(ProfileColumn.CITY_ID, city_id))

        try:
            sort = self.sort_option(ProfileSort, sort)
            direction = self.sort_option(SortOrder, sort_order, "sort_order")
        except InvalidFilterError as e:
            return Err(e)
        sort_by = OrderBy(sort.value, ascending=direction is SortOrder.ASC)

        return await self._list(
            "list_profiles",
            "*",
            filters,
            [sort_by],
            limit=limit if limit is not None else self.page_size,
            offset=offset,
            search=self.search_clause(SEARCH_COLUMNS, search) if search else None,
        )

    async def list_profiles_paginated(
        self,
        page: int = 1,
        page_size: Optional[int] = None,
        **filters,
    ) -> RepositoryResult[PaginatedResult[Profile]]:
        page_size = self._clamp(page_size if page_size is not None else self.page_size)
        result = await self.list_profiles(limit=page_size, offset=(page - 1) * page_size, **filters)
        return self._to_page(result, page, page_size)

    async def get_customers(self, **options) -> RepositoryListResult[Profile]:
        return await self.list_profiles(role=UserRole.CUSTOMER, **options)

    async def get_provider_profiles(self, **options) -> RepositoryListResult[Profile]:
        return await self.list_profiles(role=UserRole.PROVIDER, **options)

    async def get_admins(self, **options) -> RepositoryListResult[Profile]:
        return await self.list_profiles(role=UserRole.ADMIN, **options)

    async def search(self, query: str, **options) -> RepositoryListResult[Profile]:
        return await self.list_profiles(search=query, **options)

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    async def update_location(
        self,
        id: EntityId,
        governorate_id: Any = _UNSET,
        city_id: Any = _UNSET,
        district_id: Any = _UNSET,
    ) -> RepositoryResult[Profile]:
        """
        Update location references.

        Omitted arguments are left unchanged; passing None clears the column.
        """
        location = {
            "governorate_id": governorate_id,
            "city_id": city_id,
            "district_id": district_id,
        }
        return await self.update(id, {key: value for key, value in location.items() if value is not _UNSET})

    async def update_last_login(self, id: EntityId) -> RepositoryResult[Profile]:
        return await self.update(id, {"last_login_at": datetime.now(timezone.utc).isoformat()})

    async def activate(self, id: EntityId) -> RepositoryResult[Profile]:
        return await self.update(id, {"is_active": True})

    async def deactivate(self, id: EntityId) -> RepositoryResult[Profile]:
        return await self.update(id, {"is_active": False})

    async def update_role(self, id: EntityId, role: Union[UserRole, str]) -> RepositoryResult[Profile]:
        try:
            role = UserRole(role)
        except ValueError:
            return Err(InvalidValueError(f"Unknown role '{role}'", field="role"))
        return await self.update(id, {"role": role})

    async def update_notification_preferences(
        self,
        id: EntityId,
        push: Optional[bool] = None,
        email: Optional[bool] = None,
        sms: Optional[bool] = None,
    ) -> RepositoryResult[Profile]:
        """Merge the given channels onto the stored preferences (all enabled when unset)."""
        current = await self.find_by_id(id)
        if current.error is not None:
            return current

        preferences = current.data.notification_preferences or NotificationPreferences()
        changes = {key: value for key, value in {"push": push, "email": email, "sms": sms}.items() if value is not None}
        merged = preferences.model_copy(update=changes)
        return await self.update(id, {"notification_preferences": merged.model_dump()})

    async def increment_order_stats(self, id: EntityId, order_total: float) -> RepositoryResult[Profile]:
        """Add one completed order of ``order_total`` to the running aggregates."""
        # Read-then-write: concurrent increments can be lost
        current = await self.find_by_id(id)
        if current.error is not None:
            return current

        profile = current.data
        return await self.update(id, {
            "total_orders": (profile.total_orders or 0) + 1,
            "total_spent": (profile.total_spent or 0) + order_total,
        })

    # ------------------------------------------------------------------
    # Counts and statistics
    # ------------------------------------------------------------------

    async def count_by_role(self, role: Union[UserRole, str]) -> RepositoryResult[int]:
        return await self.count([Filter.eq(ProfileColumn.ROLE, role)])

    async def count_active(self) -> RepositoryResult[int]:
        return await self.count([Filter.eq(ProfileColumn.IS_ACTIVE, True)])

    async def get_statistics(self) -> RepositoryResult[ProfileStatistics]:
        result = await self._fetch_rows("get_statistics", PROFILE_STATS_SELECT, [])
        if result.error is not None:
            return result

        rows: List[Dict[str, Any]] = result.data
        active = sum(1 for row in rows if row.get("is_active"))
        return Ok(ProfileStatistics(
            total=len(rows),
            active=active,
            inactive=len(rows) - active,
            customers=sum(1 for row in rows if row.get("role") == UserRole.CUSTOMER.value),
            providers=sum(1 for row in rows if row.get("role") == UserRole.PROVIDER.value),
            admins=sum(1 for row in rows if row.get("role") == UserRole.ADMIN.value),
        ))
