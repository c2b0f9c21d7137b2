"""
Providers Repository
====================
Storefront listings, admin approval workflow and provider counters.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Union

from supabase import AsyncClient

from marketplace.core.exceptions import InvalidFilterError, InvalidValueError
from marketplace.models.providers import (
    APPROVED_STATUSES,
    STOREFRONT_STATUSES,
    Provider,
    ProviderColumn,
    ProviderSort,
    ProviderStatus,
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

StatusArg = Union[ProviderStatus, str, Sequence[Union[ProviderStatus, str]]]

# Admin views
PROVIDER_WITH_RELATIONS = """
  id, owner_id, name_ar, name_en, description_ar, description_en, category,
  logo_url, cover_image_url, status, rejection_reason, commission_rate,
  rating, total_reviews, total_orders, is_featured,
  phone, email, address_ar, address_en, governorate_id, city_id,
  business_hours, delivery_fee, min_order_amount, delivery_radius_km,
  estimated_delivery_time_min, created_at, updated_at,
  governorate:governorates(id, name_ar, name_en),
  city:cities(id, name_ar, name_en)
"""

# Customer-facing cards
PROVIDER_LIST_SELECT = """
  id, name_ar, name_en, category, logo_url, cover_image_url,
  status, rating, total_reviews, is_featured,
  delivery_fee, min_order_amount, estimated_delivery_time_min,
  governorate_id, city_id
"""

# Detail pages and write results
PROVIDER_DETAIL_SELECT = """
  id, owner_id, name_ar, name_en, description_ar, description_en, category,
  logo_url, cover_image_url, status, rejection_reason, commission_rate,
  rating, total_reviews, total_orders,
  is_featured, phone, email, address_ar, address_en,
  governorate_id, city_id, business_hours,
  delivery_fee, min_order_amount, delivery_radius_km,
  estimated_delivery_time_min, created_at, updated_at
"""

PROVIDER_STATS_SELECT = "id, status, is_featured"

STOREFRONT_SEARCH_COLUMNS = (ProviderColumn.NAME_AR, ProviderColumn.NAME_EN)
ADMIN_SEARCH_COLUMNS = (
    ProviderColumn.NAME_AR,
    ProviderColumn.NAME_EN,
    ProviderColumn.EMAIL,
    ProviderColumn.PHONE,
)


@dataclass(frozen=True)
class ProviderStatistics:
    total: int
    pending: int
    approved: int
    suspended: int
    featured: int


def _sort_strategy(sort: ProviderSort, ascending: bool) -> List[OrderBy]:
    """Fixed column order for each storefront sort."""
    if sort is ProviderSort.RATING:
        return [
            OrderBy(ProviderColumn.IS_FEATURED, ascending=False),
            OrderBy(ProviderColumn.RATING, ascending=False),
        ]
    if sort is ProviderSort.DELIVERY_TIME:
        return [OrderBy(ProviderColumn.ESTIMATED_DELIVERY_TIME_MIN, ascending=True)]
    if sort is ProviderSort.DELIVERY_FEE:
        return [OrderBy(ProviderColumn.DELIVERY_FEE, ascending=True)]
    if sort is ProviderSort.NAME_AR:
        return [OrderBy(ProviderColumn.NAME_AR, ascending=ascending)]
    if sort is ProviderSort.TOTAL_ORDERS:
        return [OrderBy(ProviderColumn.TOTAL_ORDERS, ascending=ascending)]
    return [OrderBy(ProviderColumn.CREATED_AT, ascending=ascending)]


class ProvidersRepository(BaseRepository[Provider]):
    """Repository for the ``providers`` table."""

    def __init__(self, client: AsyncClient, **kwargs):
        super().__init__(
            client,
            "providers",
            default_select=PROVIDER_DETAIL_SELECT,
            model=Provider,
            columns=ProviderColumn,
            **kwargs,
        )

    async def find_by_id_with_relations(self, id: EntityId) -> RepositoryResult[Provider]:
        return await self.find_by_id(id, select=PROVIDER_WITH_RELATIONS)

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def _filters(
        self,
        status: Optional[StatusArg],
        category: Optional[str],
        city_id: Optional[str],
        governorate_id: Optional[str],
        is_featured: Optional[bool],
    ) -> List[Filter]:
        filters: List[Filter] = []
        if status:
            filters.append(self.status_filter(ProviderColumn.STATUS, status))
        if category and category != "all":
            filters.append(Filter.eq(ProviderColumn.CATEGORY, category))
        if city_id:
            filters.append(Filter.eq(ProviderColumn.CITY_ID, city_id))
        if governorate_id:
            filters.append(Filter.eq(ProviderColumn.GOVERNORATE_ID, governorate_id))
        if isinstance(is_featured, bool):
            filters.append(Filter.eq(ProviderColumn.IS_FEATURED, is_featured))
        return filters

    async def list_providers(
        self,
        status: Optional[StatusArg] = None,
        category: Optional[str] = None,
        city_id: Optional[str] = None,
        governorate_id: Optional[str] = None,
        is_featured: Optional[bool] = None,
        search: Optional[str] = None,
        sort: Union[ProviderSort, str] = ProviderSort.RATING,
        sort_order: Union[SortOrder, str] = SortOrder.DESC,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> RepositoryListResult[Provider]:
        """
        Customer-facing provider listing.

        Filters apply in order: status, category (``"all"`` = any), city,
        governorate, featured flag, name search.
        """
        filters = self._filters(status, category, city_id, governorate_id, is_featured)
        try:
            sort = self.sort_option(ProviderSort, sort)
            direction = self.sort_option(SortOrder, sort_order, "sort_order")
        except InvalidFilterError as e:
            return Err(e)
        sorts = _sort_strategy(sort, direction is SortOrder.ASC)

        return await self._list(
            "list_providers",
            PROVIDER_LIST_SELECT,
            filters,
            sorts,
            limit=limit if limit is not None else self.page_size,
            offset=offset,
            search=self.search_clause(STOREFRONT_SEARCH_COLUMNS, search) if search else None,
        )

    async def list_providers_with_relations(
        self,
        page: int = 1,
        page_size: Optional[int] = None,
        status: Optional[StatusArg] = None,
        category: Optional[str] = None,
        city_id: Optional[str] = None,
        governorate_id: Optional[str] = None,
        is_featured: Optional[bool] = None,
        search: Optional[str] = None,
        sort: Union[ProviderColumn, str] = ProviderColumn.CREATED_AT,
        sort_order: Union[SortOrder, str] = SortOrder.DESC,
    ) -> RepositoryResult[PaginatedResult[Provider]]:
        """Admin listing with relations; search also covers email and phone."""
        page_size = self._clamp(page_size if page_size is not None else self.page_size)
        filters = self._filters(status, category, city_id, governorate_id, is_featured)
        try:
            direction = self.sort_option(SortOrder, sort_order, "sort_order")
        except InvalidFilterError as e:
            return Err(e)
        # Column names are checked against ProviderColumn when the query runs
        sort_by = OrderBy(sort, ascending=direction is SortOrder.ASC)

        result = await self._list(
            "list_providers_with_relations",
            PROVIDER_WITH_RELATIONS,
            filters,
            [sort_by],
            limit=page_size,
            offset=(page - 1) * page_size,
            search=self.search_clause(ADMIN_SEARCH_COLUMNS, search) if search else None,
        )
        return self._to_page(result, page, page_size)

    async def get_featured(self, limit: int = 6) -> RepositoryListResult[Provider]:
        return await self.list_providers(
            is_featured=True,
            status=STOREFRONT_STATUSES,
            sort=ProviderSort.RATING,
            limit=limit,
        )

    async def get_top_rated(self, limit: int = 6) -> RepositoryListResult[Provider]:
        return await self.list_providers(
            status=STOREFRONT_STATUSES,
            sort=ProviderSort.RATING,
            limit=limit,
        )

    async def get_by_category(self, category: str, **options) -> RepositoryListResult[Provider]:
        return await self.list_providers(category=category, **options)

    async def get_by_city(self, city_id: str, **options) -> RepositoryListResult[Provider]:
        return await self.list_providers(city_id=city_id, **options)

    async def search(self, query: str, **options) -> RepositoryListResult[Provider]:
        """Name search over storefront-visible providers unless ``status`` is given."""
        options.setdefault("status", STOREFRONT_STATUSES)
        return await self.list_providers(search=query, **options)

    # ------------------------------------------------------------------
    # Approval workflow
    # ------------------------------------------------------------------

    async def update_status(
        self,
        id: EntityId,
        status: Union[ProviderStatus, str],
        reason: Optional[str] = None,
    ) -> RepositoryResult[Provider]:
        """Set ``status``; ``reason`` is stored only when rejecting."""
        try:
            status = ProviderStatus(status)
        except ValueError:
            return Err(InvalidValueError(f"Unknown provider status '{status}'", field="status"))

        update_data: Dict[str, Any] = {"status": status}
        if status is ProviderStatus.REJECTED and reason:
            update_data["rejection_reason"] = reason
        return await self.update(id, update_data)

    async def approve(self, id: EntityId, commission_rate: Optional[float] = None) -> RepositoryResult[Provider]:
        update_data: Dict[str, Any] = {
            "status": ProviderStatus.APPROVED,
            "rejection_reason": None,
        }
        if commission_rate is not None:
            update_data["commission_rate"] = commission_rate
        return await self.update(id, update_data)

    async def reject(self, id: EntityId, reason: str) -> RepositoryResult[Provider]:
        return await self.update(id, {
            "status": ProviderStatus.REJECTED,
            "rejection_reason": reason,
        })

    async def suspend(self, id: EntityId, reason: Optional[str] = None) -> RepositoryResult[Provider]:
        return await self.update(id, {
            "status": ProviderStatus.SUSPENDED,
            "rejection_reason": reason,
        })

    # ------------------------------------------------------------------
    # Counters
    # ------------------------------------------------------------------

    async def toggle_featured(self, id: EntityId) -> RepositoryResult[Provider]:
        current = await self.find_by_id(id)
        if current.error is not None:
            return current
        return await self.update(id, {"is_featured": not current.data.is_featured})

    async def update_rating(self, id: EntityId, rating: float, total_reviews: int) -> RepositoryResult[Provider]:
        """Store the recomputed rating after a review."""
        return await self.update(id, {"rating": rating, "total_reviews": total_reviews})

    async def increment_order_count(self, id: EntityId) -> RepositoryResult[Provider]:
        # Read-then-write: concurrent increments can be lost
        current = await self.find_by_id(id)
        if current.error is not None:
            return current
        return await self.update(id, {"total_orders": (current.data.total_orders or 0) + 1})

    async def count_by_status(self, status: StatusArg) -> RepositoryResult[int]:
        return await self.count([self.status_filter(ProviderColumn.STATUS, status)])

    async def get_statistics(self) -> RepositoryResult[ProviderStatistics]:
        result = await self._fetch_rows("get_statistics", PROVIDER_STATS_SELECT, [])
        if result.error is not None:
            return result

        rows = result.data
        approved = {status.value for status in APPROVED_STATUSES}
        return Ok(ProviderStatistics(
            total=len(rows),
            pending=sum(1 for row in rows if row.get("status") == ProviderStatus.PENDING_APPROVAL.value),
            approved=sum(1 for row in rows if row.get("status") in approved),
            suspended=sum(1 for row in rows if row.get("status") == ProviderStatus.SUSPENDED.value),
            featured=sum(1 for row in rows if row.get("is_featured")),
        ))
