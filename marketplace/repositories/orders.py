"""
Orders Repository
=================
Order queries, status transitions and order statistics.

Commission and totals are computed by the database; this repository only
reads and sums the stored values.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from supabase import AsyncClient

from marketplace.core.exceptions import InvalidFilterError, InvalidTransitionError
from marketplace.models.orders import (
    ACTIVE_ORDER_STATUSES,
    STATUS_TIMESTAMP_FIELDS,
    Order,
    OrderColumn,
    OrderSort,
    OrderStatus,
    is_valid_transition,
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

StatusArg = Union[OrderStatus, str, Sequence[Union[OrderStatus, str]]]

# Every plain order column
ORDER_LIST_SELECT = """
  id, order_number, customer_id, provider_id, status,
  subtotal, delivery_fee, discount, total, platform_commission,
  payment_method, payment_status, delivery_address,
  delivery_latitude, delivery_longitude, notes,
  promo_code_id, created_at, updated_at,
  confirmed_at, preparing_at, ready_at, delivering_at, delivered_at,
  cancelled_at, refunded_at, cancelled_reason, cancelled_by
"""

# List views: plain columns plus customer and provider
ORDER_WITH_RELATIONS = ORDER_LIST_SELECT.rstrip() + """,
  customer:profiles!customer_id(id, full_name, phone, email),
  provider:providers!provider_id(id, name_ar, name_en, phone)
"""

# Detail views: relations plus line items
ORDER_WITH_ITEMS = ORDER_LIST_SELECT.rstrip() + """,
  customer:profiles!customer_id(id, full_name, phone, email),
  provider:providers!provider_id(id, name_ar, name_en, phone, logo_url),
  items:order_items(
    id, menu_item_id, variant_id, quantity, unit_price, total_price, notes, addons,
    menu_item:menu_items(id, name_ar, name_en, image_url)
  )
"""

ORDER_STATS_SELECT = "id, status, total, platform_commission, created_at"

PROVIDER_STATS_SELECT = "status, total"

CANCELLED_STATUSES = (OrderStatus.CANCELLED.value, OrderStatus.REFUNDED.value)


@dataclass(frozen=True)
class OrderStatistics:
    total: int
    pending: int
    completed: int
    cancelled: int
    total_revenue: float
    total_commission: float


@dataclass(frozen=True)
class ProviderOrderStatistics:
    total_orders: int
    pending_orders: int
    completed_orders: int
    cancelled_orders: int
    total_revenue: float
    avg_order_value: float


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _date_filters(date_from: Optional[Any], date_to: Optional[Any]) -> List[Filter]:
    filters = []
    if date_from:
        filters.append(Filter.gte(OrderColumn.CREATED_AT, date_from))
    if date_to:
        filters.append(Filter.lte(OrderColumn.CREATED_AT, date_to))
    return filters


class OrdersRepository(BaseRepository[Order]):
    """
    Repository for the ``orders`` table.

    Args:
        client: Async Supabase client
        strict_transitions: Reject status changes missing from
            ``ORDER_STATUS_TRANSITIONS`` instead of writing any status
    """

    def __init__(self, client: AsyncClient, strict_transitions: bool = False, **kwargs):
        super().__init__(
            client,
            "orders",
            default_select=ORDER_LIST_SELECT,
            model=Order,
            columns=OrderColumn,
            **kwargs,
        )
        self.strict_transitions = strict_transitions

    # ------------------------------------------------------------------
    # Single-order lookups
    # ------------------------------------------------------------------

    async def find_by_id_with_relations(self, id: EntityId) -> RepositoryResult[Order]:
        return await self.find_by_id(id, select=ORDER_WITH_RELATIONS)

    async def find_by_id_with_items(self, id: EntityId) -> RepositoryResult[Order]:
        return await self.find_by_id(id, select=ORDER_WITH_ITEMS)

    async def find_by_order_number(self, order_number: str) -> RepositoryResult[Order]:
        return await self.find_one_by(OrderColumn.ORDER_NUMBER, order_number, select=ORDER_WITH_ITEMS)

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    async def list_orders(
        self,
        status: Optional[StatusArg] = None,
        provider_id: Optional[str] = None,
        customer_id: Optional[str] = None,
        date_from: Optional[Any] = None,
        date_to: Optional[Any] = None,
        payment_status: Optional[str] = None,
        search: Optional[str] = None,
        sort: Union[OrderSort, str] = OrderSort.CREATED_AT,
        sort_order: Union[SortOrder, str] = SortOrder.DESC,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> RepositoryListResult[Order]:
        """
        List orders with relations.

        Filters apply in order: status, provider, customer, date range,
        payment status, order-number search.
        """
        filters: List[Filter] = []
        if status:
            filters.append(self.status_filter(OrderColumn.STATUS, status))
        if provider_id:
            filters.append(Filter.eq(OrderColumn.PROVIDER_ID, provider_id))
        if customer_id:
            filters.append(Filter.eq(OrderColumn.CUSTOMER_ID, customer_id))
        filters.extend(_date_filters(date_from, date_to))
        if payment_status:
            filters.append(Filter.eq(OrderColumn.PAYMENT_STATUS, payment_status))
        if search and search.strip():
            filters.append(Filter.ilike(OrderColumn.ORDER_NUMBER, f"%{search.strip()}%"))

        try:
            sort = self.sort_option(OrderSort, sort)
            direction = self.sort_option(SortOrder, sort_order, "sort_order")
        except InvalidFilterError as e:
            return Err(e)
        sort_by = OrderBy(sort.value, ascending=direction is SortOrder.ASC)

        return await self._list(
            "list_orders",
            ORDER_WITH_RELATIONS,
            filters,
            [sort_by],
            limit=limit if limit is not None else self.page_size,
            offset=offset,
        )

    async def list_orders_paginated(
        self,
        page: int = 1,
        page_size: Optional[int] = None,
        **filters,
    ) -> RepositoryResult[PaginatedResult[Order]]:
        """``list_orders`` for admin tables, packaged as one page."""
        page_size = self._clamp(page_size if page_size is not None else self.page_size)
        result = await self.list_orders(limit=page_size, offset=(page - 1) * page_size, **filters)
        return self._to_page(result, page, page_size)

    async def get_provider_orders(self, provider_id: str, **options) -> RepositoryListResult[Order]:
        return await self.list_orders(provider_id=provider_id, **options)

    async def get_provider_pending_orders(self, provider_id: str) -> RepositoryListResult[Order]:
        """Pending orders, oldest first."""
        return await self.list_orders(
            provider_id=provider_id,
            status=OrderStatus.PENDING,
            sort=OrderSort.CREATED_AT,
            sort_order=SortOrder.ASC,
        )

    async def get_provider_active_orders(self, provider_id: str) -> RepositoryListResult[Order]:
        """Orders not yet delivered, cancelled or refunded, oldest first."""
        return await self.list_orders(
            provider_id=provider_id,
            status=ACTIVE_ORDER_STATUSES,
            sort=OrderSort.CREATED_AT,
            sort_order=SortOrder.ASC,
        )

    async def get_customer_orders(self, customer_id: str, **options) -> RepositoryListResult[Order]:
        return await self.list_orders(customer_id=customer_id, **options)

    async def get_customer_recent_orders(self, customer_id: str, limit: int = 10) -> RepositoryListResult[Order]:
        return await self.list_orders(
            customer_id=customer_id,
            sort=OrderSort.CREATED_AT,
            sort_order=SortOrder.DESC,
            limit=limit,
        )

    # ------------------------------------------------------------------
    # Status changes
    # ------------------------------------------------------------------

    async def update_status(
        self,
        id: EntityId,
        status: Union[OrderStatus, str],
        extra: Optional[Mapping[str, Any]] = None,
    ) -> RepositoryResult[Order]:
        """
        Set ``status`` and stamp its reached-at column with the current time.

        Calling again for the same status overwrites the timestamp. Any
        status may follow any other unless ``strict_transitions`` is set.
        """
        try:
            status = OrderStatus(status)
        except ValueError:
            return Err(InvalidTransitionError("unknown", str(status)))

        if self.strict_transitions:
            current = await self.find_by_id(id, select="id, status")
            if current.error is not None:
                return current
            if current.data.status is not None and not is_valid_transition(current.data.status, status):
                return Err(InvalidTransitionError(current.data.status.value, status.value))

        # status last: extra cannot override the validated value
        update_data: Dict[str, Any] = {**(extra or {}), "status": status.value}
        timestamp_field = STATUS_TIMESTAMP_FIELDS.get(status)
        if timestamp_field:
            update_data[timestamp_field] = _utc_now()

        return await self.update(id, update_data)

    async def cancel(self, id: EntityId, reason: str, cancelled_by: str) -> RepositoryResult[Order]:
        return await self.update_status(
            id,
            OrderStatus.CANCELLED,
            {"cancelled_reason": reason, "cancelled_by": cancelled_by},
        )

    async def mark_refunded(self, id: EntityId) -> RepositoryResult[Order]:
        return await self.update_status(id, OrderStatus.REFUNDED)

    # ------------------------------------------------------------------
    # Counts and statistics
    # ------------------------------------------------------------------

    async def count_provider_pending(self, provider_id: str) -> RepositoryResult[int]:
        return await self.count([
            Filter.eq(OrderColumn.PROVIDER_ID, provider_id),
            Filter.eq(OrderColumn.STATUS, OrderStatus.PENDING),
        ])

    async def count_by_status(self, status: StatusArg) -> RepositoryResult[int]:
        return await self.count([self.status_filter(OrderColumn.STATUS, status)])

    async def get_statistics(
        self,
        date_from: Optional[Any] = None,
        date_to: Optional[Any] = None,
    ) -> RepositoryResult[OrderStatistics]:
        """Platform-wide counts; revenue and commission cover delivered orders only."""
        result = await self._fetch_rows("get_statistics", ORDER_STATS_SELECT, _date_filters(date_from, date_to))
        if result.error is not None:
            return result

        rows = result.data
        delivered = [row for row in rows if row.get("status") == OrderStatus.DELIVERED.value]
        return Ok(OrderStatistics(
            total=len(rows),
            pending=sum(1 for row in rows if row.get("status") == OrderStatus.PENDING.value),
            completed=len(delivered),
            cancelled=sum(1 for row in rows if row.get("status") in CANCELLED_STATUSES),
            total_revenue=sum(float(row.get("total") or 0) for row in delivered),
            total_commission=sum(float(row.get("platform_commission") or 0) for row in delivered),
        ))

    async def get_provider_statistics(
        self,
        provider_id: str,
        date_from: Optional[Any] = None,
        date_to: Optional[Any] = None,
    ) -> RepositoryResult[ProviderOrderStatistics]:
        """Order counts and delivered revenue for one provider."""
        filters = [Filter.eq(OrderColumn.PROVIDER_ID, provider_id), *_date_filters(date_from, date_to)]
        result = await self._fetch_rows("get_provider_statistics", PROVIDER_STATS_SELECT, filters)
        if result.error is not None:
            return result

        rows = result.data
        delivered = [row for row in rows if row.get("status") == OrderStatus.DELIVERED.value]
        revenue = sum(float(row.get("total") or 0) for row in delivered)
        return Ok(ProviderOrderStatistics(
            total_orders=len(rows),
            pending_orders=sum(1 for row in rows if row.get("status") == OrderStatus.PENDING.value),
            completed_orders=len(delivered),
            cancelled_orders=sum(1 for row in rows if row.get("status") in CANCELLED_STATUSES),
            total_revenue=revenue,
            avg_order_value=revenue / len(delivered) if delivered else 0.0,
        ))
