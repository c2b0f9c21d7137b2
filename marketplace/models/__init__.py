"""
Models
======
Query contracts and entity read models.
"""

from marketplace.models.query import (
    Filter,
    FilterOperator,
    OrderBy,
    QueryOptions,
    SortOrder,
    column_name,
)
from marketplace.models.orders import (
    Order,
    OrderItem,
    OrderStatus,
    OrderColumn,
    OrderSort,
    ORDER_STATUS_TRANSITIONS,
    STATUS_TIMESTAMP_FIELDS,
    is_valid_transition,
)
from marketplace.models.providers import (
    BusinessHours,
    Provider,
    ProviderStatus,
    ProviderColumn,
    ProviderSort,
)
from marketplace.models.profiles import (
    NotificationPreferences,
    Profile,
    ProfileColumn,
    ProfileSort,
    UserRole,
)

__all__ = [
    "Filter",
    "FilterOperator",
    "OrderBy",
    "QueryOptions",
    "SortOrder",
    "column_name",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderColumn",
    "OrderSort",
    "ORDER_STATUS_TRANSITIONS",
    "STATUS_TIMESTAMP_FIELDS",
    "is_valid_transition",
    "BusinessHours",
    "Provider",
    "ProviderStatus",
    "ProviderColumn",
    "ProviderSort",
    "NotificationPreferences",
    "Profile",
    "ProfileColumn",
    "ProfileSort",
    "UserRole",
]
