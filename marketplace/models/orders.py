"""
Order Models
============
Order read model, status enum and the status transition table.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Union

from pydantic import BaseModel

from marketplace.models.common import ReadModel


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERING = "delivering"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


ACTIVE_ORDER_STATUSES: List[OrderStatus] = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.DELIVERING,
]

TERMINAL_ORDER_STATUSES: FrozenSet[OrderStatus] = frozenset({
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
    OrderStatus.REFUNDED,
})

# Column stamped when a status is reached; pending is covered by created_at
STATUS_TIMESTAMP_FIELDS: Dict[OrderStatus, str] = {
    OrderStatus.CONFIRMED: "confirmed_at",
    OrderStatus.PREPARING: "preparing_at",
    OrderStatus.READY: "ready_at",
    OrderStatus.DELIVERING: "delivering_at",
    OrderStatus.DELIVERED: "delivered_at",
    OrderStatus.CANCELLED: "cancelled_at",
    OrderStatus.REFUNDED: "refunded_at",
}

# Allowed moves, consulted only when strict transitions are enabled
ORDER_STATUS_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY, OrderStatus.CANCELLED}),
    OrderStatus.READY: frozenset({
        OrderStatus.DELIVERING,
        OrderStatus.DELIVERED,  # customer pickup
        OrderStatus.CANCELLED,
    }),
    OrderStatus.DELIVERING: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.CANCELLED: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.REFUNDED: frozenset(),
}


def is_valid_transition(current: OrderStatus, target: OrderStatus) -> bool:
    """Whether ``current -> target`` is in the transition table."""
    return OrderStatus(target) in ORDER_STATUS_TRANSITIONS[OrderStatus(current)]


class OrderColumn(str, Enum):
    ID = "id"
    ORDER_NUMBER = "order_number"
    CUSTOMER_ID = "customer_id"
    PROVIDER_ID = "provider_id"
    STATUS = "status"
    SUBTOTAL = "subtotal"
    DELIVERY_FEE = "delivery_fee"
    DISCOUNT = "discount"
    TOTAL = "total"
    PLATFORM_COMMISSION = "platform_commission"
    PAYMENT_METHOD = "payment_method"
    PAYMENT_STATUS = "payment_status"
    DELIVERY_ADDRESS = "delivery_address"
    DELIVERY_LATITUDE = "delivery_latitude"
    DELIVERY_LONGITUDE = "delivery_longitude"
    NOTES = "notes"
    PROMO_CODE_ID = "promo_code_id"
    CANCELLED_REASON = "cancelled_reason"
    CANCELLED_BY = "cancelled_by"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    CONFIRMED_AT = "confirmed_at"
    PREPARING_AT = "preparing_at"
    READY_AT = "ready_at"
    DELIVERING_AT = "delivering_at"
    DELIVERED_AT = "delivered_at"
    CANCELLED_AT = "cancelled_at"
    REFUNDED_AT = "refunded_at"


class OrderSort(str, Enum):
    CREATED_AT = "created_at"
    TOTAL = "total"
    STATUS = "status"
    ORDER_NUMBER = "order_number"


class OrderAddon(BaseModel):
    addon_id: str
    name_ar: Optional[str] = None
    name_en: Optional[str] = None
    price: float = 0
    quantity: int = 1


class MenuItemSummary(ReadModel):
    id: str
    name_ar: Optional[str] = None
    name_en: Optional[str] = None
    image_url: Optional[str] = None


class OrderItem(ReadModel):
    id: str
    order_id: Optional[str] = None
    menu_item_id: Optional[str] = None
    variant_id: Optional[str] = None
    quantity: int = 1
    unit_price: Optional[float] = None
    total_price: Optional[float] = None
    notes: Optional[str] = None
    addons: Optional[List[OrderAddon]] = None
    menu_item: Optional[MenuItemSummary] = None


class OrderCustomer(ReadModel):
    id: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class OrderProvider(ReadModel):
    id: str
    name_ar: Optional[str] = None
    name_en: Optional[str] = None
    phone: Optional[str] = None
    logo_url: Optional[str] = None


class Order(ReadModel):
    """Order snapshot as stored in the ``orders`` table."""

    id: str
    order_number: Optional[str] = None
    customer_id: Optional[str] = None
    provider_id: Optional[str] = None
    status: Optional[OrderStatus] = None

    # Money; platform_commission is computed by the database
    subtotal: Optional[float] = None
    delivery_fee: Optional[float] = None
    discount: Optional[float] = None
    total: Optional[float] = None
    platform_commission: Optional[float] = None

    payment_method: Optional[str] = None
    # Free text, or a JSON object from the structured address form
    # Free text or a structured address object (governorate_ar, city_ar, street, ...)
    delivery_address: Optional[Union[str, Dict[str, Any]]] = None
    delivery_latitude: Optional[float] = None
    delivery_longitude: Optional[float] = None
    notes: Optional[str] = None
    promo_code_id: Optional[str] = None
    cancelled_reason: Optional[str] = None
    cancelled_by: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    preparing_at: Optional[datetime] = None
    ready_at: Optional[datetime] = None
    delivering_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None

    # Relations (when joined)
    customer: Optional[OrderCustomer] = None
    provider: Optional[OrderProvider] = None
    items: Optional[List[OrderItem]] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_ORDER_STATUSES
