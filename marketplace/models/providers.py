"""
Provider Models
===============
Merchant read model, lifecycle status and business hours.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from marketplace.models.common import LocationRef, ReadModel


class ProviderStatus(str, Enum):
    PENDING_APPROVAL = "pending_approval"
    INCOMPLETE = "incomplete"
    APPROVED = "approved"
    REJECTED = "rejected"
    SUSPENDED = "suspended"
    OPEN = "open"
    CLOSED = "closed"
    TEMPORARILY_PAUSED = "temporarily_paused"
    ON_VACATION = "on_vacation"


# Statuses visible on the customer storefront
STOREFRONT_STATUSES: List[ProviderStatus] = [ProviderStatus.OPEN, ProviderStatus.CLOSED]

# Counted as approved in admin statistics
APPROVED_STATUSES = frozenset({
    ProviderStatus.APPROVED,
    ProviderStatus.OPEN,
    ProviderStatus.CLOSED,
})


class ProviderColumn(str, Enum):
    ID = "id"
    OWNER_ID = "owner_id"
    NAME_AR = "name_ar"
    NAME_EN = "name_en"
    DESCRIPTION_AR = "description_ar"
    DESCRIPTION_EN = "description_en"
    CATEGORY = "category"
    LOGO_URL = "logo_url"
    COVER_IMAGE_URL = "cover_image_url"
    STATUS = "status"
    REJECTION_REASON = "rejection_reason"
    COMMISSION_RATE = "commission_rate"
    RATING = "rating"
    TOTAL_REVIEWS = "total_reviews"
    TOTAL_ORDERS = "total_orders"
    IS_FEATURED = "is_featured"
    PHONE = "phone"
    EMAIL = "email"
    ADDRESS_AR = "address_ar"
    ADDRESS_EN = "address_en"
    GOVERNORATE_ID = "governorate_id"
    CITY_ID = "city_id"
    BUSINESS_HOURS = "business_hours"
    DELIVERY_FEE = "delivery_fee"
    MIN_ORDER_AMOUNT = "min_order_amount"
    DELIVERY_RADIUS_KM = "delivery_radius_km"
    ESTIMATED_DELIVERY_TIME_MIN = "estimated_delivery_time_min"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


class ProviderSort(str, Enum):
    RATING = "rating"
    DELIVERY_TIME = "delivery_time"
    DELIVERY_FEE = "delivery_fee"
    CREATED_AT = "created_at"
    NAME_AR = "name_ar"
    TOTAL_ORDERS = "total_orders"


class DayHours(BaseModel):
    open: str
    close: str
    is_open: Optional[bool] = None


class BusinessHours(BaseModel):
    """Opening hours keyed by weekday (JSONB in the database)."""

    monday: Optional[DayHours] = None
    tuesday: Optional[DayHours] = None
    wednesday: Optional[DayHours] = None
    thursday: Optional[DayHours] = None
    friday: Optional[DayHours] = None
    saturday: Optional[DayHours] = None
    sunday: Optional[DayHours] = None

    def for_day(self, weekday: int) -> Optional[DayHours]:
        """Hours for ``weekday`` (0 = Monday, as in ``datetime.weekday()``)."""
        names = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
        return getattr(self, names[weekday])


class ProviderOwner(ReadModel):
    id: str
    full_name: Optional[str] = None
    email: Optional[str] = None


class Provider(ReadModel):
    """Provider snapshot as stored in the ``providers`` table."""

    id: str
    owner_id: Optional[str] = None
    name_ar: Optional[str] = None
    name_en: Optional[str] = None
    description_ar: Optional[str] = None
    description_en: Optional[str] = None
    category: Optional[str] = None
    logo_url: Optional[str] = None
    cover_image_url: Optional[str] = None

    status: Optional[ProviderStatus] = None
    rejection_reason: Optional[str] = None
    commission_rate: Optional[float] = None

    rating: Optional[float] = None
    total_reviews: Optional[int] = None
    total_orders: Optional[int] = None
    is_featured: Optional[bool] = None

    phone: Optional[str] = None
    email: Optional[str] = None
    address_ar: Optional[str] = None
    address_en: Optional[str] = None
    governorate_id: Optional[str] = None
    city_id: Optional[str] = None
    business_hours: Optional[BusinessHours] = None

    delivery_fee: Optional[float] = None
    min_order_amount: Optional[float] = None
    delivery_radius_km: Optional[float] = None
    estimated_delivery_time_min: Optional[int] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Relations (when joined)
    governorate: Optional[LocationRef] = None
    city: Optional[LocationRef] = None
    owner: Optional[ProviderOwner] = None
