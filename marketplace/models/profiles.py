"""
Profile Models
==============
User profile read model. ``id`` equals the auth user id.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from marketplace.models.common import LocationRef, ReadModel


class UserRole(str, Enum):
    CUSTOMER = "customer"
    PROVIDER = "provider"
    ADMIN = "admin"


class ProfileColumn(str, Enum):
    ID = "id"
    EMAIL = "email"
    PHONE = "phone"
    FULL_NAME = "full_name"
    AVATAR_URL = "avatar_url"
    ROLE = "role"
    IS_ACTIVE = "is_active"
    GOVERNORATE_ID = "governorate_id"
    CITY_ID = "city_id"
    DISTRICT_ID = "district_id"
    PREFERRED_LANGUAGE = "preferred_language"
    NOTIFICATION_PREFERENCES = "notification_preferences"
    TOTAL_ORDERS = "total_orders"
    TOTAL_SPENT = "total_spent"
    LAST_LOGIN_AT = "last_login_at"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


class ProfileSort(str, Enum):
    CREATED_AT = "created_at"
    FULL_NAME = "full_name"
    TOTAL_ORDERS = "total_orders"
    TOTAL_SPENT = "total_spent"
    LAST_LOGIN_AT = "last_login_at"


class NotificationPreferences(BaseModel):
    push: bool = True
    email: bool = True
    sms: bool = True


class Profile(ReadModel):
    """Profile snapshot as stored in the ``profiles`` table."""

    id: str
    email: Optional[str] = None
    phone: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None

    governorate_id: Optional[str] = None
    city_id: Optional[str] = None
    district_id: Optional[str] = None
    preferred_language: Optional[str] = None
    notification_preferences: Optional[NotificationPreferences] = None

    # Running aggregates, incremented per completed order
    total_orders: Optional[int] = None
    total_spent: Optional[float] = None

    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Relations (when joined)
    governorate: Optional[LocationRef] = None
    city: Optional[LocationRef] = None
    district: Optional[LocationRef] = None
