"""Enum definitions for the notification subsystem and its database schema."""

import enum

from sqlalchemy import Enum as SQLEnum


# =====================================================
# Python Enum Classes
# =====================================================


class NotificationCategory(str, enum.Enum):
    """Kind of broadcast. Each category is gated by one notification_settings column."""

    system = "system"
    register = "register"
    availability = "availability"
    plan = "plan"
    conflict = "conflict"

    @property
    def column_name(self) -> str:
        return f"notif_{self.value}"

    @property
    def label(self) -> str:
        return self.value.upper()


class UserType(str, enum.Enum):
    active = "active"
    staff = "staff"
    ns = "ns"


class IctType(str, enum.Enum):
    live = "live"
    sims = "sims"
    other = "other"


# =====================================================
# SQLAlchemy Enum Types
# Created by the initial Alembic migration
# =====================================================

user_type_enum = SQLEnum(UserType, name="user_type_enum", native_enum=True)
ict_type_enum = SQLEnum(IctType, name="ict_enum", native_enum=True)
