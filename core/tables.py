"""SQLAlchemy Core table definitions for the database schema."""

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Date,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import TIMESTAMP

from .enums import ict_type_enum, user_type_enum

# Naming convention for constraints (helps Alembic generate better names)
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}
metadata = MetaData(naming_convention=convention)


# =====================================================
# 1. USERS
# =====================================================
users = Table(
    "users",
    metadata,
    Column("user_id", Integer, primary_key=True, autoincrement=True),
    Column("discord_id", Text, nullable=False),
    Column("name", Text, nullable=False),
    Column("ops_name", Text, nullable=False),
    Column("usr_type", user_type_enum, nullable=False),
    Column("admin", Boolean, nullable=False, server_default=text("false")),
    Column("is_valid", Boolean, nullable=False, server_default=text("true")),
    Column("created", TIMESTAMP(timezone=True), server_default=func.now()),
    Column("updated", TIMESTAMP(timezone=True), server_default=func.now()),
    Index("idx_users_discord_id", "discord_id"),
)


# =====================================================
# 2. AVAILABILITY
# =====================================================
availability = Table(
    "availability",
    metadata,
    Column("availability_id", Integer, primary_key=True, autoincrement=True),
    Column(
        "user_id",
        Integer,
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("avail", Date, nullable=False),
    Column("ict_type", ict_type_enum, nullable=False),
    Column("remarks", Text),
    Column("planned", Boolean, nullable=False, server_default=text("false")),
    Column("saf100", Boolean, nullable=False, server_default=text("false")),
    Column("attended", Boolean),
    Column("is_valid", Boolean, nullable=False, server_default=text("true")),
    Column("created", TIMESTAMP(timezone=True), server_default=func.now()),
    Column("updated", TIMESTAMP(timezone=True), server_default=func.now()),
    Index("idx_availability_user_id", "user_id"),
)


# =====================================================
# 3. SCHEDULED NOTIFICATIONS
# =====================================================
scheduled_notifications = Table(
    "scheduled_notifications",
    metadata,
    Column("notification_id", Integer, primary_key=True, autoincrement=True),
    Column(
        "availability_id",
        Integer,
        ForeignKey("availability.availability_id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("scheduled_time", TIMESTAMP(timezone=True), nullable=False),
    Column("sent", Boolean, nullable=False, server_default=text("false")),
    Column("is_valid", Boolean, nullable=False, server_default=text("true")),
    Column("created", TIMESTAMP(timezone=True), server_default=func.now()),
    Column("updated", TIMESTAMP(timezone=True), server_default=func.now()),
    Index(
        "idx_scheduled_notifications_due",
        "scheduled_time",
        postgresql_where=text("sent = false AND is_valid = true"),
    ),
)


# =====================================================
# 4. NOTIFICATION SETTINGS
# =====================================================
notification_settings = Table(
    "notification_settings",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("chat_id", BigInteger, nullable=False),
    Column("notif_system", Boolean, nullable=False, server_default=text("false")),
    Column("notif_register", Boolean, nullable=False, server_default=text("false")),
    Column("notif_availability", Boolean, nullable=False, server_default=text("false")),
    Column("notif_plan", Boolean, nullable=False, server_default=text("false")),
    Column("notif_conflict", Boolean, nullable=False, server_default=text("false")),
    Column("created", TIMESTAMP(timezone=True), server_default=func.now()),
    Column("updated", TIMESTAMP(timezone=True), server_default=func.now()),
    Column("is_valid", Boolean, nullable=False, server_default=text("true")),
    # At most one valid settings row per chat; invalidated rows are kept
    Index(
        "uq_notification_settings_valid_chat_id",
        "chat_id",
        unique=True,
        postgresql_where=text("is_valid = true"),
    ),
)
