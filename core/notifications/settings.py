"""
Per-channel notification preferences.

Each chat destination has at most one valid notification_settings row with
one boolean per NotificationCategory. Writes are partial merges: flags the
caller does not pass keep their stored value.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, select, text, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError

from core.database import get_connection, get_transaction
from core.enums import NotificationCategory
from core.errors import StorageError
from core.tables import notification_settings

logger = logging.getLogger(__name__)


@dataclass
class NotificationSettings:
    """One chat's notification preferences."""

    id: int
    chat_id: int
    notif_system: bool
    notif_register: bool
    notif_availability: bool
    notif_plan: bool
    notif_conflict: bool
    created: datetime | None
    updated: datetime | None
    is_valid: bool

    @classmethod
    def from_row(cls, row) -> "NotificationSettings":
        return cls(**{name: row[name] for name in cls.__dataclass_fields__})

    def is_enabled(self, category: NotificationCategory) -> bool:
        return getattr(self, category.column_name)

    def enabled_categories(self) -> list[NotificationCategory]:
        return [c for c in NotificationCategory if self.is_enabled(c)]


async def get_settings(chat_id: int) -> NotificationSettings | None:
    """
    Get the valid settings row for a chat.

    Returns:
        The settings, or None if the chat has none (or they were invalidated)

    Raises:
        StorageError: If the query fails
    """
    try:
        async with get_connection() as conn:
            result = await conn.execute(
                select(notification_settings).where(
                    notification_settings.c.chat_id == chat_id,
                    notification_settings.c.is_valid.is_(True),
                )
            )
            row = result.mappings().first()
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Error retrieving notification settings for chat_id {chat_id}: {e}")
        raise StorageError(str(e)) from e

    if row is None:
        logger.info(f"No notification settings found for chat_id: {chat_id}")
        return None
    return NotificationSettings.from_row(row)


def build_upsert(chat_id: int, flags: dict[NotificationCategory, bool | None]):
    """
    Build the INSERT ... ON CONFLICT statement for a partial settings write.

    Only flags that are not None appear in the UPDATE clause, so stored values
    for the rest survive. On first insert the missing flags are false.
    """
    given = {
        category.column_name: value
        for category, value in flags.items()
        if value is not None
    }
    values = {c.column_name: given.get(c.column_name, False) for c in NotificationCategory}

    stmt = insert(notification_settings).values(chat_id=chat_id, **values)
    stmt = stmt.on_conflict_do_update(
        index_elements=[notification_settings.c.chat_id],
        index_where=text("is_valid = true"),
        set_={
            **{column: stmt.excluded[column] for column in given},
            "updated": func.now(),
        },
    )
    return stmt.returning(*notification_settings.c)


async def upsert_settings(
    chat_id: int,
    *,
    system: bool | None = None,
    register: bool | None = None,
    availability: bool | None = None,
    plan: bool | None = None,
    conflict: bool | None = None,
) -> NotificationSettings:
    """
    Create or update the valid settings row for a chat.

    Args:
        chat_id: Destination channel id
        system, register, availability, plan, conflict: New flag values;
            None leaves the stored value untouched

    Returns:
        The full settings row after the write

    Raises:
        StorageError: If the write fails
    """
    flags = {
        NotificationCategory.system: system,
        NotificationCategory.register: register,
        NotificationCategory.availability: availability,
        NotificationCategory.plan: plan,
        NotificationCategory.conflict: conflict,
    }
    try:
        async with get_transaction() as conn:
            result = await conn.execute(build_upsert(chat_id, flags))
            row = result.mappings().one()
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Error updating notification settings for chat_id {chat_id}: {e}")
        raise StorageError(str(e)) from e

    logger.info(f"Updated notification settings for chat_id: {chat_id}")
    return NotificationSettings.from_row(row)


async def invalidate_settings(chat_id: int) -> bool:
    """
    Soft-delete the valid settings row for a chat.

    Returns:
        True if a row was invalidated, False if the chat had none

    Raises:
        StorageError: If the write fails
    """
    try:
        async with get_transaction() as conn:
            result = await conn.execute(
                update(notification_settings)
                .where(
                    notification_settings.c.chat_id == chat_id,
                    notification_settings.c.is_valid.is_(True),
                )
                .values(is_valid=False, updated=func.now())
            )
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Error soft deleting notification settings for chat_id {chat_id}: {e}")
        raise StorageError(str(e)) from e

    if result.rowcount > 0:
        logger.info(f"Soft deleted notification settings for chat_id: {chat_id}")
        return True
    logger.info(f"No active notification settings to soft delete for chat_id: {chat_id}")
    return False


async def list_enabled_destinations(category: NotificationCategory) -> list[int]:
    """
    Get every chat with the given category switched on.

    Raises:
        StorageError: If the query fails
    """
    column = notification_settings.c[category.column_name]
    try:
        async with get_connection() as conn:
            result = await conn.execute(
                select(notification_settings.c.chat_id)
                .where(column.is_(True), notification_settings.c.is_valid.is_(True))
                .order_by(notification_settings.c.id)
            )
            chat_ids = list(result.scalars().all())
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Error retrieving {category.label} notification settings: {e}")
        raise StorageError(str(e)) from e

    logger.info(f"Retrieved {len(chat_ids)} chat(s) with {category.label} notifications enabled")
    return chat_ids
