"""
Data audit for scheduled reminders.

Reminders pointing at an availability or user that has been invalidated (or
no longer exists) would otherwise sit in the queue forever. The audit finds
them and invalidates them too.
"""

import logging

import sentry_sdk
from sqlalchemy import and_, func, or_, select, update

from core.database import get_transaction
from core.health.flags import StatusFlag
from core.tables import availability, scheduled_notifications, users

logger = logging.getLogger(__name__)


def orphaned_notifications_query():
    """Valid reminders whose availability or user is missing or invalid."""
    return (
        select(scheduled_notifications.c.notification_id)
        .select_from(
            scheduled_notifications.outerjoin(
                availability,
                and_(
                    scheduled_notifications.c.availability_id
                    == availability.c.availability_id,
                    availability.c.is_valid.is_(True),
                ),
            ).outerjoin(
                users,
                and_(
                    availability.c.user_id == users.c.user_id,
                    users.c.is_valid.is_(True),
                ),
            )
        )
        .where(
            scheduled_notifications.c.is_valid.is_(True),
            or_(
                availability.c.availability_id.is_(None),
                users.c.user_id.is_(None),
            ),
        )
        .with_for_update(of=scheduled_notifications, skip_locked=True)
    )


async def audit_data() -> list[int]:
    """
    Invalidate orphaned scheduled reminders.

    Returns:
        Ids of the reminders that were invalidated
    """
    async with get_transaction() as conn:
        result = await conn.execute(orphaned_notifications_query())
        notification_ids = list(result.scalars().all())

        for notification_id in notification_ids:
            logger.warning(
                f"Notification ID {notification_id} has invalid or missing availability/user."
            )

        if notification_ids:
            await conn.execute(
                update(scheduled_notifications)
                .where(scheduled_notifications.c.notification_id.in_(notification_ids))
                .values(is_valid=False, updated=func.now())
            )

    return notification_ids


async def run_audit(audit_flag: StatusFlag) -> None:
    """Scheduled job: run the audit and record the outcome in the audit flag."""
    logger.info("Starting audit task...")
    try:
        invalidated = await audit_data()
    except Exception as e:
        audit_flag.set(False)
        logger.error(f"Audit task failed: {e}")
        sentry_sdk.capture_exception(e)
        return

    audit_flag.set(True)
    logger.info(
        f"Audit task completed successfully ({len(invalidated)} notification(s) invalidated)"
    )
