"""
Scheduled reminders for planned availability.

Every run picks up the reminders that are due, DMs each owner and marks the
reminder sent. The whole run is one transaction: due rows are locked with
FOR UPDATE SKIP LOCKED so overlapping runs never double-send, and any
database error rolls every change back.
"""

import logging

import sentry_sdk
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncConnection

from core.database import get_transaction
from core.discord_outbound import send_dm
from core.enums import UserType
from core.tables import availability, scheduled_notifications, users

from .templates import get_message

logger = logging.getLogger(__name__)

DATE_FORMAT = "%b %d, %Y"
REMARKS_PREVIEW_LENGTH = 50


def _truncate_remarks(remarks: str | None) -> str:
    if remarks is None:
        return "None"
    if len(remarks) > REMARKS_PREVIEW_LENGTH:
        return f"{remarks[:REMARKS_PREVIEW_LENGTH]}..."
    return remarks


def _saf100_line(avail: dict, user: dict) -> str:
    """SAF100 status only applies to NS users."""
    if user["usr_type"] != UserType.ns:
        return ""
    if avail["saf100"]:
        return "**SAF100 Issued**\n"
    if avail["planned"]:
        return "**SAF100 Pending**\n"
    return ""


def format_reminder(avail: dict, user: dict) -> str:
    """Build the reminder DM for one availability entry."""
    return get_message(
        "scheduled_reminder",
        "discord",
        {
            "date": avail["avail"].strftime(DATE_FORMAT),
            "ict_type": avail["ict_type"].value.upper(),
            "remarks": _truncate_remarks(avail["remarks"]),
            "saf100": _saf100_line(avail, user),
        },
    )


async def _get_due_notifications(conn: AsyncConnection) -> list[dict]:
    result = await conn.execute(
        select(scheduled_notifications)
        .where(
            scheduled_notifications.c.scheduled_time <= func.now(),
            scheduled_notifications.c.sent.is_(False),
            scheduled_notifications.c.is_valid.is_(True),
        )
        .order_by(scheduled_notifications.c.scheduled_time)
        .with_for_update(skip_locked=True)
    )
    return [dict(row) for row in result.mappings()]


async def _get_valid_availability(conn: AsyncConnection, availability_id: int) -> dict | None:
    result = await conn.execute(
        select(availability).where(
            availability.c.availability_id == availability_id,
            availability.c.is_valid.is_(True),
        )
    )
    row = result.mappings().first()
    return dict(row) if row else None


async def _get_valid_user(conn: AsyncConnection, user_id: int) -> dict | None:
    result = await conn.execute(
        select(users).where(users.c.user_id == user_id, users.c.is_valid.is_(True))
    )
    row = result.mappings().first()
    return dict(row) if row else None


async def process_due_reminders() -> int:
    """
    Send every due reminder and mark it sent.

    Reminders whose availability or user is no longer valid are skipped and
    left for the audit to invalidate. A failed DM is logged; the reminder is
    still marked sent so it is not retried every minute.

    Returns:
        Number of reminders marked sent

    Raises:
        Whatever the database raises; the transaction is rolled back
    """
    sent = 0
    async with get_transaction() as conn:
        notifications = await _get_due_notifications(conn)
        if not notifications:
            logger.debug("No scheduled notifications to process.")
            return 0

        for notification in notifications:
            notification_id = notification["notification_id"]
            avail = await _get_valid_availability(conn, notification["availability_id"])
            if avail is None:
                logger.warning(
                    f"Availability with ID {notification['availability_id']} not found or "
                    f"invalid. Skipping notification ID {notification_id}."
                )
                continue

            user = await _get_valid_user(conn, avail["user_id"])
            if user is None:
                logger.warning(
                    f"User with ID {avail['user_id']} not found or invalid. "
                    f"Skipping notification ID {notification_id}."
                )
                continue

            logger.info(
                f"Sending notification to user {user['ops_name']} "
                f"for availability on {avail['avail']}"
            )
            if not await send_dm(user["discord_id"], format_reminder(avail, user)):
                logger.error(f"Error sending message to user {user['ops_name']}")

            await conn.execute(
                update(scheduled_notifications)
                .where(scheduled_notifications.c.notification_id == notification_id)
                .values(sent=True, updated=func.now())
            )
            sent += 1

    return sent


async def run_scheduled_reminders(notifier_flag) -> None:
    """Scheduled job: process reminders and record the outcome in the notifier flag."""
    try:
        count = await process_due_reminders()
    except Exception as e:
        notifier_flag.set(False)
        logger.error(f"Notifier task failed to process notifications: {e}")
        sentry_sdk.capture_exception(e)
        return

    notifier_flag.set(True)
    logger.debug(f"Notifier task processed {count} notification(s) successfully.")
