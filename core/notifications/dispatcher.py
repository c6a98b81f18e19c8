"""
Notification dispatcher - fans a message out to every channel that has the
message's category switched on.

Delivery is best-effort: each destination is sent to independently, a
failure is logged and the remaining destinations still get the message.
Callers get no delivery report.
"""

import logging
from dataclasses import dataclass

from core.discord_outbound import Transport, get_transport
from core.enums import NotificationCategory
from core.errors import StorageError, TransportError
from core.notifications.settings import list_enabled_destinations

logger = logging.getLogger(__name__)


@dataclass
class DeliveryOutcome:
    """Result of sending one broadcast to one destination."""

    destination: int
    delivered: bool
    skipped: bool = False
    error: str | None = None


async def fan_out(
    transport: Transport,
    destinations: list[int],
    message: str,
    category: NotificationCategory,
    exclude: int | None = None,
) -> list[DeliveryOutcome]:
    """
    Send a message to each destination in turn.

    Args:
        transport: Where to send
        destinations: Channel ids, in send order
        message: Pre-composed message text
        category: Only used for logging
        exclude: Destination to skip (usually the channel the change came from)

    Returns:
        One DeliveryOutcome per destination, in the same order
    """
    outcomes = []
    for destination in destinations:
        if exclude is not None and destination == exclude:
            logger.debug(
                f"Skipping {category.label} notification to originator chat_id ({destination})"
            )
            outcomes.append(DeliveryOutcome(destination, delivered=False, skipped=True))
            continue

        try:
            await transport.send(destination, message)
        except TransportError as e:
            logger.error(
                f"Failed to send {category.label} notification to chat_id ({destination}): {e}"
            )
            outcomes.append(DeliveryOutcome(destination, delivered=False, error=str(e)))
            continue

        logger.info(f"Sent {category.label} notification to chat_id ({destination})")
        outcomes.append(DeliveryOutcome(destination, delivered=True))

    return outcomes


async def dispatch(
    category: NotificationCategory,
    message: str,
    *,
    transport: Transport | None = None,
    exclude: int | None = None,
) -> None:
    """
    Broadcast a message to every channel subscribed to a category.

    Args:
        category: Which settings column gates delivery
        message: Pre-composed message text
        transport: Transport to send through (defaults to the running bot)
        exclude: Destination to leave out, e.g. the originating channel
    """
    transport = transport or get_transport()
    if transport is None:
        logger.warning(
            f"Discord bot not configured, dropping {category.label} notification"
        )
        return

    try:
        destinations = await list_enabled_destinations(category)
    except StorageError as e:
        logger.error(f"Failed to retrieve {category.label} notification settings: {e}")
        return

    if not destinations:
        logger.info(f"No {category.label} notifications enabled for any chat")
        return

    logger.info(f"Sending {category.label} notifications to {len(destinations)} chat(s)")
    outcomes = await fan_out(transport, destinations, message, category, exclude)

    failed = [o.destination for o in outcomes if o.error is not None]
    if failed:
        logger.warning(
            f"{category.label} notification failed for {len(failed)} of "
            f"{len(outcomes)} chat(s): {failed}"
        )
