"""
Periodic health monitor.

Each cycle runs one canary probe, builds a fresh HealthReport and, when it
differs from the previous cycle's report, broadcasts a SYSTEM notification
describing what changed.
"""

import logging

import sentry_sdk

from core.enums import NotificationCategory
from core.health.aggregator import OK, HealthReport, HealthSignals, check_health
from core.notifications.dispatcher import dispatch
from core.notifications.templates import get_message

logger = logging.getLogger(__name__)


def _status_emoji(status: str) -> str:
    if status == OK:
        return "✅"
    if status.startswith("error"):
        return "❌"
    return "❓"


def format_field(component: str, previous: str, current: str) -> str:
    """Render one report line, with an arrow when the value changed."""
    if previous != current:
        return (
            f"**{component}:** {_status_emoji(previous)} {previous} ➡️ "
            f"{_status_emoji(current)} {current}"
        )
    return f"**{component}:** {_status_emoji(current)} {current}"


def build_health_update(previous: HealthReport, current: HealthReport) -> str:
    return get_message(
        "health_update",
        "discord_channel",
        {
            "database": format_field("Database", previous.database, current.database),
            "notifier": format_field("Notifier", previous.notifier, current.notifier),
            "audit": format_field("Audit", previous.audit, current.audit),
            "bot": format_field("Bot", previous.bot, current.bot),
        },
    )


class HealthMonitor:
    """Remembers the last report so only changes are announced."""

    def __init__(self, signals: HealthSignals):
        self.signals = signals
        self.previous = HealthReport()

    async def run_cycle(self) -> HealthReport:
        """
        Probe, check and announce. Called by the scheduler.

        Returns:
            The report computed this cycle
        """
        try:
            await self.signals.canary.probe()
        except Exception as e:
            # probe() handles transport and queue errors itself
            logger.error(f"Bot health check probe crashed: {e}")
            sentry_sdk.capture_exception(e)

        current = await check_health(self.signals)
        if current == self.previous:
            logger.debug(f"Health status unchanged: {current}")
            return current

        logger.info(f"Health status changed: {self.previous} -> {current}")
        try:
            await dispatch(
                NotificationCategory.system,
                build_health_update(self.previous, current),
                transport=self.signals.transport,
            )
        except Exception as e:
            logger.error(f"Failed to send health notification: {e}")
            sentry_sdk.capture_exception(e)

        self.previous = current
        return current
