"""
Health-check canary.

Every probe cycle posts a timestamped message to a dedicated channel and
keeps the ids of the last PROBE_WINDOW probes. Once the window is full,
each new probe evicts the oldest id and that message is deleted, so the
queue never holds more than PROBE_WINDOW ids. A failed send, or a failed
cleanup delete, marks the cycle unhealthy.

probe() returns:
    True  - healthy cycle
    False - unhealthy cycle
    None  - canary disabled, no status change
"""

import asyncio
import logging
from collections import deque
from datetime import datetime

import pytz

from core.discord_outbound import Transport
from core.errors import ConsistencyError, TransportError
from core.notifications.templates import get_message

logger = logging.getLogger(__name__)

PROBE_WINDOW = 10
TIMECODE_FORMAT = "%Y%m%d%H%M%S"


class HealthCheckCanary:
    """Owns the probe message queue. Nothing else reads or writes it."""

    def __init__(
        self,
        transport: Transport | None,
        destination: int | None,
        enabled: bool = True,
        tz: pytz.BaseTzInfo = pytz.UTC,
        capacity: int = PROBE_WINDOW,
    ):
        self.transport = transport
        self.destination = destination
        self.enabled = enabled and destination is not None
        self.tz = tz
        self.capacity = capacity
        self.last_result: bool | None = None
        self._sent: deque[int] = deque()
        self._lock = asyncio.Lock()

    @property
    def outstanding(self) -> list[int]:
        """Ids of probe messages not yet cleaned up, oldest first."""
        return list(self._sent)

    def disable(self, reason: str) -> None:
        logger.warning(f"Bot health check disabled: {reason}")
        self.enabled = False

    async def verify_destination(self) -> bool:
        """Check the probe channel is reachable; disable the canary if not."""
        if not self.enabled:
            return False
        if not await self.transport.verify_destination(self.destination):
            self.disable(
                f"unable to reach channel {self.destination}, "
                "make sure the bot has been added to it"
            )
            return False
        logger.info(f"Health check channel {self.destination} verified, canary active")
        return True

    def _timecode(self) -> str:
        return datetime.now(self.tz).strftime(TIMECODE_FORMAT)

    async def probe(self) -> bool | None:
        """Run one probe cycle. Cycles never interleave."""
        if not self.enabled or self.transport is None:
            return None

        async with self._lock:
            try:
                result = await self._probe_once()
            except Exception:
                self.last_result = False
                raise
            self.last_result = result
            return result

    async def _probe_once(self) -> bool:
        timecode = self._timecode()
        text = get_message("health_probe", "discord_channel", {"timecode": timecode})

        try:
            message_id = await self.transport.send(self.destination, text, silent=True)
        except TransportError as e:
            logger.error(f"Failed to send bot health check message: {e}")
            return False

        logger.debug(
            f"Bot health check message sent to channel {self.destination}: "
            f"message id {message_id}, timecode {timecode}"
        )
        if len(self._sent) < self.capacity:
            self._sent.append(message_id)
            return True

        # Window full: the new probe replaces the oldest one
        try:
            oldest = self._pop_oldest()
        except ConsistencyError as e:
            self._sent.append(message_id)
            logger.error(f"Error retrieving old health check messages: {e}")
            return False
        self._sent.append(message_id)

        try:
            await self.transport.delete(self.destination, oldest)
        except TransportError as e:
            logger.error(f"Failed to delete old bot health check message: {e}")
            return False

        return True

    def _pop_oldest(self) -> int:
        try:
            return self._sent.popleft()
        except IndexError:
            raise ConsistencyError(
                f"probe queue reported {len(self._sent)} entries but was empty"
            ) from None
