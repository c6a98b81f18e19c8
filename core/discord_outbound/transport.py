"""
Outbound chat transport.

Everything in the notification and health subsystems talks to Discord
through the Transport protocol, so tests can substitute a fake and the
core never touches discord.py objects directly.
"""

import asyncio
import logging
from typing import Protocol

import aiohttp
import discord

from core.errors import TransportError

from .channels import get_or_fetch_channel

logger = logging.getLogger(__name__)

# discord.py raises HTTPException for API errors but lets connection-level
# failures from aiohttp through unchanged
DISCORD_ERRORS = (discord.HTTPException, aiohttp.ClientError, OSError, asyncio.TimeoutError)


class Transport(Protocol):
    """Minimal send/delete surface of the chat transport."""

    async def send(self, destination: int, text: str, **format_options) -> int:
        """Send text to a destination and return the new message id."""
        ...

    async def delete(self, destination: int, message_id: int) -> None:
        """Delete a previously sent message."""
        ...

    def is_ready(self) -> bool:
        """Whether the transport is currently connected."""
        ...

    async def verify_destination(self, destination: int) -> bool:
        """Whether the destination exists and is reachable."""
        ...


class DiscordTransport:
    """Transport backed by a discord.py client. Destinations are channel ids."""

    def __init__(self, client: discord.Client):
        self.client = client

    async def _channel(self, destination: int):
        try:
            channel = await get_or_fetch_channel(self.client, destination)
        except DISCORD_ERRORS as e:
            raise TransportError(f"Could not fetch channel {destination}: {e}") from e
        if channel is None:
            raise TransportError(f"Channel {destination} not found")
        return channel

    async def send(self, destination: int, text: str, **format_options) -> int:
        channel = await self._channel(destination)
        try:
            message = await channel.send(text, **format_options)
        except DISCORD_ERRORS as e:
            raise TransportError(f"Failed to send to channel {destination}: {e}") from e
        return message.id

    async def delete(self, destination: int, message_id: int) -> None:
        channel = await self._channel(destination)
        try:
            await channel.get_partial_message(message_id).delete()
        except DISCORD_ERRORS as e:
            raise TransportError(
                f"Failed to delete message {message_id} in channel {destination}: {e}"
            ) from e

    def is_ready(self) -> bool:
        return self.client.is_ready() and not self.client.is_closed()

    async def verify_destination(self, destination: int) -> bool:
        try:
            await self._channel(destination)
        except TransportError as e:
            logger.error(f"Unable to reach channel {destination}: {e}")
            return False
        return True
