# core/discord_outbound/__init__.py
"""Discord outbound operations - all Discord API calls go through here."""

from .bot import get_bot, get_dm_semaphore, get_transport, set_bot
from .channels import get_or_fetch_channel
from .messages import send_dm
from .transport import DiscordTransport, Transport

__all__ = [
    "set_bot",
    "get_bot",
    "get_dm_semaphore",
    "get_transport",
    "send_dm",
    "get_or_fetch_channel",
    "Transport",
    "DiscordTransport",
]
