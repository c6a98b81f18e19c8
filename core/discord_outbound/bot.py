# core/discord_outbound/bot.py
import asyncio

from discord import Client

_bot: Client | None = None
_dm_semaphore: asyncio.Semaphore | None = None


def set_bot(bot: Client | None) -> None:
    """Set the Discord bot instance. Called by main.py on startup."""
    global _bot, _dm_semaphore
    _bot = bot
    _dm_semaphore = asyncio.Semaphore(1) if bot is not None else None


def get_bot() -> Client | None:
    """Get the Discord bot instance."""
    return _bot


def get_dm_semaphore() -> asyncio.Semaphore | None:
    """Get the DM rate limit semaphore."""
    return _dm_semaphore


def get_transport():
    """Get a transport over the registered bot, or None if no bot is set."""
    from .transport import DiscordTransport

    if _bot is None:
        return None
    return DiscordTransport(_bot)
