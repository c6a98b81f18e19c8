# core/discord_outbound/messages.py
import asyncio
import logging

import discord

from .bot import get_bot, get_dm_semaphore

logger = logging.getLogger(__name__)


async def send_dm(discord_id: str, message: str) -> bool:
    """Send a DM to a user. Rate-limited to ~1/second."""
    bot = get_bot()
    if not bot:
        logger.warning("Discord bot not configured, cannot send DM")
        return False
    try:
        semaphore = get_dm_semaphore()
        if semaphore:
            async with semaphore:
                user = await bot.fetch_user(int(discord_id))
                await user.send(message)
                await asyncio.sleep(1)
        else:
            user = await bot.fetch_user(int(discord_id))
            await user.send(message)
        return True
    except (discord.HTTPException, ValueError) as e:
        logger.error(f"Failed to send DM to {discord_id}: {e}")
        return False
