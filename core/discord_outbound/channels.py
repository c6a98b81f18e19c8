# core/discord_outbound/channels.py
import discord


async def get_or_fetch_channel(
    bot: discord.Client,
    channel_id: int,
) -> discord.abc.Messageable | None:
    """Get channel from cache or fetch from API."""
    channel = bot.get_channel(channel_id)
    if channel:
        return channel
    try:
        return await bot.fetch_channel(channel_id)
    except discord.NotFound:
        return None
