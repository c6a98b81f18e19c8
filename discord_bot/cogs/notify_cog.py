"""
Notify Cog - per-channel notification settings.

Thin adapter over core.notifications.settings. Every change is announced to
the other channels subscribed to SYSTEM notifications.
"""

import logging

import discord
from discord import app_commands
from discord.ext import commands

from core.enums import NotificationCategory
from core.errors import StorageError
from core.notifications.dispatcher import dispatch
from core.notifications.settings import (
    NotificationSettings,
    get_settings,
    invalidate_settings,
    upsert_settings,
)
from core.notifications.templates import get_message

logger = logging.getLogger(__name__)


def format_settings(settings: NotificationSettings) -> str:
    """One line per category with its on/off state."""
    return "\n".join(
        f"- {category.label}: {'🟢 **ON**' if settings.is_enabled(category) else '🔴 **OFF**'}"
        for category in NotificationCategory
    )


class NotifyCog(commands.Cog):
    """Commands for viewing and changing a channel's notification settings."""

    notify = app_commands.Group(
        name="notify",
        description="Notification settings for this channel",
        guild_only=True,
        default_permissions=discord.Permissions(manage_channels=True),
    )

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @notify.command(name="show", description="Show this channel's notification settings")
    async def show(self, interaction: discord.Interaction):
        try:
            settings = await get_settings(interaction.channel_id)
        except StorageError:
            await interaction.response.send_message(
                "Failed to retrieve notification settings.", ephemeral=True
            )
            return

        if settings is None:
            await interaction.response.send_message(
                "Notifications are not set up for this channel.", ephemeral=True
            )
            return

        await interaction.response.send_message(
            f"Notification settings for <#{interaction.channel_id}>:\n{format_settings(settings)}",
            ephemeral=True,
        )

    @notify.command(name="set", description="Turn one notification category on or off")
    @app_commands.describe(
        category="Which notifications to change",
        enabled="Whether this channel should receive them",
    )
    async def set_category(
        self,
        interaction: discord.Interaction,
        category: NotificationCategory,
        enabled: bool,
    ):
        await interaction.response.defer(ephemeral=True)
        chat_id = interaction.channel_id
        try:
            settings = await upsert_settings(chat_id, **{category.value: enabled})
        except StorageError:
            await interaction.followup.send(
                "Failed to update notification settings.", ephemeral=True
            )
            return

        summary = format_settings(settings)
        await interaction.followup.send(
            f"Updated notification settings for <#{chat_id}>:\n{summary}", ephemeral=True
        )

        message = get_message(
            "settings_updated",
            "discord_channel",
            {"actor": interaction.user.mention, "chat_id": chat_id, "settings": summary},
        )
        await dispatch(NotificationCategory.system, message, exclude=chat_id)

    @notify.command(name="off", description="Disable all notifications for this channel")
    async def off(self, interaction: discord.Interaction):
        await interaction.response.defer(ephemeral=True)
        chat_id = interaction.channel_id
        try:
            removed = await invalidate_settings(chat_id)
        except StorageError:
            await interaction.followup.send(
                "Failed to disable notifications.", ephemeral=True
            )
            return

        if not removed:
            await interaction.followup.send(
                "Notifications are already disabled for this channel.", ephemeral=True
            )
            return

        await interaction.followup.send("Notifications disabled", ephemeral=True)
        message = get_message(
            "settings_disabled",
            "discord_channel",
            {"actor": interaction.user.mention, "chat_id": chat_id},
        )
        await dispatch(NotificationCategory.system, message, exclude=chat_id)


async def setup(bot: commands.Bot):
    await bot.add_cog(NotifyCog(bot))
