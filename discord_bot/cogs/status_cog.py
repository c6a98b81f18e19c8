"""
Simple commands to check the bot is online and see the health report.
"""

import discord
from discord import app_commands
from discord.ext import commands

from core.health.aggregator import check_health
from core.health.monitor import format_field


class StatusCog(commands.Cog):
    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @app_commands.command(name="ping", description="Check if the bot is online")
    async def ping(self, interaction: discord.Interaction):
        latency = round(self.bot.latency * 1000)
        await interaction.response.send_message(f"Pong! Latency: {latency}ms")

    @app_commands.command(name="status", description="Show the current health report")
    async def status(self, interaction: discord.Interaction):
        signals = getattr(self.bot, "health_signals", None)
        if signals is None:
            await interaction.response.send_message(
                "Health monitoring is not running.", ephemeral=True
            )
            return

        await interaction.response.defer(ephemeral=True)
        report = await check_health(signals)
        lines = [
            format_field(name.capitalize(), value, value)
            for name, value in report.to_dict().items()
        ]
        await interaction.followup.send(
            "**Health Check**\n\n" + "\n".join(lines), ephemeral=True
        )


async def setup(bot: commands.Bot):
    await bot.add_cog(StatusCog(bot))
