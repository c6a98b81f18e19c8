"""
Roster Bot - Discord bot.

The bot is created by the unified entry point (root main.py) and started
alongside FastAPI. Errors raised while handling inbound events are logged
and flip the shared liveness flag, which the health report reads.
"""

import logging
import os

import discord
from discord import app_commands
from discord.ext import commands

from core.health.flags import LivenessFlag

logger = logging.getLogger(__name__)


# List of cogs to load (thin adapters, business logic in core/)
COGS = [
    "discord_bot.cogs.status_cog",
    "discord_bot.cogs.notify_cog",
]


class RosterCommandTree(app_commands.CommandTree):
    """Command tree whose error hook feeds the liveness flag."""

    async def on_error(
        self, interaction: discord.Interaction, error: app_commands.AppCommandError
    ) -> None:
        if isinstance(error, app_commands.MissingPermissions):
            msg = f"❌ You need **{', '.join(error.missing_permissions)}** permission(s) to use this command."
        elif isinstance(error, app_commands.CheckFailure):
            msg = "❌ This command can't be used here."
        elif isinstance(error, app_commands.TransformerError):
            msg = f"❌ `{error.value}` isn't a valid value for that option."
        else:
            logger.exception(
                f"Error handling /{interaction.command.name if interaction.command else '?'}",
                exc_info=error,
            )
            self.client.liveness.mark_unhealthy()
            msg = "❌ Something went wrong handling that command."

        try:
            if interaction.response.is_done():
                await interaction.followup.send(msg, ephemeral=True)
            else:
                await interaction.response.send_message(msg, ephemeral=True)
        except discord.HTTPException as e:
            logger.error(f"Failed to report command error to user: {e}")


class RosterBot(commands.Bot):
    """commands.Bot wired to a LivenessFlag."""

    def __init__(self, liveness: LivenessFlag, **kwargs):
        intents = discord.Intents.default()
        super().__init__(
            command_prefix="!",
            intents=intents,
            tree_cls=RosterCommandTree,
            **kwargs,
        )
        self.liveness = liveness
        # Set by main.py once the health signals are built
        self.health_signals = None

    async def setup_hook(self) -> None:
        for cog in COGS:
            try:
                await self.load_extension(cog)
                print(f"  ✓ Loaded {cog}")
            except commands.ExtensionError as e:
                print(f"  ✗ Error loading {cog}: {e}")
                logger.exception(f"Failed to load {cog}")

    async def on_ready(self) -> None:
        """Called when the bot is ready and connected to Discord."""
        print(f"Bot is ready! Logged in as {self.user}")

        # Sync slash commands with Discord
        try:
            synced = await self.tree.sync()
            print(f"\nSynced {len(synced)} command(s):")
            for cmd in self.tree.get_commands():
                print(f"  /{cmd.name}")
        except discord.HTTPException as e:
            print(f"Error syncing commands: {e}")
            logger.exception("Failed to sync application commands")

    async def on_error(self, event_method: str, *args, **kwargs) -> None:
        """Any unhandled exception in an event listener marks the bot unhealthy."""
        logger.exception(f"Unhandled exception in {event_method}")
        self.liveness.mark_unhealthy()


def create_bot(liveness: LivenessFlag) -> RosterBot:
    """Create and configure the bot instance."""
    return RosterBot(liveness)


def main():
    """Run the bot on its own, without the web server or background jobs."""
    from dotenv import load_dotenv

    load_dotenv()

    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        print("Error: DISCORD_BOT_TOKEN environment variable not set!")
        print("Set it in your .env file or with: export DISCORD_BOT_TOKEN=your_token_here")
        raise SystemExit(1)

    create_bot(LivenessFlag()).run(token)


if __name__ == "__main__":
    main()
