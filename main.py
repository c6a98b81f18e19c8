"""
Unified backend entry point.

Architecture:
- One Python process, one asyncio event loop
- Three peer services running concurrently:
  1. FastAPI (HTTP server exposing /health)
  2. Discord bot (WebSocket connection to Discord)
  3. APScheduler jobs (health probe, scheduled reminders, audit)

We use FastAPI's lifespan to manage startup/shutdown, but at runtime
all services are equal peers in the event loop. The lifespan pattern
gives us uvicorn's signal handling for free.

Run with: python main.py [--no-bot] [--port PORT]
"""

import asyncio
import logging
import os
import sys
from contextlib import asynccontextmanager
from pathlib import Path

# Set up import paths before any local imports
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv

# Load .env.local first (if exists), then .env as fallback
# .env.local is gitignored and used for local dev overrides
load_dotenv(project_root / ".env.local")  # Local overrides (gitignored)
load_dotenv()  # Fallback to .env

import sentry_sdk
from fastapi import FastAPI

from core.config import (
    check_required_env_vars,
    get_api_port,
    get_app_timezone,
    get_health_check_channel_id,
    is_health_check_enabled,
)
from core.database import close_engine, get_engine, ping
from core.discord_outbound import DiscordTransport, set_bot
from core.errors import ConfigurationError
from core.health import (
    HealthCheckCanary,
    HealthMonitor,
    HealthSignals,
    LivenessFlag,
    StatusFlag,
)
from core.notifications import init_scheduler, register_jobs, shutdown_scheduler
from discord_bot.main import RosterBot, create_bot
from web_api.routes.health import router as health_router

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

SENTRY_DSN = os.getenv("SENTRY_DSN")
if SENTRY_DSN:
    sentry_sdk.init(dsn=SENTRY_DSN, environment=os.getenv("SENTRY_ENVIRONMENT", "production"))

# Track bot tasks for cleanup
_bot_task: asyncio.Task | None = None
_verify_task: asyncio.Task | None = None


def is_bot_disabled() -> bool:
    return os.getenv("DISABLE_DISCORD_BOT", "").lower() in ("true", "1", "yes")


async def start_bot(bot: RosterBot):
    """
    Start Discord bot (non-blocking).

    Uses bot.start() instead of bot.run() so it can run
    alongside FastAPI in the same event loop.
    """
    token = os.getenv("DISCORD_BOT_TOKEN")
    try:
        await bot.start(token)
    except Exception as e:
        print(f"Discord bot error: {e}")
        bot.liveness.mark_unhealthy()
        sentry_sdk.capture_exception(e)
        raise


async def stop_bot(bot: RosterBot | None):
    """Stop Discord bot gracefully."""
    if bot and not bot.is_closed():
        await bot.close()
        print("Discord bot stopped")


async def verify_canary_when_ready(bot: RosterBot, canary: HealthCheckCanary):
    """Check the probe channel once the bot has connected."""
    await bot.wait_until_ready()
    await canary.verify_destination()


def build_health_signals(bot: RosterBot | None) -> HealthSignals:
    """Create the status flags and canary that the health report reads."""
    transport = DiscordTransport(bot) if bot else None
    canary = HealthCheckCanary(
        transport,
        get_health_check_channel_id(),
        enabled=is_health_check_enabled() and bot is not None,
        tz=get_app_timezone(),
    )
    return HealthSignals(
        liveness=bot.liveness if bot else LivenessFlag(),
        notifier=StatusFlag("notifier"),
        audit=StatusFlag("audit"),
        canary=canary,
        transport=transport,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan context manager.

    Validates configuration, then starts the Discord bot and the job
    scheduler as peers of FastAPI in the same event loop.
    """
    global _bot_task, _verify_task

    ok, warnings = check_required_env_vars()
    for warning in warnings:
        print(warning)
    if not ok:
        raise ConfigurationError("Missing required environment variables")

    # Fatal if the database is unreachable at startup
    get_engine()
    try:
        await ping()
    except Exception as e:
        raise ConfigurationError(f"Failed to connect to the database: {e}") from e
    print("Database connection verified")

    bot = None
    if is_bot_disabled():
        print("Discord bot disabled (--no-bot flag or DISABLE_DISCORD_BOT=true)")
    elif not os.getenv("DISCORD_BOT_TOKEN"):
        print("Warning: DISCORD_BOT_TOKEN not set, Discord bot will not start")
    else:
        bot = create_bot(LivenessFlag())
        set_bot(bot)

    signals = build_health_signals(bot)
    app.state.health_signals = signals

    if bot:
        bot.health_signals = signals
        print("Starting Discord bot...")
        _bot_task = asyncio.create_task(start_bot(bot))
        if signals.canary.enabled:
            _verify_task = asyncio.create_task(verify_canary_when_ready(bot, signals.canary))

    init_scheduler()
    register_jobs(HealthMonitor(signals), signals.notifier, signals.audit)

    yield  # FastAPI runs here, bot and jobs run alongside it

    # Graceful shutdown of all peer services
    print("Shutting down peer services...")
    shutdown_scheduler()
    await stop_bot(bot)
    set_bot(None)
    for task in (_verify_task, _bot_task):
        if task:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.error(f"Background task ended with error: {e}")
    await close_engine()  # Close database connections


# Create FastAPI app with lifespan
app = FastAPI(
    title="Roster Bot API",
    lifespan=lifespan,
)

# Include routers
app.include_router(health_router)


if __name__ == "__main__":
    import argparse
    import uvicorn

    parser = argparse.ArgumentParser(description="Roster Bot Server")
    parser.add_argument(
        "--no-bot",
        action="store_true",
        help="Disable Discord bot (useful for running multiple dev servers)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=get_api_port(),
        help="Port to run the server on (default: API_PORT or 8080)",
    )
    args = parser.parse_args()

    # Set env var so it persists across uvicorn reloads
    if args.no_bot:
        os.environ["DISABLE_DISCORD_BOT"] = "true"

    # Pass app object directly (not string) to avoid module reimport issues
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=args.port,
    )
