"""
Centralized configuration for the roster bot.

All settings come from environment variables (optionally loaded from
.env / .env.local by main.py). Required values raise ConfigurationError,
which aborts startup.
"""

import logging
import os

import pytz

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_MAX_DB_CONNECTIONS = 5

_TRUTHY = ("true", "1", "yes")


def is_dev_mode() -> bool:
    """Check if running in development mode (DEV_MODE env)."""
    return os.getenv("DEV_MODE", "").lower() in _TRUTHY


def get_api_port() -> int:
    """Get health/API server port from env or default."""
    return int(os.getenv("API_PORT", "8080"))


def get_database_url() -> str:
    """
    Get the database connection string.

    Raises:
        ConfigurationError: If DATABASE_URL is not set
    """
    database_url = os.environ.get("DATABASE_URL")
    if not database_url:
        raise ConfigurationError("DATABASE_URL environment variable must be set")
    return database_url


def get_max_db_connections() -> int:
    """
    Get the connection pool size.

    Defaults to 5 when MAX_DB_CONNECTIONS is unset.

    Raises:
        ConfigurationError: If MAX_DB_CONNECTIONS is not a positive integer
    """
    raw = os.environ.get("MAX_DB_CONNECTIONS")
    if raw is None or raw.strip() == "":
        logger.warning(
            f"MAX_DB_CONNECTIONS is not set, using default of {DEFAULT_MAX_DB_CONNECTIONS}"
        )
        return DEFAULT_MAX_DB_CONNECTIONS

    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"Invalid MAX_DB_CONNECTIONS value: {raw!r}") from None

    if value < 1:
        raise ConfigurationError(f"MAX_DB_CONNECTIONS must be at least 1, got {value}")
    return value


def is_health_check_enabled() -> bool:
    """Feature flag for the health-check canary. On unless explicitly disabled."""
    return os.getenv("HEALTH_CHECK_ENABLED", "true").lower() in _TRUTHY


def get_health_check_channel_id() -> int | None:
    """
    Get the channel the health-check canary posts to.

    Returns None when unset or unparsable; either way the canary stays disabled.
    """
    raw = os.environ.get("HEALTH_CHECK_CHANNEL_ID")
    if not raw:
        logger.warning("HEALTH_CHECK_CHANNEL_ID is not set, bot health check will be inactive")
        return None

    try:
        return int(raw)
    except ValueError:
        logger.error(f"Invalid HEALTH_CHECK_CHANNEL_ID value: {raw}")
        return None


def get_app_timezone() -> pytz.BaseTzInfo:
    """Timezone used for probe timecodes and reminder dates. Falls back to UTC."""
    tz_name = os.environ.get("TIMEZONE")
    if tz_name:
        try:
            return pytz.timezone(tz_name)
        except pytz.UnknownTimeZoneError:
            logger.warning(f"Invalid TIMEZONE provided: {tz_name}, falling back to UTC")
    return pytz.UTC


# Required environment variables
# Format: (name, description, required_in_dev)
REQUIRED_ENV_VARS = [
    ("DATABASE_URL", "PostgreSQL connection string", True),
    ("DISCORD_BOT_TOKEN", "Discord bot token", False),
]


def check_required_env_vars() -> tuple[bool, list[str]]:
    """
    Check that required environment variables are set.

    Returns:
        (all_ok, warnings): Tuple of success flag and list of warning messages
    """
    warnings = []
    errors = []
    in_dev = is_dev_mode()

    for name, description, required_in_dev in REQUIRED_ENV_VARS:
        if os.environ.get(name):
            continue
        if required_in_dev or not in_dev:
            errors.append(f"  ✗ {name}: Not set ({description})")
        else:
            warnings.append(f"  ⚠ {name}: Not set ({description})")

    if errors:
        for error in errors:
            print(error)
        return False, warnings

    return True, warnings
