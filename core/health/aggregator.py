"""
Composite health report.

check_health() looks at four independent signals and reports each one
separately. Every check has its own error handling, so one failing check
cannot hide or corrupt another. Nothing here mutates the signals.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Awaitable, Callable

from core import database
from core.discord_outbound import Transport
from core.health.canary import HealthCheckCanary
from core.health.flags import LivenessFlag, StatusFlag

logger = logging.getLogger(__name__)

OK = "ok"


def error_status(description: str) -> str:
    return f"error: {description}"


@dataclass
class HealthReport:
    """Per-subsystem status, each either "ok" or "error: <description>"."""

    database: str = OK
    notifier: str = OK
    audit: str = OK
    bot: str = OK

    @property
    def is_healthy(self) -> bool:
        return all(value == OK for value in asdict(self).values())

    @property
    def status_code(self) -> int:
        return 200 if self.is_healthy else 503

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass
class HealthSignals:
    """Everything the aggregator reads. Built once at startup."""

    liveness: LivenessFlag
    notifier: StatusFlag
    audit: StatusFlag
    canary: HealthCheckCanary
    transport: Transport | None = None
    ping: Callable[[], Awaitable[None]] | None = None


async def _check_database(signals: HealthSignals) -> str:
    ping = signals.ping or database.ping
    try:
        await ping()
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return error_status(str(e) or type(e).__name__)
    return OK


def _check_notifier(signals: HealthSignals) -> str:
    try:
        if signals.transport is None or not signals.transport.is_ready():
            return error_status("bot transport not connected")
        if not signals.notifier.is_healthy():
            return error_status("scheduled reminder run failed")
    except Exception as e:
        logger.error(f"Notifier health check failed: {e}")
        return error_status(str(e) or type(e).__name__)
    return OK


def _check_audit(signals: HealthSignals) -> str:
    try:
        if not signals.audit.is_healthy():
            return error_status("audit run failed")
    except Exception as e:
        logger.error(f"Audit health check failed: {e}")
        return error_status(str(e) or type(e).__name__)
    return OK


def _check_bot(signals: HealthSignals) -> str:
    try:
        if not signals.liveness.is_healthy():
            return error_status("update listener reported an error")
        if signals.canary.last_result is False:
            return error_status("health check probe failed")
    except Exception as e:
        logger.error(f"Bot health check failed: {e}")
        return error_status(str(e) or type(e).__name__)
    return OK


async def check_health(signals: HealthSignals) -> HealthReport:
    """Snapshot all four subsystems."""
    return HealthReport(
        database=await _check_database(signals),
        notifier=_check_notifier(signals),
        audit=_check_audit(signals),
        bot=_check_bot(signals),
    )
