"""
APScheduler-based job scheduler for the periodic background tasks.

Jobs call into objects that only live in this process (status flags, the
canary, the bot transport), so they are kept in the in-memory job store and
re-registered on every startup.
"""

import logging
from typing import Awaitable, Callable

from apscheduler.schedulers.asyncio import AsyncIOScheduler

logger = logging.getLogger(__name__)


_scheduler: AsyncIOScheduler | None = None


# =============================================================================
# Job configuration - SINGLE SOURCE OF TRUTH
# =============================================================================

JOB_CONFIG = {
    "health_probe": {"seconds": 120},
    "scheduled_reminders": {"seconds": 60},
    "audit": {"seconds": 3600},
}


# =============================================================================
# Scheduler initialization and shutdown
# =============================================================================


def init_scheduler() -> AsyncIOScheduler:
    """
    Initialize and start the APScheduler.

    Call this during app startup (in FastAPI lifespan), from inside the
    running event loop.
    """
    global _scheduler

    if _scheduler is not None:
        return _scheduler

    _scheduler = AsyncIOScheduler(
        job_defaults={
            "coalesce": True,  # Combine missed runs into one
            "max_instances": 1,  # A job never overlaps itself
            "misfire_grace_time": 60,
        },
    )
    _scheduler.start()
    print("Job scheduler started")

    return _scheduler


def get_scheduler() -> AsyncIOScheduler | None:
    return _scheduler


def shutdown_scheduler() -> None:
    """
    Shutdown the scheduler gracefully.

    Call this during app shutdown.
    """
    global _scheduler
    if _scheduler:
        _scheduler.shutdown(wait=False)
        _scheduler = None
        print("Job scheduler stopped")


# =============================================================================
# Job registration
# =============================================================================


def schedule_periodic(job_id: str, func: Callable[..., Awaitable[None]], **kwargs) -> None:
    """
    Register (or replace) one of the JOB_CONFIG jobs.

    Args:
        job_id: Key in JOB_CONFIG
        func: Coroutine function the job runs
        kwargs: Keyword arguments passed to func on every run
    """
    if not _scheduler:
        logger.warning(f"Scheduler not initialized, cannot schedule {job_id}")
        return

    config = JOB_CONFIG[job_id]
    _scheduler.add_job(
        func,
        trigger="interval",
        seconds=config["seconds"],
        id=job_id,
        replace_existing=True,
        kwargs=kwargs,
    )
    logger.info(f"Scheduled {job_id} every {config['seconds']}s")


def register_jobs(monitor, notifier_flag, audit_flag) -> None:
    """
    Register the three background jobs.

    Args:
        monitor: HealthMonitor whose run_cycle() is the health probe job
        notifier_flag: StatusFlag written by the reminder job
        audit_flag: StatusFlag written by the audit job
    """
    from core.health.audit import run_audit
    from core.notifications.reminders import run_scheduled_reminders

    schedule_periodic("health_probe", monitor.run_cycle)
    schedule_periodic(
        "scheduled_reminders", run_scheduled_reminders, notifier_flag=notifier_flag
    )
    schedule_periodic("audit", run_audit, audit_flag=audit_flag)
