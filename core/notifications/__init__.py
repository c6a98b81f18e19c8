"""
Notification system for channel broadcasts and reminder DMs.

Public API:
    dispatch(category, message) - Broadcast to every subscribed channel
    get_settings / upsert_settings / invalidate_settings - Per-channel preferences
    init_scheduler / register_jobs / shutdown_scheduler - Background jobs
"""

from .dispatcher import DeliveryOutcome, dispatch, fan_out
from .scheduler import (
    init_scheduler,
    register_jobs,
    shutdown_scheduler,
)
from .settings import (
    NotificationSettings,
    get_settings,
    invalidate_settings,
    list_enabled_destinations,
    upsert_settings,
)

__all__ = [
    # Broadcasts
    "dispatch",
    "fan_out",
    "DeliveryOutcome",
    # Preferences
    "NotificationSettings",
    "get_settings",
    "upsert_settings",
    "invalidate_settings",
    "list_enabled_destinations",
    # Scheduling
    "init_scheduler",
    "register_jobs",
    "shutdown_scheduler",
]
