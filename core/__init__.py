"""
Core business logic - platform-agnostic.
Used by the Discord bot, the web API and the background jobs.
"""

# Database (SQLAlchemy)
from .database import get_connection, get_transaction, get_engine, close_engine, ping

# Errors
from .errors import ConfigurationError, StorageError, TransportError, ConsistencyError

# Enums
from .enums import NotificationCategory, UserType, IctType

__all__ = [
    # Database (SQLAlchemy)
    'get_connection', 'get_transaction', 'get_engine', 'close_engine', 'ping',
    # Errors
    'ConfigurationError', 'StorageError', 'TransportError', 'ConsistencyError',
    # Enums
    'NotificationCategory', 'UserType', 'IctType',
]
