"""Error types shared across the notification and health subsystems."""


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid. Fatal at startup."""

    pass


class StorageError(Exception):
    """Raised when a database read or write fails. Not retried here."""

    pass


class TransportError(Exception):
    """Raised when the chat transport fails to send or delete a message."""

    pass


class ConsistencyError(Exception):
    """Raised when the health probe queue breaks its capacity invariant."""

    pass
