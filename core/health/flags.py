"""
Lock-guarded boolean status cells.

A StatusFlag is created once in main.py and handed to whoever writes it
(bot error hooks, periodic tasks) and to the health aggregator that reads
it. Critical sections are a single read or write; the lock is never held
across an await.
"""

import threading


class StatusFlag:
    """A boolean health signal shared between one writer and the aggregator."""

    def __init__(self, name: str, healthy: bool = True):
        self.name = name
        self._healthy = healthy
        self._lock = threading.Lock()

    def is_healthy(self) -> bool:
        with self._lock:
            return self._healthy

    def set(self, healthy: bool) -> None:
        with self._lock:
            self._healthy = healthy

    def __repr__(self) -> str:
        return f"StatusFlag({self.name!r}, healthy={self.is_healthy()})"


class LivenessFlag(StatusFlag):
    """
    Health of the inbound event listener.

    Starts healthy and only ever flips to unhealthy; a process restart is the
    only way back.
    """

    def __init__(self):
        super().__init__("bot", healthy=True)

    def mark_unhealthy(self) -> None:
        self.set(False)
