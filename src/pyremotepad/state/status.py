"""Per-transport connection telemetry.

Advisory only: nothing in the merge policy reads it. Transports update it
from their own threads, displays read snapshots from the tick thread.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ConnectionSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    transport: str
    running: bool = False
    address: str | None = None
    error: str | None = None
    connected_clients: int = 0
    last_seen: datetime | None = None

    def describe(self) -> str:
        if self.error and not self.running:
            return f"{self.transport}: failed ({self.error})"
        if not self.running:
            return f"{self.transport}: stopped"
        seen = self.last_seen.strftime("%H:%M:%S") if self.last_seen else "never"
        return f"{self.transport}: {self.address} clients={self.connected_clients} last={seen}"


class ConnectionStatus:
    """Thread-safe, mutable status of one transport."""

    def __init__(self, transport: str, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._transport = transport
        self._clock = clock
        self._lock = threading.Lock()
        self._running = False
        self._address: str | None = None
        self._error: str | None = None
        self._connected_clients = 0
        self._last_seen: datetime | None = None

    @property
    def transport(self) -> str:
        return self._transport

    def mark_started(self, address: str, *, note: str | None = None) -> None:
        with self._lock:
            self._running = True
            self._address = address
            self._error = note

    def mark_stopped(self) -> None:
        with self._lock:
            self._running = False

    def mark_failed(self, error: str) -> None:
        with self._lock:
            self._running = False
            self._error = error

    def client_connected(self) -> int:
        """Count a new client. The counter never decreases."""
        with self._lock:
            self._connected_clients += 1
            self._last_seen = self._clock()
            return self._connected_clients

    def mark_seen(self) -> None:
        with self._lock:
            self._last_seen = self._clock()

    def snapshot(self) -> ConnectionSnapshot:
        with self._lock:
            return ConnectionSnapshot(
                transport=self._transport,
                running=self._running,
                address=self._address,
                error=self._error,
                connected_clients=self._connected_clients,
                last_seen=self._last_seen,
            )
