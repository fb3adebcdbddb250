"""Custom exception hierarchy for pyremotepad."""

from __future__ import annotations

from typing import Any


class RemotePadError(Exception):
    """Base exception for all pyremotepad errors."""


class RemotePadConfigError(RemotePadError):
    """Invalid or missing configuration."""


class CommandDecodeError(RemotePadError):
    """A transport payload could not be decoded into a command.

    Transports always absorb this error: the offending command is logged
    and dropped, and the listener keeps running.
    """

    def __init__(
        self,
        message: str,
        *,
        source: str = "",
        raw: Any = None,
    ) -> None:
        self.source = source
        self.raw = raw
        super().__init__(message)


class TransportStartError(RemotePadError):
    """A transport could not bind, listen, or connect."""

    def __init__(
        self,
        message: str,
        *,
        transport: str = "",
        address: str = "",
    ) -> None:
        self.transport = transport
        self.address = address
        super().__init__(message)
