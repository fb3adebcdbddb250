"""Composition root wiring transports, queue and merge state together."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any, Protocol

from pyremotepad._http_server import HttpControlServer
from pyremotepad._socket_server import SocketCommandServer
from pyremotepad._store import StoreSubscriptionRuntime
from pyremotepad.config import RemotePadConfig
from pyremotepad.exceptions import TransportStartError
from pyremotepad.models.keyboard import KeyboardIntent
from pyremotepad.models.vector import Vector2
from pyremotepad.state.action_queue import ActionQueue
from pyremotepad.state.merge import InputMergeState, MergeSnapshot
from pyremotepad.state.status import ConnectionSnapshot, ConnectionStatus
from pyremotepad.tick import FrameInput, TickConsumer

_logger = logging.getLogger(__name__)


class _Transport(Protocol):
    @property
    def status(self) -> ConnectionStatus: ...

    def start(self) -> None: ...

    def stop(self) -> None: ...


class RemoteController:
    """Remote input controller.

    Usage::

        with RemoteController(RemotePadConfig.from_env()) as controller:
            while running:
                frame = controller.tick(dt, KeyboardIntent.from_keys(held, pressed))
                move(frame.direction)
                if frame.interact:
                    interact()

    Transports run on their own threads and only enqueue; all merging
    happens inside :meth:`tick` on the caller's thread.
    """

    def __init__(
        self,
        config: RemotePadConfig | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config or RemotePadConfig()
        self._logger = logger or _logger
        self._queue = ActionQueue()
        self._state = InputMergeState(self._config.tuning)
        self._consumer = TickConsumer(self._queue, self._state, clock=clock)
        self._started = False

        cfg = self._config
        self._transports: dict[str, _Transport] = {}
        if cfg.socket_enabled:
            self._transports["socket"] = SocketCommandServer(
                queue=self._queue,
                host=cfg.socket_host,
                port=cfg.socket_port,
                max_line_bytes=cfg.socket_max_line_bytes,
                status=ConnectionStatus("socket"),
                shutdown_timeout=cfg.shutdown_timeout,
                logger=self._logger.getChild("socket"),
            )
        if cfg.http_enabled:
            self._transports["http"] = HttpControlServer(
                queue=self._queue,
                host=cfg.http_host,
                port=cfg.http_port,
                status=ConnectionStatus("http"),
                shutdown_timeout=cfg.shutdown_timeout,
                logger=self._logger.getChild("http"),
            )
        if cfg.store_enabled:
            self._transports["store"] = StoreSubscriptionRuntime(
                config=cfg.store,
                queue=self._queue,
                status=ConnectionStatus("store"),
                logger=self._logger.getChild("store"),
            )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def __enter__(self) -> RemoteController:
        self.start()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.stop()

    @property
    def config(self) -> RemotePadConfig:
        return self._config

    @property
    def queue(self) -> ActionQueue:
        return self._queue

    @property
    def state(self) -> InputMergeState:
        return self._state

    @property
    def transports(self) -> dict[str, _Transport]:
        return dict(self._transports)

    def start(self) -> None:
        """Start every enabled transport.

        A transport that fails to start is logged and recorded in its
        status; the others still start.
        """
        if self._started:
            return
        self._started = True
        for name, transport in self._transports.items():
            try:
                transport.start()
            except TransportStartError as exc:
                self._logger.error("%s transport unavailable: %s", name, exc)
                transport.status.mark_failed(str(exc))
        self._logger.info("Remote controller started: %s", self.status_text())

    def stop(self) -> None:
        if not self._started:
            return
        self._started = False
        for name, transport in self._transports.items():
            try:
                transport.stop()
            except Exception:
                self._logger.warning("Error stopping %s transport", name, exc_info=True)
        self._logger.info("Remote controller stopped")

    # ------------------------------------------------------------------
    # Per-frame API
    # ------------------------------------------------------------------

    def tick(self, dt: float, keyboard: KeyboardIntent | None = None) -> FrameInput:
        return self._consumer.tick(dt, keyboard)

    def get_current_direction(self) -> Vector2:
        """Smoothed direction for movement, at most unit length."""
        return self._consumer.get_current_direction()

    def consume_interact_pulse(self) -> bool:
        """True once after a tick that fired an interaction."""
        return self._consumer.consume_interact_pulse()

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    def statuses(self) -> dict[str, ConnectionSnapshot]:
        return {name: transport.status.snapshot() for name, transport in self._transports.items()}

    def merge_snapshot(self) -> MergeSnapshot:
        return self._state.snapshot()

    def status_text(self) -> str:
        """One-line summary suitable for an on-screen display."""
        parts = [snapshot.describe() for snapshot in self.statuses().values()]
        return " | ".join(parts) if parts else "no transports enabled"
