"""Threaded TCP listener for the socket text protocol."""

from __future__ import annotations

import logging
import socket
import threading

from pyremotepad._constants import (
    DEFAULT_SHUTDOWN_TIMEOUT,
    LOOPBACK_HOST,
    LOOPBACK_HOSTS,
    SOCKET_MAX_LINE_BYTES,
    SOCKET_POLL_INTERVAL,
    SOCKET_READ_SIZE,
)
from pyremotepad._redact import redact_for_log
from pyremotepad.exceptions import CommandDecodeError, TransportStartError
from pyremotepad.ingestion.socket_text import LineFramer, decode_frame
from pyremotepad.state.action_queue import ActionQueue
from pyremotepad.state.events import IngestionSource, PendingAction
from pyremotepad.state.status import ConnectionStatus


class SocketCommandServer:
    """Accepts handheld clients and turns their lines into queued actions.

    One listener thread accepts connections; each client gets a reader
    thread. Every blocking call times out after ``poll_interval`` so the
    loops notice :meth:`stop`, which also closes the sockets to unblock
    any pending read.
    """

    def __init__(
        self,
        *,
        queue: ActionQueue,
        host: str,
        port: int,
        max_line_bytes: int = SOCKET_MAX_LINE_BYTES,
        status: ConnectionStatus | None = None,
        poll_interval: float = SOCKET_POLL_INTERVAL,
        shutdown_timeout: float = DEFAULT_SHUTDOWN_TIMEOUT,
        logger: logging.Logger | None = None,
    ) -> None:
        self._queue = queue
        self._host = host
        self._port = port
        self._max_line_bytes = max_line_bytes
        self._status = status or ConnectionStatus("socket")
        self._poll_interval = poll_interval
        self._shutdown_timeout = shutdown_timeout
        self._logger = logger or logging.getLogger(__name__)

        self._stop_event = threading.Event()
        self._listener: socket.socket | None = None
        self._listener_thread: threading.Thread | None = None
        self._clients_lock = threading.Lock()
        self._clients: dict[socket.socket, threading.Thread] = {}
        self._bound_address: tuple[str, int] | None = None

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    @property
    def is_running(self) -> bool:
        thread = self._listener_thread
        return thread is not None and thread.is_alive() and not self._stop_event.is_set()

    @property
    def bound_address(self) -> tuple[str, int] | None:
        """``(host, port)`` actually bound, or ``None`` before start."""
        return self._bound_address

    def _bind(self, host: str) -> socket.socket:
        family = socket.AF_INET6 if ":" in host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((host, self._port))
            sock.listen()
            sock.settimeout(self._poll_interval)
        except OSError:
            sock.close()
            raise
        return sock

    def start(self) -> None:
        """Bind and start listening; falls back to loopback once."""
        if self.is_running:
            return
        self._stop_event.clear()

        note: str | None = None
        try:
            listener = self._bind(self._host)
        except OSError as exc:
            if self._host in LOOPBACK_HOSTS:
                raise TransportStartError(
                    f"Socket listener failed to bind {self._host}:{self._port}: {exc}",
                    transport="socket",
                    address=f"{self._host}:{self._port}",
                ) from exc
            self._logger.warning(
                "Socket listener could not bind %s:%s (%s); retrying on %s",
                self._host,
                self._port,
                exc,
                LOOPBACK_HOST,
            )
            try:
                listener = self._bind(LOOPBACK_HOST)
            except OSError as fallback_exc:
                raise TransportStartError(
                    f"Socket listener failed to bind {self._host}:{self._port} and loopback: {fallback_exc}",
                    transport="socket",
                    address=f"{self._host}:{self._port}",
                ) from fallback_exc
            note = f"loopback only ({exc})"

        host, port = listener.getsockname()[:2]
        self._listener = listener
        self._bound_address = (host, port)
        self._listener_thread = threading.Thread(
            target=self._accept_loop,
            name=f"pyremotepad-socket-{port}",
            daemon=True,
        )
        self._listener_thread.start()
        self._status.mark_started(f"{host}:{port}", note=note)
        self._logger.info("Socket listener started on %s:%s", host, port)

    def stop(self, timeout: float | None = None) -> None:
        """Signal the loops to stop, close every socket, and join the threads."""
        if timeout is None:
            timeout = self._shutdown_timeout
        self._stop_event.set()

        listener = self._listener
        self._listener = None
        if listener is not None:
            listener.close()

        with self._clients_lock:
            clients = list(self._clients.items())
        for conn, _thread in clients:
            try:
                conn.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            conn.close()

        thread = self._listener_thread
        self._listener_thread = None
        if thread is not None:
            thread.join(timeout)
        for _conn, reader in clients:
            reader.join(timeout)

        self._status.mark_stopped()
        self._logger.debug("Socket listener stopped")

    def _accept_loop(self) -> None:
        while not self._stop_event.is_set():
            listener = self._listener
            if listener is None:
                break
            try:
                conn, peer = listener.accept()
            except TimeoutError:
                continue
            except OSError:
                if not self._stop_event.is_set():
                    self._logger.warning("Socket accept failed", exc_info=True)
                break

            conn.settimeout(self._poll_interval)
            count = self._status.client_connected()
            self._logger.info("Handheld connected from %s:%s (client #%d)", peer[0], peer[1], count)
            reader = threading.Thread(
                target=self._serve_client,
                args=(conn, peer),
                name=f"pyremotepad-socket-client-{count}",
                daemon=True,
            )
            with self._clients_lock:
                self._clients[conn] = reader
            reader.start()

    def _serve_client(self, conn: socket.socket, peer: tuple[str, int]) -> None:
        framer = LineFramer(max_line_bytes=self._max_line_bytes)
        overflows = 0
        try:
            while not self._stop_event.is_set():
                try:
                    data = conn.recv(SOCKET_READ_SIZE)
                except TimeoutError:
                    continue
                except OSError as exc:
                    if not self._stop_event.is_set():
                        self._logger.warning("Socket client %s:%s read failed: %s", peer[0], peer[1], exc)
                    break
                if not data:
                    break

                for frame in framer.feed(data):
                    self._handle_frame(frame, peer)
                if framer.overflows != overflows:
                    overflows = framer.overflows
                    self._logger.warning(
                        "Socket client %s:%s sent a line over %d bytes; discarded",
                        peer[0],
                        peer[1],
                        self._max_line_bytes,
                    )

            remainder = framer.flush()
            if remainder is not None:
                self._handle_frame(remainder, peer)
        finally:
            with self._clients_lock:
                self._clients.pop(conn, None)
            conn.close()
            self._logger.info("Handheld %s:%s disconnected", peer[0], peer[1])

    def _handle_frame(self, frame: bytes, peer: tuple[str, int]) -> None:
        try:
            command = decode_frame(frame)
        except CommandDecodeError as exc:
            self._logger.warning(
                "Dropped socket command from %s:%s: %s (%r)",
                peer[0],
                peer[1],
                exc,
                redact_for_log(frame),
            )
            return
        except Exception:
            self._logger.warning("Socket command decode failure", exc_info=True)
            return

        if command is None:
            return
        self._status.mark_seen()
        self._queue.enqueue(PendingAction(command=command, source=IngestionSource.SOCKET))
        self._logger.debug("Queued %s from socket %s:%s", command, peer[0], peer[1])
