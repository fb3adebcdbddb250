"""aiohttp control server running on its own thread and event loop."""

from __future__ import annotations

import asyncio
import logging
import threading

from aiohttp import web

from pyremotepad._constants import DEFAULT_SHUTDOWN_TIMEOUT, LOOPBACK_HOST, LOOPBACK_HOSTS
from pyremotepad._page import CONTROL_PAGE_HTML
from pyremotepad._redact import redact_for_log
from pyremotepad.exceptions import CommandDecodeError, TransportStartError
from pyremotepad.ingestion.http_control import decode_control_body
from pyremotepad.state.action_queue import ActionQueue
from pyremotepad.state.events import IngestionSource, PendingAction
from pyremotepad.state.status import ConnectionStatus

_STARTUP_TIMEOUT = 5.0


def _error(message: str, status: int) -> web.Response:
    return web.json_response({"status": "error", "message": message}, status=status)


class _ControlHandlers:
    """Request handlers sharing the queue, status and peer bookkeeping."""

    def __init__(self, queue: ActionQueue, status: ConnectionStatus, logger: logging.Logger) -> None:
        self._queue = queue
        self._status = status
        self._logger = logger
        self._peers: set[str] = set()

    def _note_peer(self, request: web.Request) -> None:
        peer = request.remote or "unknown"
        if peer in self._peers:
            return
        self._peers.add(peer)
        count = self._status.client_connected()
        self._logger.info("HTTP controller connected from %s (client #%d)", peer, count)

    async def index(self, request: web.Request) -> web.Response:
        self._note_peer(request)
        return web.Response(text=CONTROL_PAGE_HTML, content_type="text/html", charset="utf-8")

    async def control(self, request: web.Request) -> web.Response:
        if request.method != "POST":
            return _error(f"method {request.method} not allowed", 405)
        self._note_peer(request)

        body = await request.read()
        try:
            commands = decode_control_body(body)
        except CommandDecodeError as exc:
            self._logger.warning(
                "Rejected control request from %s: %s (%r)",
                request.remote,
                exc,
                redact_for_log(body),
            )
            return _error(str(exc), 400)

        self._status.mark_seen()
        self._queue.enqueue_many(PendingAction(command=command, source=IngestionSource.HTTP) for command in commands)
        self._logger.debug("Queued %d command(s) from %s", len(commands), request.remote)
        return web.json_response({"status": "success"})

    async def not_found(self, request: web.Request) -> web.Response:
        self._logger.debug("No route for %s %s", request.method, request.path)
        return _error("path not found", 404)


def build_app(
    *,
    queue: ActionQueue,
    status: ConnectionStatus | None = None,
    logger: logging.Logger | None = None,
) -> web.Application:
    """Build the control application.

    ``GET /`` and ``GET /index.html`` serve the joystick page, ``/control``
    accepts POSTed joystick state, and every other path answers 404 JSON.
    """
    handlers = _ControlHandlers(
        queue,
        status or ConnectionStatus("http"),
        logger or logging.getLogger(__name__),
    )
    app = web.Application()
    app.router.add_get("/", handlers.index)
    app.router.add_get("/index.html", handlers.index)
    app.router.add_route("*", "/control", handlers.control)
    app.router.add_route("*", "/{tail:.*}", handlers.not_found)
    return app


class HttpControlServer:
    """Serves :func:`build_app` from a background thread.

    :meth:`start` blocks until the site is listening (or failed) so callers
    see bind errors as :class:`TransportStartError`.
    """

    def __init__(
        self,
        *,
        queue: ActionQueue,
        host: str,
        port: int,
        status: ConnectionStatus | None = None,
        shutdown_timeout: float = DEFAULT_SHUTDOWN_TIMEOUT,
        logger: logging.Logger | None = None,
    ) -> None:
        self._host = host
        self._port = port
        self._shutdown_timeout = shutdown_timeout
        self._status = status or ConnectionStatus("http")
        self._logger = logger or logging.getLogger(__name__)
        self._app = build_app(queue=queue, status=self._status, logger=self._logger)

        self._thread: threading.Thread | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._ready = threading.Event()
        self._startup_error: BaseException | None = None
        self._bound_address: tuple[str, int] | None = None
        self._note: str | None = None

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    @property
    def is_running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    @property
    def bound_address(self) -> tuple[str, int] | None:
        return self._bound_address

    async def _start_site(self, runner: web.AppRunner) -> tuple[str, int]:
        try:
            site = web.TCPSite(runner, self._host, self._port)
            await site.start()
        except OSError as exc:
            if self._host in LOOPBACK_HOSTS:
                raise
            self._logger.warning(
                "HTTP server could not bind %s:%s (%s); retrying on %s",
                self._host,
                self._port,
                exc,
                LOOPBACK_HOST,
            )
            site = web.TCPSite(runner, LOOPBACK_HOST, self._port)
            await site.start()
            self._note = f"loopback only ({exc})"
        host, port = runner.addresses[0][:2]
        return host, port

    def _run(self) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._loop = loop
        runner = web.AppRunner(self._app, access_log=None)
        try:
            loop.run_until_complete(runner.setup())
            try:
                self._bound_address = loop.run_until_complete(self._start_site(runner))
            except OSError as exc:
                self._startup_error = exc
                return
            self._ready.set()
            loop.run_forever()
        finally:
            loop.run_until_complete(runner.cleanup())
            self._loop = None
            loop.close()
            self._ready.set()

    def start(self) -> None:
        """Start serving; raises :class:`TransportStartError` if binding fails."""
        if self.is_running:
            return
        self._ready.clear()
        self._startup_error = None
        self._bound_address = None
        self._note = None

        thread = threading.Thread(target=self._run, name="pyremotepad-http", daemon=True)
        self._thread = thread
        thread.start()

        address = f"{self._host}:{self._port}"
        if not self._ready.wait(_STARTUP_TIMEOUT):
            self.stop()
            raise TransportStartError("HTTP server did not start in time", transport="http", address=address)
        if self._startup_error is not None or self._bound_address is None:
            thread.join(_STARTUP_TIMEOUT)
            self._thread = None
            raise TransportStartError(
                f"HTTP server failed to bind {address}: {self._startup_error}",
                transport="http",
                address=address,
            ) from self._startup_error

        host, port = self._bound_address
        self._status.mark_started(f"{host}:{port}", note=self._note)
        self._logger.info("HTTP control server started on http://%s:%s/", host, port)

    def stop(self, timeout: float | None = None) -> None:
        """Stop the event loop and wait for the server thread."""
        if timeout is None:
            timeout = self._shutdown_timeout
        loop = self._loop
        thread = self._thread
        self._thread = None
        if loop is not None:
            try:
                loop.call_soon_threadsafe(loop.stop)
            except RuntimeError:
                self._logger.debug("HTTP event loop already closed")
        if thread is not None:
            thread.join(timeout)
        self._status.mark_stopped()
        self._logger.debug("HTTP control server stopped")
