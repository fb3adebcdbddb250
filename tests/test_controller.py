from __future__ import annotations

import socket
import time
from collections.abc import Callable

from pyremotepad.config import RemotePadConfig, StoreConfig
from pyremotepad.controller import RemoteController
from pyremotepad.models.keyboard import KeyboardIntent
from pyremotepad.models.vector import Vector2


def _wait_for(predicate: Callable[[], bool], timeout: float = 3.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def _loopback_config(**overrides: object) -> RemotePadConfig:
    values: dict[str, object] = {
        "socket_host": "127.0.0.1",
        "socket_port": 0,
        "http_host": "127.0.0.1",
        "http_port": 0,
        "shutdown_timeout": 1.0,
    }
    values.update(overrides)
    return RemotePadConfig(**values)  # type: ignore[arg-type]


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def test_no_transports_still_ticks() -> None:
    controller = RemoteController(_loopback_config(socket_enabled=False, http_enabled=False))
    with controller:
        frame = controller.tick(0.05, KeyboardIntent(vertical=1, interact=True))

    assert controller.status_text() == "no transports enabled"
    assert controller.statuses() == {}
    assert frame.interact is True
    assert controller.consume_interact_pulse() is True
    assert controller.consume_interact_pulse() is False
    assert controller.get_current_direction().y > 0


def test_socket_command_reaches_tick() -> None:
    with RemoteController(_loopback_config(http_enabled=False)) as controller:
        server = controller.transports["socket"]
        address = server.bound_address  # type: ignore[attr-defined]
        assert address is not None

        with socket.create_connection(address, timeout=2.0) as client:
            client.sendall(b"move,0,1\ninteract\n")
            assert _wait_for(lambda: len(controller.queue) == 2)

        frame = controller.tick(1.0)
        assert frame.applied_actions == 2
        assert frame.direction == Vector2(0.0, 1.0)
        assert frame.interact is True
        assert controller.merge_snapshot().mobile_input == (0.0, 1.0)

        statuses = controller.statuses()
        assert set(statuses) == {"socket"}
        assert statuses["socket"].connected_clients == 1

    assert controller.statuses()["socket"].running is False


def test_failed_transport_does_not_stop_others() -> None:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as holder:
        holder.bind(("127.0.0.1", 0))
        holder.listen()
        taken = holder.getsockname()[1]

        config = _loopback_config(
            socket_port=taken,
            store_enabled=True,
            store=StoreConfig(url=f"mqtt://127.0.0.1:{_free_port()}"),
        )
        with RemoteController(config) as controller:
            statuses = controller.statuses()

            assert statuses["socket"].running is False
            assert statuses["socket"].error is not None
            assert statuses["store"].running is False
            assert statuses["store"].error is not None
            assert statuses["http"].running is True
            assert "socket: failed" in controller.status_text()
