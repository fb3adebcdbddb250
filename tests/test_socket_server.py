from __future__ import annotations

import socket
import time
from collections.abc import Callable, Iterator

import pytest

from pyremotepad._socket_server import SocketCommandServer
from pyremotepad.exceptions import TransportStartError
from pyremotepad.models.commands import InteractCommand, MoveCommand
from pyremotepad.state.action_queue import ActionQueue
from pyremotepad.state.events import IngestionSource, PendingAction


def _wait_for(predicate: Callable[[], bool], timeout: float = 3.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def _drain(queue: ActionQueue) -> list[PendingAction]:
    drained: list[PendingAction] = []
    queue.drain_and_run(drained.append)
    return drained


@pytest.fixture
def server() -> Iterator[tuple[SocketCommandServer, ActionQueue]]:
    queue = ActionQueue()
    srv = SocketCommandServer(queue=queue, host="127.0.0.1", port=0, poll_interval=0.05)
    srv.start()
    try:
        yield srv, queue
    finally:
        srv.stop()


def test_lines_become_queued_actions(server: tuple[SocketCommandServer, ActionQueue]) -> None:
    srv, queue = server
    assert srv.bound_address is not None

    with socket.create_connection(srv.bound_address, timeout=2.0) as client:
        client.sendall(b"move,0.5,-0.5\r\nbogus\nmove,abc,1\ninteract\n")
        assert _wait_for(lambda: len(queue) == 2)

    actions = _drain(queue)
    assert [a.command for a in actions] == [MoveCommand(x=0.5, y=-0.5), InteractCommand()]
    assert all(a.source is IngestionSource.SOCKET for a in actions)

    snapshot = srv.status.snapshot()
    assert snapshot.running is True
    assert snapshot.connected_clients == 1
    assert snapshot.last_seen is not None


def test_unterminated_line_is_decoded_on_disconnect(server: tuple[SocketCommandServer, ActionQueue]) -> None:
    srv, queue = server
    assert srv.bound_address is not None

    with socket.create_connection(srv.bound_address, timeout=2.0) as client:
        client.sendall(b"move,")
        client.sendall(b"0,1")

    assert _wait_for(lambda: len(queue) == 1)
    assert _drain(queue)[0].command == MoveCommand(x=0.0, y=1.0)


def test_each_client_is_counted(server: tuple[SocketCommandServer, ActionQueue]) -> None:
    srv, queue = server
    assert srv.bound_address is not None

    for _ in range(2):
        with socket.create_connection(srv.bound_address, timeout=2.0) as client:
            client.sendall(b"interact\n")
            assert _wait_for(lambda: len(queue) >= 1)
        _drain(queue)

    assert _wait_for(lambda: srv.status.snapshot().connected_clients == 2)


def test_stop_unblocks_connected_client() -> None:
    queue = ActionQueue()
    srv = SocketCommandServer(queue=queue, host="127.0.0.1", port=0, poll_interval=0.05)
    srv.start()
    assert srv.bound_address is not None

    with socket.create_connection(srv.bound_address, timeout=2.0) as client:
        client.sendall(b"move,1,0\n")
        assert _wait_for(lambda: len(queue) == 1)
        srv.stop(timeout=2.0)

        assert srv.is_running is False
        assert srv.status.snapshot().running is False
        # The server closed its end, so the client sees EOF (or a reset).
        try:
            assert client.recv(16) == b""
        except ConnectionResetError:
            pass


def test_bind_conflict_on_loopback_raises() -> None:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as holder:
        holder.bind(("127.0.0.1", 0))
        holder.listen()
        port = holder.getsockname()[1]

        srv = SocketCommandServer(queue=ActionQueue(), host="127.0.0.1", port=port)
        with pytest.raises(TransportStartError) as excinfo:
            srv.start()

    assert excinfo.value.transport == "socket"
    assert excinfo.value.address == f"127.0.0.1:{port}"


def test_unbindable_host_falls_back_to_loopback() -> None:
    # 192.0.2.0/24 is reserved for documentation and never assigned locally.
    srv = SocketCommandServer(queue=ActionQueue(), host="192.0.2.1", port=0, poll_interval=0.05)
    srv.start()
    try:
        assert srv.bound_address is not None
        assert srv.bound_address[0] == "127.0.0.1"
        snapshot = srv.status.snapshot()
        assert snapshot.running is True
        assert snapshot.error is not None and "loopback" in snapshot.error
    finally:
        srv.stop()
