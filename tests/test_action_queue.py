from __future__ import annotations

import threading

from pyremotepad.models.commands import InteractCommand, MoveCommand
from pyremotepad.state.action_queue import ActionQueue
from pyremotepad.state.events import IngestionSource, PendingAction


def _move(x: float, y: float, source: IngestionSource = IngestionSource.SOCKET) -> PendingAction:
    return PendingAction(command=MoveCommand(x=x, y=y), source=source)


def test_drain_applies_actions_in_enqueue_order() -> None:
    queue = ActionQueue()
    queue.enqueue(_move(1, 0))
    queue.enqueue(PendingAction(command=InteractCommand(), source=IngestionSource.HTTP))
    queue.enqueue(_move(0, 1))

    seen: list[PendingAction] = []
    applied = queue.drain_and_run(seen.append)

    assert applied == 3
    assert [a.command.kind for a in seen] == ["move", "interact", "move"]
    assert seen[2].command == MoveCommand(x=0, y=1)
    assert len(queue) == 0


def test_drain_on_empty_queue_does_nothing() -> None:
    queue = ActionQueue()
    assert queue.drain_and_run(lambda _action: None) == 0


def test_action_enqueued_while_draining_waits_for_next_drain() -> None:
    queue = ActionQueue()
    queue.enqueue(_move(1, 0))

    seen: list[PendingAction] = []

    def apply(action: PendingAction) -> None:
        seen.append(action)
        if len(seen) == 1:
            queue.enqueue(_move(0, 1))

    assert queue.drain_and_run(apply) == 1
    assert len(queue) == 1
    assert queue.drain_and_run(apply) == 1
    assert seen[1].command == MoveCommand(x=0, y=1)


def test_enqueue_many_keeps_batch_contiguous() -> None:
    queue = ActionQueue()
    queue.enqueue(_move(0.1, 0.1))
    queue.enqueue_many(
        [
            _move(0.5, 0.5, IngestionSource.HTTP),
            PendingAction(command=InteractCommand(), source=IngestionSource.HTTP),
        ]
    )
    queue.enqueue_many([])

    seen: list[PendingAction] = []
    queue.drain_and_run(seen.append)
    assert [a.source for a in seen] == [IngestionSource.SOCKET, IngestionSource.HTTP, IngestionSource.HTTP]
    assert seen[2].command.kind == "interact"


def test_concurrent_producers_never_lose_actions() -> None:
    queue = ActionQueue()
    per_thread = 500
    start = threading.Barrier(4)

    def produce(index: int) -> None:
        start.wait()
        for i in range(per_thread):
            queue.enqueue(_move(index, i))

    threads = [threading.Thread(target=produce, args=(n,)) for n in range(4)]
    for thread in threads:
        thread.start()

    drained: list[PendingAction] = []
    while any(thread.is_alive() for thread in threads):
        queue.drain_and_run(drained.append)
    for thread in threads:
        thread.join()
    queue.drain_and_run(drained.append)

    assert len(drained) == 4 * per_thread
    # Per-producer order survives interleaving.
    for index in range(4):
        ys = [a.command.y for a in drained if a.command.x == index]
        assert ys == sorted(ys)
