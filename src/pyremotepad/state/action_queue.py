"""Cross-thread action queue.

Many producers (transport threads and callbacks), one consumer (the tick
thread). The lock only guards appending and detaching the pending batch;
actions are applied outside it, so an action that enqueues another, or a
producer that enqueues mid-drain, simply lands in the next drain.
"""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Callable, Iterable

from pyremotepad.state.events import PendingAction


class ActionQueue:
    """Unbounded FIFO of :class:`PendingAction` shared by all transports."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pending: deque[PendingAction] = deque()

    def enqueue(self, action: PendingAction) -> None:
        """Append *action*. Safe from any thread; never drops."""
        with self._lock:
            self._pending.append(action)

    def enqueue_many(self, actions: Iterable[PendingAction]) -> None:
        """Append several actions with no other producer's action between them."""
        batch = list(actions)
        if not batch:
            return
        with self._lock:
            self._pending.extend(batch)

    def drain_and_run(self, apply: Callable[[PendingAction], None]) -> int:
        """Apply every action queued so far, in enqueue order.

        Must only be called from the consumer thread. Returns the number of
        actions applied. Does not wait for new actions.
        """
        with self._lock:
            if not self._pending:
                return 0
            batch = self._pending
            self._pending = deque()

        for action in batch:
            apply(action)
        return len(batch)

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)
