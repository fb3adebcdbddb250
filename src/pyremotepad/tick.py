"""Per-frame consumer of the action queue."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from pyremotepad.models.keyboard import KeyboardIntent
from pyremotepad.models.vector import Vector2
from pyremotepad.state.action_queue import ActionQueue
from pyremotepad.state.merge import InputMergeState

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FrameInput:
    """What the movement and animation collaborators read for one frame."""

    direction: Vector2
    final_input: Vector2
    interact: bool
    applied_actions: int


class TickConsumer:
    """Drains the queue and runs the merge sequence once per frame.

    Must be driven from a single thread (the simulation loop). Never blocks
    on transport I/O: each tick only applies what is already queued.
    """

    def __init__(
        self,
        queue: ActionQueue,
        state: InputMergeState,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._queue = queue
        self._state = state
        self._clock = clock
        self._ticks = 0

    @property
    def state(self) -> InputMergeState:
        return self._state

    @property
    def ticks(self) -> int:
        return self._ticks

    def tick(self, dt: float, keyboard: KeyboardIntent | None = None) -> FrameInput:
        """Advance one frame of ``dt`` seconds."""
        if dt < 0:
            raise ValueError(f"dt must be non-negative, got {dt}")

        state = self._state
        applied = self._queue.drain_and_run(state.apply)
        state.expire_mobile_input(self._clock())

        state.update_keyboard(keyboard, dt)
        state.merge(dt)
        interact = state.resolve_interaction()
        self._ticks += 1

        if interact:
            _logger.debug("Interact fired on tick %d", self._ticks)

        return FrameInput(
            direction=state.direction,
            final_input=state.final_input,
            interact=interact,
            applied_actions=applied,
        )

    def get_current_direction(self) -> Vector2:
        return self._state.direction

    def consume_interact_pulse(self) -> bool:
        return self._state.consume_interact_pulse()
