"""Input merge state.

This is the only component allowed to merge incoming input. It has a
single writer: the tick thread, while draining the action queue and while
running the per-tick merge sequence.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict

from pyremotepad.config import MergeTuning
from pyremotepad.models.commands import InteractCommand, MoveCommand
from pyremotepad.models.keyboard import KeyboardIntent
from pyremotepad.models.vector import Vector2
from pyremotepad.state.events import PendingAction
from pyremotepad.state.policy import (
    keyboard_target,
    resolve_interact,
    select_final_input,
    smooth_toward,
)

_logger = logging.getLogger(__name__)


class MergeSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    keyboard_target: tuple[float, float]
    keyboard_current: tuple[float, float]
    mobile_input: tuple[float, float]
    final_input: tuple[float, float]
    current_input: tuple[float, float]
    mobile_interact_pending: bool
    keyboard_interact_pending: bool
    interact_pulse: bool


class InputMergeState:
    """Last-known keyboard and mobile input plus smoothing state.

    Per tick the owner calls, in order: :meth:`update_keyboard`,
    :meth:`merge`, :meth:`resolve_interaction`. :meth:`apply` runs for each
    drained action before that sequence.
    """

    def __init__(self, tuning: MergeTuning | None = None) -> None:
        self._tuning = tuning or MergeTuning()

        self.keyboard_target = Vector2.ZERO
        self.keyboard_current = Vector2.ZERO
        self.mobile_input = Vector2.ZERO
        self.final_input = Vector2.ZERO
        self.current_input = Vector2.ZERO
        self.mobile_interact_pending = False
        self.keyboard_interact_pending = False
        self.interact_pulse = False
        self.last_mobile_move_at: float | None = None

    @property
    def tuning(self) -> MergeTuning:
        return self._tuning

    def apply(self, action: PendingAction) -> None:
        """Apply one drained action. Last writer wins for the mobile vector."""
        command = action.command
        if isinstance(command, MoveCommand):
            self.mobile_input = command.vector
            self.last_mobile_move_at = action.received_at
        elif isinstance(command, InteractCommand):
            self.mobile_interact_pending = True
        _logger.debug("Applied %s from %s", command.kind, action.source)

    def expire_mobile_input(self, now: float) -> bool:
        """Zero a stale mobile vector when the idle timeout is enabled."""
        timeout = self._tuning.mobile_idle_timeout
        if timeout <= 0 or self.last_mobile_move_at is None:
            return False
        if self.mobile_input == Vector2.ZERO or now - self.last_mobile_move_at < timeout:
            return False
        _logger.debug("Mobile input idle for %.2fs; zeroing %s", now - self.last_mobile_move_at, self.mobile_input)
        self.mobile_input = Vector2.ZERO
        return True

    def update_keyboard(self, intent: KeyboardIntent | None, dt: float) -> None:
        if not self._tuning.keyboard_enabled:
            return
        intent = intent or KeyboardIntent()
        if intent.interact:
            self.keyboard_interact_pending = True
        self.keyboard_target = keyboard_target(intent.horizontal, intent.vertical)
        self.keyboard_current = smooth_toward(
            self.keyboard_current,
            self.keyboard_target,
            dt=dt,
            acceleration=self._tuning.acceleration,
            deceleration=self._tuning.deceleration,
            dead_zone=self._tuning.dead_zone,
        )

    def merge(self, dt: float) -> None:
        self.final_input = select_final_input(self.mobile_input, self.keyboard_current, self._tuning.dead_zone)
        self.current_input = smooth_toward(
            self.current_input,
            self.final_input,
            dt=dt,
            acceleration=self._tuning.acceleration,
            deceleration=self._tuning.deceleration,
            dead_zone=self._tuning.dead_zone,
        )

    def resolve_interaction(self) -> bool:
        fired = resolve_interact(self.mobile_interact_pending, self.keyboard_interact_pending)
        self.mobile_interact_pending = False
        self.keyboard_interact_pending = False
        self.interact_pulse = fired
        return fired

    def consume_interact_pulse(self) -> bool:
        """Return this tick's interaction once; later calls return False."""
        fired = self.interact_pulse
        self.interact_pulse = False
        return fired

    @property
    def direction(self) -> Vector2:
        """Smoothed direction for the movement consumer, at most unit length."""
        return self.current_input.clamp_magnitude(1.0)

    def snapshot(self) -> MergeSnapshot:
        def pair(v: Vector2) -> tuple[float, float]:
            return (v.x, v.y)

        return MergeSnapshot(
            keyboard_target=pair(self.keyboard_target),
            keyboard_current=pair(self.keyboard_current),
            mobile_input=pair(self.mobile_input),
            final_input=pair(self.final_input),
            current_input=pair(self.current_input),
            mobile_interact_pending=self.mobile_interact_pending,
            keyboard_interact_pending=self.keyboard_interact_pending,
            interact_pulse=self.interact_pulse,
        )
